"""카탈로그 행 → 검색 문서 변환 (products / suppliers)

products 문서:
    {id, title, price, image, url, moq, country, category, supplier, source}

외래키(country/category/supplier/source)는 쓰기 시점에 표시 이름으로 풀어서 저장 —
인덱스에는 raw 외래키가 절대 들어가지 않는다.
"""

from typing import NamedTuple

# 외래키가 없거나 풀리지 않을 때 쓰는 표시 값
UNKNOWN_LABEL = "Unknown"

# 검색 문서 필드 ← Products 컬럼 (외래키 제외)
PRODUCT_FIELDS = {
    "id": "Product_ID",
    "title": "Product_Title",
    "price": "Product_Price",
    "image": "Product_Image_URL",
    "url": "Product_Title_URL",
    "moq": "Product_MOQ",
}


class ForeignKey(NamedTuple):
    field: str          # 검색 문서 필드
    record_key: str     # Products 행의 외래키 컬럼
    table: str          # 조회 테이블
    id_column: str
    title_column: str


FOREIGN_KEYS = (
    ForeignKey("country", "Product_Country_ID", "Countries", "Country_ID", "Country_Title"),
    ForeignKey("category", "Product_Category_ID", "Categories", "Category_ID", "Category_Title"),
    ForeignKey("supplier", "Product_Supplier_ID", "Supplier", "Supplier_ID", "Supplier_Title"),
    ForeignKey("source", "Product_Source_ID", "Sources", "Source_ID", "Source_Title"),
)

# 전체 재색인용 select (조회 테이블 조인 포함)
PRODUCT_SELECT = ", ".join(
    [*PRODUCT_FIELDS.values()]
    + [f"{fk.table} ({fk.title_column})" for fk in FOREIGN_KEYS]
)

SUPPLIER_COLUMNS = (
    "Supplier_ID",
    "Supplier_Title",
    "Supplier_Description",
    "Supplier_Website",
    "Supplier_Email",
    "Supplier_Location",
    "Supplier_Whatsapp",
    "Supplier_Country_Name",
    "Supplier_City_Name",
    "Supplier_Source_ID",
)

MIN_KEYWORD_LENGTH = 3


def _display(title: str | None) -> str:
    return title if title else UNKNOWN_LABEL


def product_document(row: dict) -> dict:
    """조인된 Products 행 → 검색 문서 (전체 재색인)

    row 예: {"Product_ID": "1", ..., "Countries": {"Country_Title": "Mexico"}, ...}
    """
    doc = {name: row.get(column) for name, column in PRODUCT_FIELDS.items()}
    for fk in FOREIGN_KEYS:
        joined = row.get(fk.table) or {}
        doc[fk.field] = _display(joined.get(fk.title_column))
    return doc


def product_document_from_record(record: dict, titles: dict[str, str | None]) -> dict:
    """change event record + 조회된 표시 이름 → 전체 검색 문서 (INSERT)"""
    doc = {name: record.get(column) for name, column in PRODUCT_FIELDS.items()}
    for fk in FOREIGN_KEYS:
        doc[fk.field] = _display(titles.get(fk.field))
    return doc


def partial_product_document(record: dict, titles: dict[str, str | None]) -> dict:
    """UPDATE용 부분 문서.

    record에 값이 없는 필드와, record에 없는 외래키는 문서에서 빠진다 —
    merge 업데이트에서 기존 값이 null로 덮이지 않게.
    """
    doc = {
        name: record[column]
        for name, column in PRODUCT_FIELDS.items()
        if record.get(column) is not None
    }
    for fk in FOREIGN_KEYS:
        if fk.field in titles:
            doc[fk.field] = _display(titles[fk.field])
    return doc


# ============================================================
# suppliers: 상품 키워드 보강
# ============================================================
def tokenize(text: str | None) -> list[str]:
    """공백 분리 + 소문자, 3글자 이상 토큰만"""
    if not text:
        return []
    return [w for w in text.lower().split() if len(w) >= MIN_KEYWORD_LENGTH]


def aggregate_supplier_products(products: list[dict]) -> dict[str, dict]:
    """
    Products 행들을 공급자 id 기준으로 묶는다.

    Returns:
        {supplier_id: {"count": int, "keywords": dict[str, None]}}
        keywords는 삽입 순서를 유지하는 집합 (dict 키)
    """
    grouped: dict[str, dict] = {}
    for product in products:
        supplier_id = product.get("Product_Supplier_ID")
        if not supplier_id:
            continue
        data = grouped.setdefault(supplier_id, {"count": 0, "keywords": {}})
        data["count"] += 1
        for word in tokenize(product.get("Product_Title")):
            data["keywords"].setdefault(word, None)
        for word in tokenize(product.get("Product_Category_Name")):
            data["keywords"].setdefault(word, None)
    return grouped


def enrich_suppliers(suppliers: list[dict], products: list[dict]) -> list[dict]:
    """공급자 행 + product_count + product_keywords. 상품이 없는 공급자도 포함."""
    grouped = aggregate_supplier_products(products)
    enriched = []
    for supplier in suppliers:
        data = grouped.get(supplier["Supplier_ID"])
        enriched.append({
            **supplier,
            "product_count": data["count"] if data else 0,
            "product_keywords": " ".join(data["keywords"]) if data else "",
        })
    return enriched
