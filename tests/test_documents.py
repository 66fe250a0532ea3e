"""행 → 검색 문서 변환 + 공급자 키워드 집계"""

from catalog_sync.documents import (
    PRODUCT_SELECT,
    UNKNOWN_LABEL,
    aggregate_supplier_products,
    enrich_suppliers,
    partial_product_document,
    product_document,
    product_document_from_record,
    tokenize,
)

from conftest import joined_row


def test_product_document_resolves_joins():
    doc = product_document(joined_row(1))
    assert doc == {
        "id": "1",
        "title": "Product 1",
        "price": "9.99",
        "image": "https://img.example.com/1.jpg",
        "url": "https://shop.example.com/1",
        "moq": "10",
        "country": "Mexico",
        "category": "Tools",
        "supplier": "Acme",
        "source": "Alibaba",
    }


def test_product_document_missing_join_is_unknown():
    """조인 결과가 없거나(null) 제목이 비어 있으면 Unknown"""
    row = joined_row(2, country=None)
    row["Sources"] = {"Source_Title": ""}
    doc = product_document(row)
    assert doc["country"] == UNKNOWN_LABEL
    assert doc["source"] == UNKNOWN_LABEL
    assert doc["category"] == "Tools"


def test_product_select_contains_nested_joins():
    assert "Countries (Country_Title)" in PRODUCT_SELECT
    assert "Sources (Source_Title)" in PRODUCT_SELECT
    assert PRODUCT_SELECT.startswith("Product_ID, Product_Title")


def test_document_from_record_unresolved_fk():
    record = {"Product_ID": "1", "Product_Title": "X", "Product_Country_ID": "c1"}
    titles = {"country": "Mexico", "category": None, "supplier": None, "source": None}
    doc = product_document_from_record(record, titles)
    assert doc["id"] == "1"
    assert doc["country"] == "Mexico"
    assert doc["category"] == UNKNOWN_LABEL
    assert doc["price"] is None


def test_partial_document_only_present_fields():
    """UPDATE: record에 없는 필드/외래키는 문서에서 빠진다"""
    record = {"Product_ID": "1", "Product_Title": "New title"}
    doc = partial_product_document(record, {})
    assert doc == {"id": "1", "title": "New title"}

    # 있는데 풀리지 않은 외래키는 Unknown
    doc = partial_product_document(
        {"Product_ID": "1", "Product_Title": "t", "Product_Country_ID": "zz"},
        {"country": None},
    )
    assert doc["country"] == UNKNOWN_LABEL
    assert "category" not in doc


def test_tokenize():
    assert tokenize("Blue  Widget of XL") == ["blue", "widget"]
    assert tokenize(None) == []
    assert tokenize("") == []


def test_keyword_aggregation_is_a_set():
    products = [
        {"Product_Supplier_ID": "s1", "Product_Title": "Blue Widget"},
        {"Product_Supplier_ID": "s1", "Product_Title": "Red Widget"},
    ]
    grouped = aggregate_supplier_products(products)
    assert grouped["s1"]["count"] == 2
    assert list(grouped["s1"]["keywords"]) == ["blue", "widget", "red"]


def test_aggregation_skips_products_without_supplier():
    products = [
        {"Product_Supplier_ID": None, "Product_Title": "Orphan Widget"},
        {"Product_Supplier_ID": "s2", "Product_Title": "Lamp", "Product_Category_Name": "Home Lighting"},
    ]
    grouped = aggregate_supplier_products(products)
    assert list(grouped) == ["s2"]
    assert list(grouped["s2"]["keywords"]) == ["lamp", "home", "lighting"]


def test_enrich_suppliers_includes_zero_product_suppliers():
    suppliers = [
        {"Supplier_ID": "s1", "Supplier_Title": "Acme"},
        {"Supplier_ID": "s9", "Supplier_Title": "Empty Co"},
    ]
    products = [
        {"Product_Supplier_ID": "s1", "Product_Title": "Blue Widget"},
        {"Product_Supplier_ID": "s1", "Product_Title": "Red Widget"},
    ]
    enriched = enrich_suppliers(suppliers, products)

    acme, empty = enriched
    assert acme["product_count"] == 2
    keywords = acme["product_keywords"].split(" ")
    assert sorted(keywords) == ["blue", "red", "widget"]
    assert keywords.count("widget") == 1
    assert acme["Supplier_Title"] == "Acme"

    assert empty["product_count"] == 0
    assert empty["product_keywords"] == ""
