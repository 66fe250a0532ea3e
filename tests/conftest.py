"""테스트 공용 — 메모리 기반 CatalogSource / SearchIndexer 대체 구현"""

import pytest

from catalog_sync.config import Config
from catalog_sync.errors import AuthError, UpstreamError
from catalog_sync.indexer import IndexTask
from catalog_sync.schema import IndexSettings, PRODUCTS_SETTINGS


class FakeSource:
    """
    Supabase 대신 dict/list로 동작하는 source.

    products:  조인된 Products 행 (전체 재색인용)
    lookups:   {table: {id: title}}
    """

    def __init__(
        self,
        products=None,
        lookups=None,
        suppliers=None,
        supplier_products=None,
        tokens=None,
    ):
        self.products = list(products or [])
        self.lookups = lookups or {}
        self.suppliers = list(suppliers or [])
        self.supplier_products = list(supplier_products or [])
        self.tokens = tokens if tokens is not None else {"good-token": "user-1"}
        self.embeddings: dict[str, list[float]] = {}
        self.error_logs: list[dict] = []
        self.fail_error_log = False
        self.lookup_calls = []

    async def count_products(self) -> int:
        return len(self.products)

    async def fetch_products(self, start: int, end: int) -> list[dict]:
        return self.products[start : end + 1]

    async def fetch_supplier_products(self) -> list[dict]:
        return self.supplier_products

    async def fetch_product_titles(self) -> list[dict]:
        return [
            {"Product_ID": p["Product_ID"], "Product_Title": p["Product_Title"]}
            for p in self.products
        ]

    async def update_product_embedding(self, product_id, embedding):
        self.embeddings[product_id] = embedding

    async def lookup_title(self, fk, value):
        self.lookup_calls.append((fk.table, value))
        return self.lookups.get(fk.table, {}).get(value)

    async def fetch_suppliers(self) -> list[dict]:
        return self.suppliers

    async def verify_token(self, token: str) -> str:
        if token not in self.tokens:
            raise AuthError("Invalid authentication")
        return self.tokens[token]

    async def insert_error_log(self, record: dict):
        if self.fail_error_log:
            raise UpstreamError("error_logs insert 실패")
        self.error_logs.append(record)


class FakeIndexer:
    """primary key 기준 dict 저장소. 변경 호출 횟수를 기록한다."""

    def __init__(self, index_name: str = "products", settings: IndexSettings = PRODUCTS_SETTINGS):
        self.index_name = index_name
        self.settings = settings
        self.docs: dict[str, dict] = {}
        self.exists = False
        self.calls: list[str] = []
        self.closed = False

    def _id(self, doc: dict) -> str:
        return str(doc[self.settings.primary_key])

    async def create_index(self) -> bool:
        self.calls.append("create_index")
        if self.exists:
            return False
        self.exists = True
        return True

    async def update_settings(self, settings=None):
        self.calls.append("update_settings")
        if settings is not None:
            self.settings = settings
        self.exists = True

    async def delete_all_documents(self) -> int:
        self.calls.append("delete_all_documents")
        deleted = len(self.docs)
        self.docs.clear()
        return deleted

    async def add_documents(self, documents: list[dict]) -> IndexTask:
        self.calls.append("add_documents")
        for doc in documents:
            self.docs[self._id(doc)] = dict(doc)
        return IndexTask(self.index_name, len(documents))

    async def update_document(self, doc_id, fields, refresh=True):
        self.calls.append("update_document")
        self.docs.setdefault(str(doc_id), {}).update(fields)

    async def delete_document(self, doc_id, refresh=True) -> bool:
        self.calls.append("delete_document")
        return self.docs.pop(str(doc_id), None) is not None

    async def wait_for_task(self, task):
        self.calls.append("wait_for_task")

    async def get(self, doc_id):
        return self.docs.get(str(doc_id))

    async def get_stats(self) -> dict:
        return {"numberOfDocuments": len(self.docs)}

    async def close(self):
        self.closed = True

    @property
    def mutations(self) -> int:
        return sum(
            1 for c in self.calls
            if c in ("add_documents", "update_document", "delete_document", "delete_all_documents")
        )


LOOKUPS = {
    "Countries": {"c1": "Mexico"},
    "Categories": {"cat1": "Tools"},
    "Supplier": {"s1": "Acme"},
    "Sources": {"src1": "Alibaba"},
}


def joined_row(i: int, country: str | None = "Mexico") -> dict:
    return {
        "Product_ID": str(i),
        "Product_Title": f"Product {i}",
        "Product_Price": "9.99",
        "Product_Image_URL": f"https://img.example.com/{i}.jpg",
        "Product_Title_URL": f"https://shop.example.com/{i}",
        "Product_MOQ": "10",
        "Countries": {"Country_Title": country} if country else None,
        "Categories": {"Category_Title": "Tools"},
        "Supplier": {"Supplier_Title": "Acme"},
        "Sources": {"Source_Title": "Alibaba"},
    }


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        supabase_url="http://localhost:54321",
        supabase_key="service-key",
        batch_size=3,
        batch_delay=0,
        embed_batch_size=2,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def source() -> FakeSource:
    return FakeSource(lookups=LOOKUPS)


@pytest.fixture
def indexer() -> FakeIndexer:
    return FakeIndexer()
