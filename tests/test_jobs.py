"""배치 작업 — 전체 재색인 / 공급자 키워드 보강 / 인덱스 설정 / 상품 임베딩"""

import asyncio
import json
from unittest.mock import MagicMock

from catalog_sync.embedding import embed_products
from catalog_sync.enrichment import populate_suppliers
from catalog_sync.index_setup import setup_indexes
from catalog_sync.reindex import reindex_products
from catalog_sync.retry import AsyncFailureLogger
from catalog_sync.schema import SUPPLIERS_SETTINGS

from conftest import FakeIndexer, FakeSource, joined_row


def test_reindex_pages_all_rows(config):
    """7행, batch=3 → 3 페이지 (0-2, 3-5, 6-6)"""
    source = FakeSource(products=[joined_row(i) for i in range(7)])
    indexer = FakeIndexer()

    result = asyncio.run(reindex_products(source, indexer, config))

    assert result.total == 7
    assert result.synced == 7
    assert result.batches == 3
    assert result.documents == 7
    assert indexer.calls[:2] == ["update_settings", "delete_all_documents"]
    assert indexer.calls.count("add_documents") == 3
    assert indexer.docs["6"]["country"] == "Mexico"


def test_reindex_is_idempotent(config):
    source = FakeSource(products=[joined_row(i) for i in range(5)])
    indexer = FakeIndexer()

    first = asyncio.run(reindex_products(source, indexer, config))
    snapshot = dict(indexer.docs)
    second = asyncio.run(reindex_products(source, indexer, config))

    assert first.documents == second.documents == 5
    assert second.cleared == 5
    assert indexer.docs == snapshot


def test_reindex_removes_stale_documents(config):
    source = FakeSource(products=[joined_row(1)])
    indexer = FakeIndexer()
    indexer.docs["999"] = {"id": "999", "title": "deleted upstream"}

    result = asyncio.run(reindex_products(source, indexer, config))
    assert result.cleared == 1
    assert set(indexer.docs) == {"1"}


def test_reindex_empty_source(config):
    indexer = FakeIndexer()
    result = asyncio.run(reindex_products(FakeSource(), indexer, config))
    assert result.synced == 0
    assert result.batches == 0
    assert "add_documents" not in indexer.calls


def test_populate_suppliers(config):
    source = FakeSource(
        suppliers=[
            {"Supplier_ID": "s1", "Supplier_Title": "Acme"},
            {"Supplier_ID": "s2", "Supplier_Title": "Empty Co"},
        ],
        supplier_products=[
            {"Product_Supplier_ID": "s1", "Product_Title": "Blue Widget"},
            {"Product_Supplier_ID": "s1", "Product_Title": "Red Widget"},
        ],
    )
    indexer = FakeIndexer("suppliers", SUPPLIERS_SETTINGS)

    result = asyncio.run(populate_suppliers(source, indexer))

    assert result.suppliers == 2
    assert result.products == 2
    assert result.without_products == 1
    assert result.documents == 2
    assert indexer.calls.count("add_documents") == 1
    assert indexer.docs["s1"]["product_count"] == 2
    assert indexer.docs["s2"]["product_keywords"] == ""


def test_populate_suppliers_without_rows():
    indexer = FakeIndexer("suppliers", SUPPLIERS_SETTINGS)
    result = asyncio.run(populate_suppliers(FakeSource(), indexer))
    assert result.suppliers == 0
    assert indexer.calls == []


def test_setup_indexes(config):
    created: dict[str, FakeIndexer] = {}

    def factory(name, settings):
        created[name] = FakeIndexer(name, settings)
        if name == "suppliers":
            created[name].exists = True
            created[name].docs["s1"] = {"Supplier_ID": "s1"}
        return created[name]

    counts = asyncio.run(setup_indexes(factory, config))

    assert counts == {"products": 0, "suppliers": 1}
    assert created["suppliers"].settings is SUPPLIERS_SETTINGS
    assert "product_count:desc" in created["suppliers"].settings.ranking_rules
    assert all(ix.closed for ix in created.values())


def test_embed_products_logs_failures(config, tmp_path):
    """상품 1건 실패는 기록만 하고 나머지는 계속"""
    source = FakeSource(products=[joined_row(i) for i in range(3)])
    embedder = MagicMock()

    def embed_one(text):
        if text == "Product 1":
            raise ConnectionError("KServe down")
        return [0.1, 0.2]

    embedder.embed_one.side_effect = embed_one
    failure_logger = AsyncFailureLogger(tmp_path / "failures.jsonl")

    result = asyncio.run(embed_products(source, embedder, config, failure_logger))

    assert result.total == 3
    assert result.embedded == 2
    assert result.failed == 1
    assert set(source.embeddings) == {"0", "2"}

    record = json.loads((tmp_path / "failures.jsonl").read_text().strip())
    assert record["product_id"] == "1"
    assert record["error_type"] == "ConnectionError"
