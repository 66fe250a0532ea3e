"""
catalog_sync — Supabase 카탈로그 → Elasticsearch 검색 인덱스 동기화 패키지

전체 재색인 (products 인덱스 비우고 다시 적재):
    from catalog_sync import Config, run_reindex
    run_reindex(Config.from_env(batch_size=1000))

공급자 인덱스 (상품 수 + 상품 키워드 보강):
    from catalog_sync import Config, run_populate_suppliers
    run_populate_suppliers(Config.from_env())

변경 이벤트 웹훅:
    from catalog_sync import Config, build_app
    app = build_app(Config.from_env())     # uvicorn으로 실행

개별 이벤트 처리 (async):
    handler = SyncHandler(source, indexer)
    await handler.handle(parse_event({"type": "DELETE", "old_record": {"Product_ID": 7}}))
"""

from .config import Config
from .embedder import EmbeddingClient
from .embedding import run_embed_products
from .enrichment import run_populate_suppliers
from .error_log import ErrorLogger
from .events import ChangeEvent, EventType, parse_event
from .handler import SyncHandler
from .index_setup import run_setup_indexes
from .indexer import SearchIndexer, build_es_client
from .log import get_logger, setup_logging
from .rate_limit import RateLimiter
from .reindex import run_reindex
from .schema import PRODUCTS_SETTINGS, SUPPLIERS_SETTINGS, IndexSettings
from .source import CatalogSource
from .webhook import build_app, create_app

__all__ = [
    "Config", "CatalogSource", "SearchIndexer", "build_es_client",
    "IndexSettings", "PRODUCTS_SETTINGS", "SUPPLIERS_SETTINGS",
    "SyncHandler", "ChangeEvent", "EventType", "parse_event",
    "run_reindex", "run_populate_suppliers", "run_embed_products", "run_setup_indexes",
    "create_app", "build_app", "RateLimiter", "ErrorLogger", "EmbeddingClient",
    "setup_logging", "get_logger",
]
