"""suppliers 인덱스 — 공급자 + 상품 수 + 상품 키워드

    [1/4] Supplier 전체 조회
    [2/4] Products 전체 조회 → 공급자별 상품 수 + 키워드 집합
    [3/4] 보강된 공급자 문서 1회 벌크 upsert → 인덱스 반영 대기
    [4/4] 검증 + 샘플

키워드 집합은 매번 처음부터 다시 만든다 (기존 값과 병합하지 않음).
두 조회 모두 테이블 전체를 메모리에 올린다 — 카탈로그 규모가 작을 때만 사용.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from rich.panel import Panel

from .config import Config
from .documents import enrich_suppliers
from .indexer import SearchIndexer
from .log import get_logger, job_log_file, setup_logging
from .progress import console, summary_table, timer
from .schema import SUPPLIERS_SETTINGS
from .source import CatalogSource

logger = get_logger("enrichment")


@dataclass
class EnrichmentResult:
    suppliers: int
    products: int
    without_products: int
    documents: int
    wall_sec: float


async def populate_suppliers(
    source: CatalogSource,
    indexer: SearchIndexer,
) -> EnrichmentResult:
    with timer() as t_total:
        logger.info("[1/4] Supplier 조회")
        suppliers = await source.fetch_suppliers()
        if not suppliers:
            logger.warning("Supplier 행이 없습니다 — 업로드 생략")
            return EnrichmentResult(0, 0, 0, 0, 0.0)
        logger.info(f"공급자: [cyan]{len(suppliers):,}[/cyan]건")

        logger.info("[2/4] Products 조회 → 공급자별 키워드 집계")
        products = await source.fetch_supplier_products()
        enriched = enrich_suppliers(suppliers, products)
        without_products = sum(1 for s in enriched if s["product_count"] == 0)
        logger.info(
            f"상품: [cyan]{len(products):,}[/cyan]건, "
            f"상품 없는 공급자: {without_products:,}건"
        )

        logger.info(f"[3/4] {indexer.index_name} 인덱스 업로드")
        await indexer.update_settings(SUPPLIERS_SETTINGS)
        task = await indexer.add_documents(enriched)
        logger.info(f"업로드: {task.count:,}건 — 반영 대기")
        await indexer.wait_for_task(task)

        logger.info("[4/4] 검증")
        stats = await indexer.get_stats()

    result = EnrichmentResult(
        suppliers=len(suppliers),
        products=len(products),
        without_products=without_products,
        documents=stats["numberOfDocuments"],
        wall_sec=t_total.sec,
    )

    rows = [
        ("공급자", f"{result.suppliers:,}"),
        ("상품", f"{result.products:,}"),
        ("상품 없는 공급자", f"{result.without_products:,}"),
        ("인덱스 문서 수", f"{result.documents:,}"),
        ("Wall time", f"{result.wall_sec:.1f}초"),
    ]
    console.print(summary_table("공급자 인덱스 결과", rows))
    for label, value in rows:
        logger.info(f"{label}: {value}")

    sample = enriched[0]
    logger.info(
        f"샘플: {sample.get('Supplier_Title')}  "
        f"product_count={sample['product_count']}  "
        f"keywords={sample['product_keywords'][:100]}"
    )
    return result


async def _run(config: Config):
    source = CatalogSource.from_config(config)
    indexer = SearchIndexer.from_config(config, config.suppliers_index, SUPPLIERS_SETTINGS)
    try:
        return await populate_suppliers(source, indexer)
    finally:
        await indexer.close()


def run_populate_suppliers(config: Config, log_path: Path | None = None) -> EnrichmentResult:
    """공급자 인덱스 채우기 — 동기 래퍼 (CLI용)"""
    log_file = job_log_file(log_path or config.log_dir, "suppliers")
    setup_logging(log_file=log_file)
    logger.info(f"Log → {log_file}")
    console.print(
        Panel.fit(
            "[bold]공급자 인덱스[/] — 상품 수 + 상품 키워드 보강",
            border_style="blue",
        )
    )
    return asyncio.run(_run(config))
