"""products / suppliers 인덱스 생성 + 설정 적용

이미 있는 인덱스는 그대로 두고 설정만 다시 적용한다 (반복 실행 안전).
"""

import asyncio
from typing import Callable

from rich.panel import Panel

from .config import Config
from .indexer import SearchIndexer
from .log import get_logger, setup_logging
from .progress import console, summary_table
from .schema import PRODUCTS_SETTINGS, SUPPLIERS_SETTINGS, IndexSettings

logger = get_logger("index_setup")

IndexerFactory = Callable[[str, IndexSettings], SearchIndexer]


async def setup_indexes(indexer_factory: IndexerFactory, config: Config) -> dict[str, int]:
    """두 인덱스를 준비하고 {인덱스 이름: 문서 수} 반환"""
    targets = [
        (config.products_index, PRODUCTS_SETTINGS),
        (config.suppliers_index, SUPPLIERS_SETTINGS),
    ]
    counts: dict[str, int] = {}
    rows = []
    for name, settings in targets:
        indexer = indexer_factory(name, settings)
        try:
            created = await indexer.create_index()
            if not created:
                logger.info(f"{name}: 이미 존재 — 설정만 적용")
            await indexer.update_settings(settings)
            stats = await indexer.get_stats()
        finally:
            await indexer.close()

        counts[name] = stats["numberOfDocuments"]
        rows.append((
            name,
            f"{'생성' if created else '기존'}  pk={settings.primary_key}  "
            f"docs={counts[name]:,}",
        ))

    console.print(summary_table("인덱스 설정", rows))
    return counts


def run_setup_indexes(config: Config) -> dict[str, int]:
    """인덱스 준비 — 동기 래퍼 (CLI용)"""
    setup_logging()
    console.print(Panel.fit("[bold]검색 인덱스 설정[/]", border_style="cyan"))

    def factory(name: str, settings: IndexSettings) -> SearchIndexer:
        return SearchIndexer.from_config(config, name, settings)

    return asyncio.run(setup_indexes(factory, config))
