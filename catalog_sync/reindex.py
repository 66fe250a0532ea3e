"""Products 전체 재색인 — Rich 로깅 + Progress Bar

    [1/5] 인덱스 설정 적용 (반복 실행 안전)
    [2/5] 기존 문서 전체 삭제 (full refresh, 체크포인트 없음)
    [3/5] Products 정확한 행 수
    [4/5] [offset, offset+batch_size) 페이지 단위로 조회 → 문서 변환 → 벌크 upsert,
          페이지 사이 batch_delay초 대기 (인덱스 적재 속도 제한)
    [5/5] 검증 + 요약

어느 단계든 실패하면 작업 전체 중단 — 페이지 단위 재시도는 없다.
[2/5] 덕분에 처음부터 다시 실행하면 항상 같은 결과가 된다.
"""

import asyncio
import time
from dataclasses import dataclass
from pathlib import Path

from rich.panel import Panel
from rich.progress import Progress

from .config import Config
from .documents import product_document
from .indexer import IndexTask, SearchIndexer
from .log import get_logger, job_log_file, setup_logging
from .progress import console, create_progress, summary_table, timer
from .schema import PRODUCTS_SETTINGS
from .source import CatalogSource

logger = get_logger("reindex")


@dataclass
class ReindexResult:
    total: int          # 시작 시점 Products 행 수
    synced: int         # 업로드한 문서 수
    batches: int
    documents: int      # 완료 후 인덱스 문서 수
    cleared: int        # [2/5]에서 삭제한 문서 수
    wall_sec: float


class _Stats:
    """Progress bar 업데이트 + 파일 로깅"""

    def __init__(self, total: int, progress: Progress, task_id):
        self.total = total
        self.synced = 0
        self.bulk_ms = 0.0
        self._start = time.perf_counter()
        self._progress = progress
        self._task_id = task_id

    def update(self, count: int, bulk_ms: float):
        self.synced += count
        self.bulk_ms += bulk_ms
        elapsed = time.perf_counter() - self._start
        rps = self.synced / elapsed if elapsed > 0 else 0

        self._progress.update(
            self._task_id,
            advance=count,
            throughput=f"{rps:,.0f} docs/s",
            last_bulk=f"{bulk_ms:.0f}ms",
        )
        pct = self.synced / self.total * 100 if self.total else 100.0
        logger.info(
            f"[{pct:5.1f}%] {self.synced:>7,}/{self.total:,}  bulk={bulk_ms:.0f}ms"
        )

    @property
    def wall_sec(self) -> float:
        return time.perf_counter() - self._start


async def reindex_products(
    source: CatalogSource,
    indexer: SearchIndexer,
    config: Config,
) -> ReindexResult:
    """Products 테이블 → products 인덱스 전체 재구축"""
    logger.info(f"[1/5] 인덱스 설정 적용: {indexer.index_name}")
    await indexer.update_settings(PRODUCTS_SETTINGS)

    logger.info("[2/5] 기존 문서 전체 삭제")
    cleared = await indexer.delete_all_documents()
    logger.info(f"삭제: {cleared:,}건")

    logger.info("[3/5] Products 행 수 조회")
    total = await source.count_products()
    logger.info(f"동기화 대상: [cyan]{total:,}[/cyan]건")

    logger.info(
        f"[4/5] 배치 동기화 (batch={config.batch_size}, delay={config.batch_delay}s)"
    )
    offset = 0
    batches = 0
    last_task: IndexTask | None = None

    progress = create_progress()
    with progress:
        task_id = progress.add_task("Syncing", total=total, throughput="--", last_bulk="--")
        stats = _Stats(total, progress, task_id)

        while offset < total:
            end = min(offset + config.batch_size, total) - 1
            rows = await source.fetch_products(offset, end)
            if not rows:
                # 실행 중 행이 삭제되어 total보다 적게 끝난 경우
                logger.warning(f"빈 페이지 ({offset}-{end}) — 조기 종료")
                break

            documents = [product_document(row) for row in rows]
            with timer() as t:
                last_task = await indexer.add_documents(documents)

            offset += len(rows)
            batches += 1
            stats.update(len(rows), t.ms)

            if offset < total:
                await asyncio.sleep(config.batch_delay)

    if last_task is not None:
        await indexer.wait_for_task(last_task)

    logger.info("[5/5] 검증")
    index_stats = await indexer.get_stats()
    result = ReindexResult(
        total=total,
        synced=stats.synced,
        batches=batches,
        documents=index_stats["numberOfDocuments"],
        cleared=cleared,
        wall_sec=stats.wall_sec,
    )

    rows = [
        ("Products 행 수", f"{result.total:,}"),
        ("동기화 문서", f"{result.synced:,}"),
        ("배치 수", f"{result.batches:,}"),
        ("인덱스 문서 수", f"{result.documents:,}"),
        ("Wall time", f"{result.wall_sec:.1f}초"),
        ("bulk 합계", f"{stats.bulk_ms / 1000:.1f}초"),
    ]
    if result.documents != result.synced:
        rows.append(("[red]불일치[/]", f"{result.documents - result.synced:+,}"))
    console.print(summary_table("재색인 결과", rows))
    for label, value in rows:
        logger.info(f"{label}: {value}")

    logger.info(f"[bold green]{result.synced:,}건 동기화 완료[/bold green]")
    return result


async def _run(config: Config):
    source = CatalogSource.from_config(config)
    indexer = SearchIndexer.from_config(config, config.products_index, PRODUCTS_SETTINGS)
    try:
        return await reindex_products(source, indexer, config)
    finally:
        await indexer.close()


def run_reindex(config: Config, log_path: Path | None = None) -> ReindexResult:
    """전체 재색인 — 동기 래퍼 (CLI용)"""
    log_file = job_log_file(log_path or config.log_dir, "reindex")
    setup_logging(log_file=log_file)
    logger.info(f"Log → {log_file}")
    console.print(
        Panel.fit(
            "[bold]전체 재색인[/] — 인덱스 비우기 + 페이지 단위 적재",
            border_style="green",
        )
    )
    return asyncio.run(_run(config))
