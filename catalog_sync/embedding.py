"""Products 제목 임베딩 → Products.embedding 컬럼 기록

배치(기본 20건) 안에서는 상품별로 동시에 임베딩 + 기록, 배치 사이 batch_delay초 대기.
상품 1건 실패는 실패 로그(JSONL)에 남기고 계속 진행한다.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from rich.panel import Panel

from .config import Config
from .embedder import EmbeddingClient
from .log import get_logger, job_log_file, setup_logging
from .progress import console, summary_table, timer
from .retry import AsyncFailureLogger
from .source import CatalogSource

logger = get_logger("embedding")


@dataclass
class EmbeddingResult:
    total: int
    embedded: int
    failed: int
    wall_sec: float


async def _embed_product(
    batch_id: int,
    product: dict,
    embedder: EmbeddingClient,
    source: CatalogSource,
    failure_logger: AsyncFailureLogger,
) -> bool:
    loop = asyncio.get_running_loop()
    product_id = product["Product_ID"]
    try:
        vector = await loop.run_in_executor(None, embedder.embed_one, product["Product_Title"])
        await source.update_product_embedding(product_id, vector)
    except Exception as e:
        logger.error(f"임베딩 실패 {product_id}: {e}")
        await failure_logger.log_failure(
            batch_id, e, data_info={"product_id": product_id}
        )
        return False
    logger.debug(f"Embedded {product_id}")
    return True


async def embed_products(
    source: CatalogSource,
    embedder: EmbeddingClient,
    config: Config,
    failure_logger: AsyncFailureLogger,
) -> EmbeddingResult:
    with timer() as t_total:
        logger.info("[1/2] Products 조회")
        products = [p for p in await source.fetch_product_titles() if p.get("Product_Title")]
        total = len(products)
        logger.info(f"임베딩 대상: [cyan]{total:,}[/cyan]건")

        logger.info(
            f"[2/2] 임베딩 (batch={config.embed_batch_size}, delay={config.batch_delay}s)"
        )
        embedded = 0
        for start in range(0, total, config.embed_batch_size):
            batch = products[start : start + config.embed_batch_size]
            results = await asyncio.gather(*[
                _embed_product(start, p, embedder, source, failure_logger)
                for p in batch
            ])
            embedded += sum(results)
            logger.info(f"{min(start + len(batch), total):>7,}/{total:,}  성공 누계={embedded:,}")

            if start + config.embed_batch_size < total:
                await asyncio.sleep(config.batch_delay)

    result = EmbeddingResult(
        total=total,
        embedded=embedded,
        failed=total - embedded,
        wall_sec=t_total.sec,
    )
    rows = [
        ("대상", f"{result.total:,}"),
        ("성공", f"{result.embedded:,}"),
        ("Wall time", f"{result.wall_sec:.1f}초"),
    ]
    if result.failed:
        rows.append(("실패", f"[red]{result.failed:,}건[/]"))
        rows.append(("실패 로그", str(failure_logger.log_path)))
    console.print(summary_table("임베딩 결과", rows))
    for label, value in rows:
        logger.info(f"{label}: {value}")
    return result


def run_embed_products(config: Config, log_path: Path | None = None) -> EmbeddingResult:
    """상품 임베딩 — 동기 래퍼 (CLI용)"""
    log_file = job_log_file(log_path or config.log_dir, "embed")
    setup_logging(log_file=log_file)
    logger.info(f"Log → {log_file}")
    console.print(Panel.fit("[bold]상품 임베딩[/] — 제목 → embedding 컬럼", border_style="magenta"))

    source = CatalogSource.from_config(config)
    embedder = EmbeddingClient(config.kserve_url, config.embed_model, timeout=config.embed_timeout)
    failure_logger = AsyncFailureLogger(log_file.with_suffix(".failures.jsonl"))
    return asyncio.run(embed_products(source, embedder, config, failure_logger))
