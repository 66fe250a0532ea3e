"""작업 진행 표시 — Rich Progress bar + 결과 요약 Table + 타이머"""

import time
from contextlib import contextmanager
from typing import Generator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

console = Console()


def create_progress() -> Progress:
    """배치 작업용 Rich Progress bar 생성"""
    return Progress(
        SpinnerColumn(),
        "[progress.description]{task.description}",
        BarColumn(bar_width=30),
        MofNCompleteColumn(),
        TextColumn("•"),
        TextColumn("[green]{task.fields[throughput]}[/]"),
        TextColumn("•"),
        TextColumn("[yellow]bulk={task.fields[last_bulk]}[/]"),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
        console=console,
        transient=False,
    )


def summary_table(title: str, rows: list[tuple[str, str]]) -> Table:
    """결과 요약 Rich Table"""
    table = Table(title=title, show_header=False, border_style="dim")
    table.add_column("항목", style="bold")
    table.add_column("값", justify="right", style="cyan")
    for label, value in rows:
        table.add_row(label, value)
    return table


class TimerResult:
    """타이머 결과. with 블록 종료 후 .ms, .sec 참조."""

    __slots__ = ("ms", "sec", "_start")

    def __init__(self):
        self.ms: float = 0.0
        self.sec: float = 0.0
        self._start: float = 0.0


@contextmanager
def timer() -> Generator[TimerResult, None, None]:
    """
    소요 시간 측정 컨텍스트 매니저.

    사용 예:
        with timer() as t:
            await indexer.add_documents(docs)
        logger.info(f"bulk: {t.ms:.0f}ms")
    """
    result = TimerResult()
    result._start = time.perf_counter()
    try:
        yield result
    finally:
        elapsed = time.perf_counter() - result._start
        result.sec = elapsed
        result.ms = elapsed * 1000
