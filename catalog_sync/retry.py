"""재시도 로직 + 실패 로깅 (async)"""

import asyncio
import json
import random
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable

from .log import get_logger

logger = get_logger("retry")


class RetryConfig:
    """재시도 설정

    max_retries는 총 시도 횟수 (1 = 재시도 없음).
    jitter=True 이면 대기 시간에 0.5~1.5 배 무작위 계수를 곱한다.
    """

    def __init__(
        self,
        max_retries: int = 3,
        initial_backoff: float = 1.0,
        exponential: bool = True,
        max_backoff: float = 30.0,
        jitter: bool = False,
    ):
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self.exponential = exponential
        self.max_backoff = max_backoff
        self.jitter = jitter

    def backoff(self, attempt: int) -> float:
        """attempt(1부터)번째 실패 후 대기 시간 (초)"""
        if self.exponential:
            delay = self.initial_backoff * (2 ** (attempt - 1))
        else:
            delay = self.initial_backoff
        if self.jitter:
            delay *= 0.5 + random.random()
        return min(delay, self.max_backoff)


class AsyncFailureLogger:
    """
    비동기 안전 실패 로거 (JSONL).

    asyncio.Lock으로 동시 쓰기 안전성 보장.

    사용 예:
        dl = AsyncFailureLogger(Path("failures.jsonl"))
        await dl.log_failure(batch_id=0, error=e, data_info={"product_id": "p1"})
    """

    def __init__(self, log_path: Path, enabled: bool = True):
        self.log_path = log_path
        self.enabled = enabled
        self._lock = asyncio.Lock()
        self._count = 0
        if enabled:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)

    async def log_failure(
        self,
        batch_id: int,
        error: Exception | str,
        data_info: dict[str, Any] | None = None,
    ):
        """실패 건을 JSONL에 기록."""
        if not self.enabled:
            return

        error_type = type(error).__name__ if isinstance(error, Exception) else "str"
        error_msg = str(error)

        record = {
            "batch_id": batch_id,
            "error_type": error_type,
            "error_message": error_msg,
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S"),
            **(data_info or {}),
        }
        async with self._lock:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
            self._count += 1

        logger.warning(f"[red]실패 기록[/red] batch_id={batch_id}: {error_msg}")

    @property
    def count(self) -> int:
        return self._count


def async_with_retry(retry_config: RetryConfig):
    """
    비동기 재시도 데코레이터. await asyncio.sleep()으로 대기.

    사용 예:
        @async_with_retry(RetryConfig(max_retries=3, jitter=True))
        async def insert_log(record):
            await source.insert_error_log(record)
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(1, retry_config.max_retries + 1):
                try:
                    return await func(*args, **kwargs)

                except Exception as e:
                    last_exception = e

                    if attempt >= retry_config.max_retries:
                        logger.error(
                            f"[bold red]최종 실패[/bold red] "
                            f"(시도 {attempt}/{retry_config.max_retries}): {e}"
                        )
                        raise

                    backoff = retry_config.backoff(attempt)
                    logger.warning(
                        f"[yellow]재시도 대기[/yellow] "
                        f"({attempt}/{retry_config.max_retries}) "
                        f"{backoff:.1f}초 후 재시도... error: {e}"
                    )
                    await asyncio.sleep(backoff)

            raise last_exception

        return wrapper

    return decorator
