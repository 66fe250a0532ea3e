"""error_logs 테이블 기록 (best-effort)

기록 실패는 재시도(지수 백오프 + jitter, 최대 30초) 후에도 실패하면
콘솔 로그로만 남기고 호출자에게 전파하지 않는다.
"""

import traceback
from datetime import datetime, timezone
from typing import Any

from .errors import LoggingError
from .log import get_logger
from .retry import RetryConfig, async_with_retry
from .source import CatalogSource

logger = get_logger("error_log")

SEVERITIES = ("info", "warning", "error", "critical")


class ErrorLogger:
    def __init__(self, source: CatalogSource, retry_config: RetryConfig | None = None):
        self.source = source
        self.retry_config = retry_config or RetryConfig(
            max_retries=3, initial_backoff=1.0, max_backoff=30.0, jitter=True
        )
        self._insert = async_with_retry(self.retry_config)(self.source.insert_error_log)

    @staticmethod
    def build_record(
        message: str,
        severity: str = "error",
        context: dict[str, Any] | None = None,
        stack: str | None = None,
        user_id: str | None = None,
    ) -> dict:
        if severity not in SEVERITIES:
            raise ValueError(f"알 수 없는 severity: {severity}")
        return {
            "message": message,
            "stack": stack,
            "severity": severity,
            "context": context,
            "user_id": user_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def _write(self, record: dict):
        try:
            await self._insert(record)
        except Exception as e:
            raise LoggingError(f"error_logs 기록 실패: {e}") from e

    async def log(
        self,
        message: str,
        severity: str = "error",
        context: dict[str, Any] | None = None,
        stack: str | None = None,
        user_id: str | None = None,
    ) -> bool:
        """기록 성공 여부 반환. 예외는 절대 던지지 않는다."""
        record = self.build_record(message, severity, context, stack, user_id)
        try:
            await self._write(record)
        except LoggingError as e:
            logger.error(f"[red]{e}[/red] — 원본 메시지: {message}")
            return False
        return True

    async def log_exception(
        self,
        error: BaseException,
        context: dict[str, Any] | None = None,
        user_id: str | None = None,
    ) -> bool:
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return await self.log(str(error), "error", context, stack, user_id)
