"""카탈로그 동기화 에러 분류

    ValidationError  — 잘못된 payload (400, 재시도 없음)
    AuthError        — 인증 실패 (401, 재시도 없음)
    RateLimitError   — 요청 한도 초과 (429)
    UpstreamError    — DB / 검색 인덱스 실패 (배치 작업 중단, 핸들러는 500)
    LoggingError     — 에러 로그 기록 실패 (항상 ErrorLogger 내부에서 흡수)
"""


class CatalogSyncError(Exception):
    """패키지 공통 베이스 예외"""

    status_code = 500


class ValidationError(CatalogSyncError):
    status_code = 400


class AuthError(CatalogSyncError):
    status_code = 401


class RateLimitError(CatalogSyncError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", retry_after: int = 60):
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamError(CatalogSyncError):
    """외부 저장소(Supabase / Elasticsearch) 호출 실패.

    원인 예외는 __cause__ 로 연결된다 (raise UpstreamError(...) from e).
    """


class LoggingError(CatalogSyncError):
    pass
