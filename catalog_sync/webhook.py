"""
웹훅 서버 (FastAPI)

    POST    /sync-search         Products 변경 이벤트 → 검색 인덱스 반영
    POST    /generate-embedding  {text} → {embedding}
    OPTIONS (두 경로 모두)        CORS preflight — 헤더만, body 없음

응답:
    200 {"success": true} / {"embedding": [...]}
    400 payload 검증 실패, 401 인증 실패, 405 메서드, 429 요청 한도 초과
    500 {"error": "Internal server error"} — 상세 메시지는 error_logs에만

모든 실패는 응답 전에 error_logs에 기록 (기록 실패는 흡수).
"""

import asyncio
import json
import time
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from .config import Config
from .embedder import EmbeddingClient
from .error_log import ErrorLogger
from .errors import AuthError, CatalogSyncError, RateLimitError, ValidationError
from .events import parse_embedding_request, parse_event
from .handler import SyncHandler
from .indexer import SearchIndexer
from .log import get_logger
from .rate_limit import RateLimiter
from .schema import PRODUCTS_SETTINGS
from .source import CatalogSource

logger = get_logger("webhook")

SYNC_PATH = "/sync-search"
EMBED_PATH = "/generate-embedding"
GENERIC_ERROR = "Internal server error"


def cors_headers(origin: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Max-Age": "86400",
    }


def client_key(request: Request) -> str:
    """요청 제한 키 — 프록시 뒤라면 X-Forwarded-For 첫 번째 주소"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_app(
    config: Config,
    source: CatalogSource,
    indexer: SearchIndexer,
    embedder: EmbeddingClient | None = None,
    error_logger: ErrorLogger | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """의존 객체를 주입받아 앱 생성. 요청 제한기는 앱마다 1개씩 소유."""
    headers = cors_headers(config.cors_origin)
    handler = SyncHandler(source, indexer)
    error_logger = error_logger or ErrorLogger(source, config.retry_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await indexer.close()

    app = FastAPI(title="catalog-sync webhook", lifespan=lifespan)
    app.state.error_logger = error_logger
    app.state.sync_limiter = RateLimiter(config.sync_rate_limit, config.rate_limit_window, clock)
    app.state.embed_limiter = RateLimiter(config.embed_rate_limit, config.rate_limit_window, clock)

    def error_response(error: Exception) -> JSONResponse:
        status = error.status_code if isinstance(error, CatalogSyncError) else 500
        extra = {}
        if isinstance(error, RateLimitError):
            extra["Retry-After"] = str(error.retry_after)
        return JSONResponse(
            {"error": GENERIC_ERROR if status == 500 else str(error)},
            status_code=status,
            headers={**headers, **extra},
        )

    async def authenticate(request: Request) -> str:
        auth = request.headers.get("Authorization")
        if not auth:
            raise AuthError("Missing authorization header")
        token = auth.removeprefix("Bearer ").strip()
        if not token:
            raise AuthError("Invalid authentication")
        return await source.verify_token(token)

    async def read_json(request: Request) -> Any:
        try:
            return await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(f"Invalid JSON body: {e}") from e

    async def guarded(
        request: Request,
        path: str,
        limiter: RateLimiter,
        work: Callable[[Any, str], Awaitable[dict]],
    ) -> JSONResponse:
        user_id = None
        try:
            key = client_key(request)
            if not limiter.allow(key):
                raise RateLimitError(retry_after=int(limiter.retry_after(key)) + 1)
            user_id = await authenticate(request)
            payload = await read_json(request)
            body = await work(payload, user_id)
        except Exception as e:
            if isinstance(e, CatalogSyncError) and e.status_code < 500:
                logger.warning(f"{path} {e.status_code}: {e}")
            else:
                logger.exception(f"{path} 처리 실패")
            await error_logger.log_exception(e, context={"path": path}, user_id=user_id)
            return error_response(e)
        return JSONResponse(body, headers=headers)

    # ================================================================
    # 변경 이벤트
    # ================================================================

    async def apply_event(payload: Any, user_id: str) -> dict:
        event = parse_event(payload)
        await handler.handle(event)
        return {"success": True}

    @app.options(SYNC_PATH)
    async def sync_preflight():
        return Response(status_code=200, headers=headers)

    @app.post(SYNC_PATH)
    async def sync_search(request: Request):
        return await guarded(request, SYNC_PATH, app.state.sync_limiter, apply_event)

    # ================================================================
    # 임베딩
    # ================================================================

    async def generate_embedding(payload: Any, user_id: str) -> dict:
        if embedder is None:
            raise RuntimeError("embedding client가 설정되지 않았습니다")
        req = parse_embedding_request(payload)
        loop = asyncio.get_running_loop()
        vector = await loop.run_in_executor(None, embedder.embed_one, req.text)
        await error_logger.log(
            "Embedding generated successfully",
            severity="info",
            context={"text_length": len(req.text)},
            user_id=user_id,
        )
        return {"embedding": vector}

    @app.options(EMBED_PATH)
    async def embed_preflight():
        return Response(status_code=200, headers=headers)

    @app.post(EMBED_PATH)
    async def embed(request: Request):
        return await guarded(request, EMBED_PATH, app.state.embed_limiter, generate_embedding)

    @app.api_route(EMBED_PATH, methods=["GET", "PUT", "PATCH", "DELETE"])
    async def embed_method_not_allowed():
        return JSONResponse({"error": "Method not allowed"}, status_code=405, headers=headers)

    return app


def build_app(config: Config) -> FastAPI:
    """Config → 실제 Supabase / Elasticsearch / KServe 연결로 앱 생성"""
    source = CatalogSource.from_config(config)
    indexer = SearchIndexer.from_config(config, config.products_index, PRODUCTS_SETTINGS)
    embedder = EmbeddingClient(config.kserve_url, config.embed_model, timeout=config.embed_timeout)
    return create_app(config, source, indexer, embedder)
