"""Supabase (Relational Source) 조회/기록

supabase-py 클라이언트는 동기 방식 — 모든 호출을 기본 executor에서 실행해
이벤트 루프를 막지 않고, 외래키 조회 4건을 동시에 보낼 수 있게 한다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
from postgrest.exceptions import APIError
from supabase import AuthApiError, Client, ClientOptions, create_client

from .config import Config
from .documents import PRODUCT_SELECT, SUPPLIER_COLUMNS, ForeignKey
from .errors import AuthError, UpstreamError
from .log import get_logger

logger = get_logger("source")

PRODUCTS_TABLE = "Products"
SUPPLIERS_TABLE = "Supplier"
ERROR_LOGS_TABLE = "error_logs"


class CatalogSource:
    """
    Products / Supplier / 조회 테이블 접근 어댑터.

    사용 예:
        source = CatalogSource.from_config(Config.from_env())
        total = await source.count_products()
        rows = await source.fetch_products(0, 999)   # 양끝 포함
    """

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_config(cls, config: Config) -> CatalogSource:
        config.require_source()
        client = create_client(
            config.supabase_url,
            config.supabase_key,
            options=ClientOptions(persist_session=False, auto_refresh_token=False),
        )
        return cls(client)

    def _table(self, name: str):
        return self.client.table(name)

    async def _run(self, fn: Callable[[], Any], what: str):
        """동기 supabase 호출을 executor에서 실행. 실패는 UpstreamError."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, fn)
        except (APIError, httpx.HTTPError) as e:
            raise UpstreamError(f"{what} 실패: {e}") from e

    # ================================================================
    # Products
    # ================================================================

    async def count_products(self) -> int:
        """Products 정확한 행 수 (count=exact, head=True)"""
        resp = await self._run(
            lambda: self._table(PRODUCTS_TABLE)
            .select("*", count="exact", head=True)
            .execute(),
            "Products count",
        )
        return resp.count or 0

    async def fetch_products(self, start: int, end: int) -> list[dict]:
        """[start, end] 범위 (양끝 포함) 행 + 조회 테이블 조인"""
        resp = await self._run(
            lambda: self._table(PRODUCTS_TABLE)
            .select(PRODUCT_SELECT)
            .range(start, end)
            .execute(),
            f"Products range {start}-{end}",
        )
        return resp.data or []

    async def fetch_supplier_products(self) -> list[dict]:
        """공급자 키워드 집계용 — 전체 Products (공급자 id, 제목, 카테고리 이름)"""
        resp = await self._run(
            lambda: self._table(PRODUCTS_TABLE)
            .select("Product_Supplier_ID, Product_Title, Product_Category_Name")
            .execute(),
            "Products (supplier keywords)",
        )
        return resp.data or []

    async def fetch_product_titles(self) -> list[dict]:
        """임베딩 작업용 — 전체 Products (id, 제목)"""
        resp = await self._run(
            lambda: self._table(PRODUCTS_TABLE)
            .select("Product_ID, Product_Title")
            .execute(),
            "Products (titles)",
        )
        return resp.data or []

    async def update_product_embedding(self, product_id: str, embedding: list[float]):
        await self._run(
            lambda: self._table(PRODUCTS_TABLE)
            .update({"embedding": embedding})
            .eq("Product_ID", product_id)
            .execute(),
            f"Products embedding {product_id}",
        )

    async def lookup_title(self, fk: ForeignKey, value: str) -> str | None:
        """외래키 1건 → 표시 이름. 행이 없으면 None."""
        resp = await self._run(
            lambda: self._table(fk.table)
            .select(fk.title_column)
            .eq(fk.id_column, value)
            .limit(1)
            .execute(),
            f"{fk.table} lookup {value}",
        )
        if not resp.data:
            return None
        return resp.data[0].get(fk.title_column)

    # ================================================================
    # Supplier
    # ================================================================

    async def fetch_suppliers(self) -> list[dict]:
        resp = await self._run(
            lambda: self._table(SUPPLIERS_TABLE)
            .select(", ".join(SUPPLIER_COLUMNS))
            .execute(),
            "Supplier",
        )
        return resp.data or []

    # ================================================================
    # 인증 / 에러 로그
    # ================================================================

    async def verify_token(self, token: str) -> str:
        """Bearer 토큰 검증 → 사용자 id.

        토큰 거부(4xx)는 AuthError, 인증 서버 장애나 통신 실패는 UpstreamError.
        """
        loop = asyncio.get_running_loop()
        try:
            resp = await loop.run_in_executor(None, self.client.auth.get_user, token)
        except AuthApiError as e:
            if (getattr(e, "status", None) or 0) >= 500:
                raise UpstreamError(f"auth 서버 오류: {e}") from e
            raise AuthError("Invalid authentication") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"auth 요청 실패: {e}") from e
        if resp is None or resp.user is None:
            raise AuthError("Invalid authentication")
        return resp.user.id

    async def insert_error_log(self, record: dict):
        await self._run(
            lambda: self._table(ERROR_LOGS_TABLE).insert(record).execute(),
            "error_logs insert",
        )
