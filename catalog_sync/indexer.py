"""Elasticsearch 검색 인덱스 관리 + 문서 upsert/update/delete

Search Index Store 계약:
    create_index / update_settings / add_documents / update_documents /
    update_document / delete_document / delete_all_documents /
    wait_for_task / get_stats / get / search
"""

from __future__ import annotations

from dataclasses import dataclass

from elasticsearch import AsyncElasticsearch, NotFoundError
from elasticsearch.helpers import async_bulk

from .config import Config
from .errors import UpstreamError
from .log import get_logger
from .schema import IndexSettings

logger = get_logger("indexer")


def build_es_client(config: Config) -> AsyncElasticsearch:
    """Config 기반으로 AsyncElasticsearch 클라이언트를 생성.

    - 단일 노드 (HTTP): es_url 사용 — fingerprint 불필요
    - 클러스터 (HTTPS): es_nodes 사용 — fingerprint + 인증 필수

    Examples:
        # 로컬 개발
        config = Config(es_url="http://localhost:9200")

        # ES 9 클러스터 + fingerprint
        config = Config(
            es_nodes=["https://es01:9200", "https://es02:9200"],
            es_fingerprint="B1:2A:...:CF",
            es_username="elastic",
            es_password="changeme",
        )
    """
    hosts = config.es_nodes or [config.es_url]
    is_cluster = config.es_nodes is not None

    if is_cluster:
        if not config.es_fingerprint:
            raise ValueError(
                "--es_fingerprint 필수: ES 9 클러스터 연결에는 "
                "TLS 인증서 fingerprint가 필요합니다."
            )
        if not config.es_api_key and not (config.es_username and config.es_password):
            raise ValueError(
                "인증 정보 필수: --es_api_key 또는 "
                "--es_username + --es_password를 지정하세요."
            )

    kwargs: dict = {"hosts": hosts}

    # 인증: API Key 우선, 없으면 Basic Auth
    if config.es_api_key:
        kwargs["api_key"] = config.es_api_key
    elif config.es_username and config.es_password:
        kwargs["basic_auth"] = (config.es_username, config.es_password)

    if config.es_fingerprint:
        kwargs["ssl_assert_fingerprint"] = config.es_fingerprint
        kwargs["verify_certs"] = False  # fingerprint가 CA 체인 검증을 대체

    return AsyncElasticsearch(**kwargs)


@dataclass
class IndexTask:
    """문서 쓰기 작업 핸들. wait_for_task()에 넘기면 검색 가능 상태까지 대기."""

    index: str
    count: int


class SearchIndexer:
    """
    검색 인덱스 1개에 대한 어댑터.

    문서 id는 항상 IndexSettings.primary_key 필드 값 — 같은 행을 여러 번 써도
    문서는 1개 (idempotent upsert).
    """

    def __init__(self, es_url: str, index_name: str, settings: IndexSettings):
        self.es = AsyncElasticsearch(es_url)
        self.index_name = index_name
        self.settings = settings

    @classmethod
    def from_config(
        cls, config: Config, index_name: str, settings: IndexSettings
    ) -> SearchIndexer:
        """Config 객체로 클러스터 연결이 포함된 SearchIndexer 생성."""
        instance = cls.__new__(cls)
        instance.es = build_es_client(config)
        instance.index_name = index_name
        instance.settings = settings
        return instance

    # ================================================================
    # 인덱스 관리
    # ================================================================

    async def create_index(self) -> bool:
        """
        인덱스가 없을 때만 생성 (기존 데이터 보존).

        Returns: True면 새로 생성됨, False면 이미 존재.
        """
        if await self.es.indices.exists(index=self.index_name):
            return False

        schema = self.settings.to_es_schema()
        await self.es.indices.create(
            index=self.index_name,
            settings=schema["settings"],
            mappings=schema["mappings"],
        )
        logger.info(f"인덱스 생성: [cyan]{self.index_name}[/cyan] (pk={self.settings.primary_key})")
        return True

    async def update_settings(self, settings: IndexSettings | None = None):
        """검색/필터/정렬 속성 + 오타 허용 + 페이지 상한 적용. 반복 호출해도 안전."""
        if settings is not None:
            self.settings = settings
        if await self.create_index():
            return

        schema = self.settings.to_es_schema()
        mappings = schema["mappings"]
        await self.es.indices.put_settings(
            index=self.index_name,
            settings={"index.max_result_window": schema["settings"]["max_result_window"]},
        )
        await self.es.indices.put_mapping(
            index=self.index_name,
            properties=mappings["properties"],
            meta=mappings["_meta"],
        )

    async def delete_all_documents(self) -> int:
        """인덱스의 모든 문서 삭제 (인덱스/설정은 유지). 삭제된 문서 수 반환."""
        result = await self.es.delete_by_query(
            index=self.index_name,
            query={"match_all": {}},
            conflicts="proceed",
            refresh=True,
        )
        return result.get("deleted", 0)

    # ================================================================
    # 문서 쓰기
    # ================================================================

    def _doc_id(self, document: dict) -> str:
        return str(document[self.settings.primary_key])

    async def add_documents(self, documents: list[dict]) -> IndexTask:
        """문서 리스트 벌크 upsert (같은 id는 통째로 교체)"""
        if not documents:
            return IndexTask(self.index_name, 0)

        actions = [
            {
                "_index": self.index_name,
                "_id": self._doc_id(doc),
                "_source": doc,
            }
            for doc in documents
        ]
        return await self._bulk(actions)

    async def update_documents(self, documents: list[dict]) -> IndexTask:
        """문서 부분 업데이트 (merge). 없는 문서는 생성."""
        if not documents:
            return IndexTask(self.index_name, 0)

        actions = [
            {
                "_op_type": "update",
                "_index": self.index_name,
                "_id": self._doc_id(doc),
                "doc": doc,
                "doc_as_upsert": True,
            }
            for doc in documents
        ]
        return await self._bulk(actions)

    async def _bulk(self, actions: list[dict]) -> IndexTask:
        success, errors = await async_bulk(
            self.es, actions, chunk_size=len(actions), raise_on_error=False
        )
        if errors:
            raise UpstreamError(
                f"{self.index_name}: bulk errors {len(errors)}/{len(actions)} failures"
            )
        return IndexTask(self.index_name, success)

    async def update_document(self, doc_id: str, fields: dict, refresh: bool = True):
        """단일 문서 merge 업데이트. fields에 없는 필드는 그대로 유지."""
        await self.es.update(
            index=self.index_name,
            id=doc_id,
            doc=fields,
            doc_as_upsert=True,
            refresh="true" if refresh else "false",
        )

    async def delete_document(self, doc_id: str, refresh: bool = True) -> bool:
        """문서 삭제. 존재하지 않으면 무시하고 False."""
        try:
            await self.es.delete(
                index=self.index_name,
                id=doc_id,
                refresh="true" if refresh else "false",
            )
        except NotFoundError:
            return False
        return True

    async def wait_for_task(self, task: IndexTask):
        """쓰기 작업이 검색에 반영될 때까지 대기 (refresh)"""
        await self.es.indices.refresh(index=task.index)

    # ================================================================
    # 조회
    # ================================================================

    async def get(self, doc_id: str) -> dict | None:
        """ID로 문서 조회. 없으면 None."""
        try:
            result = await self.es.get(index=self.index_name, id=doc_id)
            return result["_source"]
        except NotFoundError:
            return None

    async def get_stats(self) -> dict:
        result = await self.es.count(index=self.index_name)
        return {"numberOfDocuments": result["count"]}

    async def search(
        self,
        query: str,
        filters: dict[str, str] | None = None,
        sort: list[str] | None = None,
        size: int = 20,
        offset: int = 0,
    ) -> list[dict]:
        """
        검색 속성 전체에 대한 오타 허용 검색.

        Args:
            filters: {"country": "Mexico"} — filterable 속성만 허용
            sort:    ["price:asc"] — sortable 속성만 허용
        """
        settings = self.settings
        bool_query: dict = {}
        if query:
            bool_query["must"] = [{
                "multi_match": {
                    "query": query,
                    "fields": [f for f in settings.searchable if f not in settings.numeric],
                    "fuzziness": settings.typo_tolerance.fuzziness,
                }
            }]
        else:
            bool_query["must"] = [{"match_all": {}}]

        filter_clauses = []
        for name, value in (filters or {}).items():
            if name not in settings.filterable:
                raise ValueError(f"filterable 속성이 아님: {name}")
            filter_clauses.append({"term": {settings.field_path(name): value}})
        if filter_clauses:
            bool_query["filter"] = filter_clauses

        sort_clauses = []
        for clause in sort or []:
            name, _, order = clause.partition(":")
            if name not in settings.sortable:
                raise ValueError(f"sortable 속성이 아님: {name}")
            sort_clauses.append({settings.field_path(name): {"order": order or "asc"}})
        sort_clauses.append("_score")
        sort_clauses.extend(settings.ranking_sort())

        result = await self.es.search(
            index=self.index_name,
            query={"bool": bool_query},
            sort=sort_clauses,
            size=size,
            from_=offset,
        )
        return [hit["_source"] for hit in result["hits"]["hits"]]

    async def close(self):
        await self.es.close()
