"""변경 이벤트 1건 → 검색 인덱스 변경 1건 (증분 동기화)

    INSERT: 외래키 4개 동시 조회 → 전체 문서 upsert
    UPDATE: record에 있는 외래키만 동시 조회 → merge 업데이트 (없는 필드 보존)
    DELETE: old_record.Product_ID 문서 삭제 (없어도 성공)

같은 이벤트가 여러 번 와도 결과는 같다 (at-least-once 전달 가정).
"""

import asyncio

from .documents import (
    FOREIGN_KEYS,
    ForeignKey,
    partial_product_document,
    product_document_from_record,
)
from .events import ChangeEvent, EventType
from .indexer import SearchIndexer
from .log import get_logger
from .source import CatalogSource

logger = get_logger("handler")


class SyncHandler:
    def __init__(self, source: CatalogSource, indexer: SearchIndexer):
        self.source = source
        self.indexer = indexer

    async def _resolve(self, fk: ForeignKey, value: str | None) -> str | None:
        if not value:
            return None
        return await self.source.lookup_title(fk, value)

    async def _resolve_all(self, record: dict, only_present: bool) -> dict[str, str | None]:
        """외래키 표시 이름 동시 조회 (fan-out → 전부 끝나면 fan-in)"""
        targets = [
            fk for fk in FOREIGN_KEYS
            if not only_present or record.get(fk.record_key)
        ]
        titles = await asyncio.gather(*[
            self._resolve(fk, record.get(fk.record_key)) for fk in targets
        ])
        return {fk.field: title for fk, title in zip(targets, titles)}

    async def handle(self, event: ChangeEvent) -> str:
        """이벤트 적용. 적용한 동작 이름 반환 (upsert / update / delete / noop)."""
        if event.type is EventType.INSERT:
            record = event.record_fields()
            titles = await self._resolve_all(record, only_present=False)
            document = product_document_from_record(record, titles)
            await self.indexer.add_documents([document])
            logger.info(f"INSERT → upsert id={document['id']}")
            return "upsert"

        if event.type is EventType.UPDATE:
            record = event.record_fields()
            titles = await self._resolve_all(record, only_present=True)
            document = partial_product_document(record, titles)
            doc_id = document.pop("id")
            await self.indexer.update_document(doc_id, {"id": doc_id, **document})
            logger.info(f"UPDATE → merge id={doc_id} fields={sorted(document)}")
            return "update"

        doc_id = event.old_record.Product_ID
        deleted = await self.indexer.delete_document(doc_id)
        if not deleted:
            logger.info(f"DELETE → id={doc_id} 없음 (이미 일치)")
            return "noop"
        logger.info(f"DELETE → id={doc_id}")
        return "delete"
