"""Products 행 변경 이벤트 (INSERT / UPDATE / DELETE) 모델 + 검증

payload 형식:
    {"type": "INSERT", "record": {...}}
    {"type": "UPDATE", "record": {...}}
    {"type": "DELETE", "old_record": {"Product_ID": "..."}}
"""

from enum import Enum
from typing import Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, model_validator

from .errors import ValidationError


class EventType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ProductRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    Product_ID: str
    Product_Title: str
    Product_Price: Optional[str] = None
    Product_Image_URL: Optional[str] = None
    Product_Title_URL: Optional[str] = None
    Product_MOQ: Optional[str] = None
    Product_Country_ID: Optional[str] = None
    Product_Category_ID: Optional[str] = None
    Product_Supplier_ID: Optional[str] = None
    Product_Source_ID: Optional[str] = None


class OldRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    Product_ID: str


class ChangeEvent(BaseModel):
    type: EventType
    record: Optional[ProductRecord] = None
    old_record: Optional[OldRecord] = None

    @model_validator(mode="after")
    def _check_required_record(self):
        if self.type in (EventType.INSERT, EventType.UPDATE) and self.record is None:
            raise ValueError(f"Record required for {self.type.value}")
        if self.type is EventType.DELETE and self.old_record is None:
            raise ValueError("Old record required for DELETE")
        return self

    def record_fields(self) -> dict:
        """record에 실제로 값이 있는 컬럼만"""
        if self.record is None:
            return {}
        return self.record.model_dump(exclude_none=True)


def _error_message(e: pydantic.ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"])
        msg = err["msg"].removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_event(payload: Any) -> ChangeEvent:
    """payload → ChangeEvent. 형식이 틀리면 ValidationError (인덱스 호출 전)."""
    try:
        return ChangeEvent.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(_error_message(e)) from e


class EmbeddingRequest(BaseModel):
    text: str = pydantic.Field(min_length=1, max_length=8000)


def parse_embedding_request(payload: Any) -> EmbeddingRequest:
    try:
        return EmbeddingRequest.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(_error_message(e)) from e
