"""변경 이벤트 / 임베딩 요청 payload 검증"""

import pytest

from catalog_sync.errors import ValidationError
from catalog_sync.events import EventType, parse_embedding_request, parse_event


def test_parse_insert():
    event = parse_event({
        "type": "INSERT",
        "record": {"Product_ID": 1, "Product_Title": "X", "Product_Country_ID": "c1", "extra": 5},
    })
    assert event.type is EventType.INSERT
    # 숫자 id도 문자열로
    assert event.record.Product_ID == "1"
    assert event.record_fields() == {
        "Product_ID": "1",
        "Product_Title": "X",
        "Product_Country_ID": "c1",
    }


def test_parse_delete():
    event = parse_event({"type": "DELETE", "old_record": {"Product_ID": "7"}})
    assert event.type is EventType.DELETE
    assert event.old_record.Product_ID == "7"
    assert event.record_fields() == {}


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"type": "INSERT"}, "Record required for INSERT"),
        ({"type": "UPDATE", "record": None}, "Record required for UPDATE"),
        ({"type": "DELETE"}, "Old record required for DELETE"),
        ({"type": "UPSERT", "record": {}}, "type"),
        ({"type": "INSERT", "record": {"Product_ID": "1"}}, "Product_Title"),
        ("not an object", ""),
    ],
)
def test_parse_event_rejects(payload, message):
    with pytest.raises(ValidationError) as exc:
        parse_event(payload)
    assert exc.value.status_code == 400
    assert message in str(exc.value)


def test_embedding_request_bounds():
    assert parse_embedding_request({"text": "hello"}).text == "hello"
    parse_embedding_request({"text": "a" * 8000})

    for payload in ({"text": ""}, {"text": "a" * 8001}, {}):
        with pytest.raises(ValidationError):
            parse_embedding_request(payload)
