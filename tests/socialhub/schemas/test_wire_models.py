from __future__ import annotations

import pytest
from bson import ObjectId
from pydantic import ValidationError

from socialhub.core.exceptions import InvalidRequestError
from socialhub.schemas.groups import GroupRecord
from socialhub.schemas.ids import parse_object_id
from socialhub.schemas.messages import MessageCreate, MessageRecord
from socialhub.schemas.realtime import SocketFrame, TypingPayload, group_room


def test_records_accept_mongo_documents_and_emit_camel_case() -> None:
    oid, owner = ObjectId(), ObjectId()
    record = GroupRecord.model_validate(
        {"_id": oid, "name": "Hikers", "owner": owner, "members": [owner], "isPrivate": False, "extra": 1}
    )

    wire = record.to_wire()
    assert wire["_id"] == str(oid)
    assert wire["owner"] == str(owner)
    assert wire["members"] == [str(owner)]
    assert wire["isPrivate"] is False
    assert "extra" not in wire


def test_object_id_strings_are_accepted_and_garbage_rejected() -> None:
    oid = ObjectId()
    record = MessageRecord.model_validate({"_id": str(oid), "senderId": str(oid), "message": "hi"})
    assert record.id == oid

    with pytest.raises(ValidationError):
        MessageRecord.model_validate({"_id": "nope", "senderId": str(oid), "message": "hi"})


def test_parse_object_id() -> None:
    oid = ObjectId()
    assert parse_object_id(str(oid)) == oid
    with pytest.raises(InvalidRequestError) as excinfo:
        parse_object_id("123", field="groupId")
    assert excinfo.value.details == {"field": "groupId"}


def test_message_create_strips_text() -> None:
    assert MessageCreate.model_validate({"textMessage": "  hi  "}).text_message == "hi"
    with pytest.raises(ValidationError):
        MessageCreate.model_validate({"textMessage": "x" * 5001})


def test_socket_payloads() -> None:
    assert SocketFrame.model_validate({"event": "typing"}).data is None
    payload = TypingPayload.model_validate({"toUserId": "b", "fromUserId": "a"})
    assert (payload.to_user_id, payload.from_user_id) == ("b", "a")
    with pytest.raises(ValidationError):
        TypingPayload.model_validate({"toUserId": " ", "fromUserId": "a"})
    assert group_room("g1") == "group-g1"
