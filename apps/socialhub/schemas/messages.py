from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator

from socialhub.schemas.base import MongoRecord, WireModel
from socialhub.schemas.ids import PyObjectId


class ConversationKind(str, Enum):
    direct = "direct"
    group = "group"


class MessageCreate(WireModel):
    text_message: str = Field(default="", max_length=5000)

    @field_validator("text_message")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip()


class AuthorSummary(WireModel):
    """Display fields of a message author, embedded in group payloads."""

    id: PyObjectId = Field(alias="_id")
    username: str = ""
    profile_picture: str = ""


class MessageRecord(MongoRecord):
    """A persisted chat message (direct or group)."""

    sender_id: AuthorSummary | PyObjectId
    receiver_id: PyObjectId | None = None
    group_id: PyObjectId | None = None
    message: str


class ConversationRecord(MongoRecord):
    type: ConversationKind = ConversationKind.direct
    key: str
    group_id: PyObjectId | None = None
    participants: list[PyObjectId] = Field(default_factory=list)
    messages: list[PyObjectId] = Field(default_factory=list)


class MessageResponse(WireModel):
    success: bool = True
    new_message: MessageRecord


class MessageListResponse(WireModel):
    success: bool = True
    messages: list[MessageRecord] = Field(default_factory=list)


__all__ = [
    "AuthorSummary",
    "ConversationKind",
    "ConversationRecord",
    "MessageCreate",
    "MessageListResponse",
    "MessageRecord",
    "MessageResponse",
]
