"""Socket frame and event payload models.

Every frame is ``{"event": <name>, "data": <payload>}`` in both directions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from socialhub.schemas.base import WireModel


class InboundEvent(str, Enum):
    register = "register"
    join_group = "joinGroup"
    leave_group = "leaveGroup"
    typing = "typing"
    stop_typing = "stopTyping"


class OutboundEvent(str, Enum):
    connected = "connected"
    new_message = "newMessage"
    typing = "typing"
    stop_typing = "stopTyping"
    group_invite = "groupInviteNotification"
    notification = "notification"


class SocketFrame(BaseModel):
    event: str = Field(min_length=1)
    data: Any = None


def _non_empty(v: Any) -> str:
    value = str(v).strip() if v is not None else ""
    if not value:
        raise ValueError("must be non-empty")
    return value


class RegisterPayload(WireModel):
    user_id: str

    @field_validator("user_id", mode="before")
    @classmethod
    def _required(cls, v: Any) -> str:
        return _non_empty(v)


class GroupRoomPayload(WireModel):
    group_id: str

    @field_validator("group_id", mode="before")
    @classmethod
    def _required(cls, v: Any) -> str:
        return _non_empty(v)


class TypingPayload(WireModel):
    to_user_id: str
    from_user_id: str

    @field_validator("to_user_id", "from_user_id", mode="before")
    @classmethod
    def _required(cls, v: Any) -> str:
        return _non_empty(v)


def group_room(group_id: Any) -> str:
    """Room name used for a group conversation's broadcast channel."""
    return f"group-{group_id}"


__all__ = [
    "GroupRoomPayload",
    "InboundEvent",
    "OutboundEvent",
    "RegisterPayload",
    "SocketFrame",
    "TypingPayload",
    "group_room",
]
