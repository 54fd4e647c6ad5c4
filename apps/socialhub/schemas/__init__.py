"""Pydantic schemas shared across the app."""

from .ids import PyObjectId, parse_object_id
from .messages import ConversationKind, MessageCreate, MessageRecord
from .realtime import InboundEvent, OutboundEvent, SocketFrame, group_room

__all__ = [
    "ConversationKind",
    "InboundEvent",
    "MessageCreate",
    "MessageRecord",
    "OutboundEvent",
    "PyObjectId",
    "SocketFrame",
    "group_room",
    "parse_object_id",
]
