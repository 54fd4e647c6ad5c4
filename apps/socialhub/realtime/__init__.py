"""Realtime presence, room membership and live message delivery.

Sockets and rooms are process-local and ephemeral (presence can optionally
live in Redis). Persisted conversation history lives in the document store;
this package only pushes to connections that are live right now.
"""

from .connections import ConnectionRegistry, WebSocketConnection
from .hub import RealtimeHub
from .presence import PresenceRegistry
from .rooms import RoomMembershipManager
from .router import MessageDeliveryRouter
from .stores import InMemoryPresenceStore, InMemoryRoomStore, RedisPresenceStore
from .typing_relay import TypingRelay

__all__ = [
    "ConnectionRegistry",
    "InMemoryPresenceStore",
    "InMemoryRoomStore",
    "MessageDeliveryRouter",
    "PresenceRegistry",
    "RealtimeHub",
    "RedisPresenceStore",
    "RoomMembershipManager",
    "TypingRelay",
    "WebSocketConnection",
]
