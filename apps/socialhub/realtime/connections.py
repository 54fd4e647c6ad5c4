from __future__ import annotations

import logging
import uuid
from typing import Any, Protocol

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class Connection(Protocol):
    connection_id: str
    user_id: str | None
    authenticated_user_id: str | None

    async def send_json(self, payload: dict[str, Any]) -> None: ...


class WebSocketConnection:
    """One accepted WebSocket plus the user it registered as (if any).

    `authenticated_user_id` comes from the session cookie on the handshake;
    when set, the socket may only register as that user.
    """

    def __init__(
        self,
        websocket: WebSocket,
        connection_id: str | None = None,
        *,
        authenticated_user_id: str | None = None,
    ) -> None:
        self.websocket = websocket
        self.connection_id = connection_id or uuid.uuid4().hex
        self.user_id: str | None = None
        self.authenticated_user_id = authenticated_user_id

    async def send_json(self, payload: dict[str, Any]) -> None:
        await self.websocket.send_json(payload)

    def __repr__(self) -> str:
        return f"WebSocketConnection({self.connection_id!r}, user_id={self.user_id!r})"


class ConnectionRegistry:
    """Live connections owned by this process, keyed by connection id."""

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}

    def add(self, connection: Connection) -> None:
        self._connections[connection.connection_id] = connection

    def remove(self, connection_id: str) -> Connection | None:
        return self._connections.pop(connection_id, None)

    def get(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    async def push(self, connection_id: str, event: str, data: Any) -> bool:
        """Send one frame; a missing or dead connection is a silent no-op."""
        connection = self._connections.get(connection_id)
        if connection is None:
            return False
        try:
            await connection.send_json({"event": event, "data": data})
        except Exception as exc:  # dead socket; the disconnect handler cleans up
            logger.debug("Push %s to %s failed: %s", event, connection_id, exc)
            return False
        return True


__all__ = ["Connection", "ConnectionRegistry", "WebSocketConnection"]
