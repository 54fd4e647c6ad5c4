from __future__ import annotations

import logging
from typing import Any

from socialhub.realtime.connections import ConnectionRegistry
from socialhub.realtime.stores import InMemoryRoomStore, RoomStore

logger = logging.getLogger(__name__)


class RoomMembershipManager:
    """Named broadcast sets of connections (one room per group conversation).

    Membership is per connection, not per user, and is swept when the
    connection goes away. Who may join a room is decided upstream.
    """

    def __init__(self, connections: ConnectionRegistry, store: RoomStore | None = None) -> None:
        self.connections = connections
        self.store: RoomStore = store if store is not None else InMemoryRoomStore()

    def join(self, connection_id: str, room_id: str) -> None:
        self.store.add(room_id, connection_id)

    def leave(self, connection_id: str, room_id: str) -> None:
        self.store.discard(room_id, connection_id)

    def members(self, room_id: str) -> list[str]:
        return [cid for cid in self.store.members(room_id) if cid in self.connections]

    def drop_connection(self, connection_id: str) -> list[str]:
        return self.store.drop(connection_id)

    async def broadcast(self, room_id: str, event: str, data: Any) -> int:
        """Push to every live member, the sender's own connection included."""
        targets = self.members(room_id)
        for connection_id in targets:
            await self.connections.push(connection_id, event, data)
        logger.debug("Broadcast %s to %s (%d connections)", event, room_id, len(targets))
        return len(targets)


__all__ = ["RoomMembershipManager"]
