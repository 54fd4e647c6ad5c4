"""Live delivery of already-persisted messages.

The router is a notification side channel on top of durable storage: it is
only ever called after a message has been written, it never queues for
offline users, and nothing it does can fail the send that triggered it.
"""

from __future__ import annotations

import logging
from typing import Any

from socialhub.realtime.connections import ConnectionRegistry
from socialhub.realtime.presence import PresenceRegistry
from socialhub.realtime.rooms import RoomMembershipManager
from socialhub.schemas.messages import AuthorSummary, MessageRecord
from socialhub.schemas.realtime import OutboundEvent, group_room

logger = logging.getLogger(__name__)


def _sender_id(message: MessageRecord) -> str:
    sender = message.sender_id
    if isinstance(sender, AuthorSummary):
        return str(sender.id)
    return str(sender)


class MessageDeliveryRouter:
    def __init__(
        self,
        presence: PresenceRegistry,
        rooms: RoomMembershipManager,
        connections: ConnectionRegistry,
    ) -> None:
        self.presence = presence
        self.rooms = rooms
        self.connections = connections

    async def push_to_user(self, user_id: str, event: str, data: Any) -> bool:
        connection_id = self.presence.lookup(str(user_id))
        if connection_id is None:
            return False
        return await self.connections.push(connection_id, event, data)

    async def deliver_direct(self, message: MessageRecord) -> bool:
        """Push a direct message to the recipient's connection, never the author's."""
        if message.receiver_id is None:
            return False
        recipient = str(message.receiver_id)
        if recipient == _sender_id(message):
            return False
        delivered = await self.push_to_user(
            recipient, OutboundEvent.new_message.value, message.to_wire()
        )
        if not delivered:
            logger.debug("Recipient %s offline; message %s stays in history only", recipient, message.id)
        return delivered

    async def deliver_group(self, message: MessageRecord, author: AuthorSummary | None = None) -> int:
        """Broadcast to the group's room with the author's display fields attached."""
        if message.group_id is None:
            return 0
        payload = message.to_wire()
        if author is not None:
            payload["senderId"] = author.to_wire()
        payload["groupId"] = str(message.group_id)
        return await self.rooms.broadcast(
            group_room(message.group_id), OutboundEvent.new_message.value, payload
        )


__all__ = ["MessageDeliveryRouter"]
