from __future__ import annotations

from socialhub.realtime.connections import ConnectionRegistry
from socialhub.realtime.presence import PresenceRegistry
from socialhub.schemas.realtime import OutboundEvent

TYPING_EVENTS = frozenset({OutboundEvent.typing, OutboundEvent.stop_typing})


class TypingRelay:
    """Forward typing / stopTyping to the recipient if they are online.

    Stateless: offline recipients lose the signal, nothing is queued and
    repeated signals are not coalesced (the client debounces).
    """

    def __init__(self, presence: PresenceRegistry, connections: ConnectionRegistry) -> None:
        self.presence = presence
        self.connections = connections

    async def relay(self, from_user_id: str, to_user_id: str, kind: OutboundEvent) -> bool:
        if kind not in TYPING_EVENTS:
            raise ValueError(f"Not a typing signal: {kind}")
        connection_id = self.presence.lookup(to_user_id)
        if connection_id is None:
            return False
        return await self.connections.push(connection_id, kind.value, {"fromUserId": from_user_id})


__all__ = ["TYPING_EVENTS", "TypingRelay"]
