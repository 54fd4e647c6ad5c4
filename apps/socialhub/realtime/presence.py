"""Presence registry: which live connection a user is reachable on.

Registration is separate from transport connect: a socket is accepted first
and only becomes addressable once the client sends ``register``. Until then
the user is offline as far as routing is concerned.
"""

from __future__ import annotations

import logging

from socialhub.realtime.stores import InMemoryPresenceStore, PresenceStore

logger = logging.getLogger(__name__)


class PresenceRegistry:
    def __init__(self, store: PresenceStore | None = None) -> None:
        self.store: PresenceStore = store if store is not None else InMemoryPresenceStore()

    def register(self, user_id: str, connection_id: str) -> None:
        """Point ``user_id`` at ``connection_id``; the last registration wins."""
        self.store.set(str(user_id), connection_id)
        logger.debug("Registered user %s on connection %s", user_id, connection_id)

    def lookup(self, user_id: str) -> str | None:
        return self.store.get(str(user_id))

    def is_online(self, user_id: str) -> bool:
        return self.lookup(user_id) is not None

    def remove_by_connection(self, connection_id: str) -> list[str]:
        """Drop every entry still pointing at ``connection_id``.

        Matching on the connection id (not the user id) keeps a newer
        registration for the same user intact when an older socket closes.
        """
        removed = [
            user_id
            for user_id in self.store.users_for(connection_id)
            if self.store.delete_if(user_id, connection_id)
        ]
        if removed:
            logger.debug("Connection %s went offline for %s", connection_id, removed)
        return removed


__all__ = ["PresenceRegistry"]
