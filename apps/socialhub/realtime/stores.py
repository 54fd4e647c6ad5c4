"""Key-value backings for presence and room membership.

Both registries take their store by injection. The in-memory stores are the
default for a single process; `RedisPresenceStore` shares presence lookups
across processes (pushes still only reach sockets owned by this process).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Protocol


class PresenceStore(Protocol):
    def set(self, user_id: str, connection_id: str) -> None: ...

    def get(self, user_id: str) -> str | None: ...

    def delete_if(self, user_id: str, connection_id: str) -> bool: ...

    def users_for(self, connection_id: str) -> list[str]: ...


class RoomStore(Protocol):
    def add(self, room_id: str, connection_id: str) -> None: ...

    def discard(self, room_id: str, connection_id: str) -> None: ...

    def members(self, room_id: str) -> list[str]: ...

    def drop(self, connection_id: str) -> list[str]: ...


class InMemoryPresenceStore:
    """`user_id -> connection_id` with a reverse index for disconnect sweeps."""

    def __init__(self) -> None:
        self._by_user: dict[str, str] = {}
        self._by_connection: dict[str, set[str]] = defaultdict(set)

    def set(self, user_id: str, connection_id: str) -> None:
        previous = self._by_user.get(user_id)
        if previous is not None and previous != connection_id:
            self._unlink(previous, user_id)
        self._by_user[user_id] = connection_id
        self._by_connection[connection_id].add(user_id)

    def get(self, user_id: str) -> str | None:
        return self._by_user.get(user_id)

    def delete_if(self, user_id: str, connection_id: str) -> bool:
        if self._by_user.get(user_id) != connection_id:
            return False
        del self._by_user[user_id]
        self._unlink(connection_id, user_id)
        return True

    def users_for(self, connection_id: str) -> list[str]:
        return list(self._by_connection.get(connection_id, ()))

    def _unlink(self, connection_id: str, user_id: str) -> None:
        users = self._by_connection.get(connection_id)
        if users is None:
            return
        users.discard(user_id)
        if not users:
            self._by_connection.pop(connection_id, None)

    def __len__(self) -> int:
        return len(self._by_user)


# Delete the field only while it still points at the disconnecting connection.
_COMPARE_AND_DELETE = """
if redis.call('HGET', KEYS[1], ARGV[1]) == ARGV[2] then
    return redis.call('HDEL', KEYS[1], ARGV[1])
end
return 0
"""


class RedisPresenceStore:
    """Presence kept in one Redis hash (`user_id -> connection_id`)."""

    def __init__(self, client: Any, key: str = "socialhub:presence") -> None:
        self._client = client
        self._key = key
        self._compare_and_delete = client.register_script(_COMPARE_AND_DELETE)

    def set(self, user_id: str, connection_id: str) -> None:
        self._client.hset(self._key, user_id, connection_id)

    def get(self, user_id: str) -> str | None:
        return self._client.hget(self._key, user_id)

    def delete_if(self, user_id: str, connection_id: str) -> bool:
        removed = self._compare_and_delete(keys=[self._key], args=[user_id, connection_id])
        return bool(removed)

    def users_for(self, connection_id: str) -> list[str]:
        entries = self._client.hgetall(self._key) or {}
        return [user_id for user_id, cid in entries.items() if cid == connection_id]


class InMemoryRoomStore:
    def __init__(self) -> None:
        self._members: dict[str, set[str]] = defaultdict(set)
        self._rooms: dict[str, set[str]] = defaultdict(set)

    def add(self, room_id: str, connection_id: str) -> None:
        self._members[room_id].add(connection_id)
        self._rooms[connection_id].add(room_id)

    def discard(self, room_id: str, connection_id: str) -> None:
        members = self._members.get(room_id)
        if members is not None:
            members.discard(connection_id)
            if not members:
                self._members.pop(room_id, None)
        rooms = self._rooms.get(connection_id)
        if rooms is not None:
            rooms.discard(room_id)
            if not rooms:
                self._rooms.pop(connection_id, None)

    def members(self, room_id: str) -> list[str]:
        return list(self._members.get(room_id, ()))

    def drop(self, connection_id: str) -> list[str]:
        rooms = list(self._rooms.get(connection_id, ()))
        for room_id in rooms:
            self.discard(room_id, connection_id)
        return rooms


__all__ = [
    "InMemoryPresenceStore",
    "InMemoryRoomStore",
    "PresenceStore",
    "RedisPresenceStore",
    "RoomStore",
]
