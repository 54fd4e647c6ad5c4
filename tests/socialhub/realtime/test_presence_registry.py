from __future__ import annotations

from fakes import FakeRedis
from socialhub.realtime.presence import PresenceRegistry
from socialhub.realtime.stores import InMemoryPresenceStore, RedisPresenceStore


def test_last_registration_wins() -> None:
    presence = PresenceRegistry()
    presence.register("u1", "c1")
    presence.register("u1", "c2")

    assert presence.lookup("u1") == "c2"


def test_disconnect_removes_only_that_connection() -> None:
    presence = PresenceRegistry()
    presence.register("u1", "c1")
    presence.register("u2", "c2")

    removed = presence.remove_by_connection("c1")

    assert removed == ["u1"]
    assert presence.lookup("u1") is None
    assert presence.lookup("u2") == "c2"


def test_stale_disconnect_keeps_newer_registration() -> None:
    presence = PresenceRegistry()
    presence.register("u1", "c1")
    presence.register("u1", "c2")

    assert presence.remove_by_connection("c1") == []
    assert presence.lookup("u1") == "c2"


def test_remove_by_connection_is_idempotent() -> None:
    presence = PresenceRegistry()
    presence.register("u1", "c1")

    assert presence.remove_by_connection("c1") == ["u1"]
    assert presence.remove_by_connection("c1") == []
    assert presence.remove_by_connection("never-seen") == []


def test_unregistered_user_is_offline() -> None:
    presence = PresenceRegistry()
    assert presence.lookup("ghost") is None
    assert presence.is_online("ghost") is False


def test_in_memory_store_tracks_multiple_users_per_connection() -> None:
    store = InMemoryPresenceStore()
    store.set("u1", "c1")
    store.set("u2", "c1")

    assert sorted(store.users_for("c1")) == ["u1", "u2"]
    store.set("u1", "c9")
    assert store.users_for("c1") == ["u2"]
    assert len(store) == 2


def test_redis_store_compare_and_delete() -> None:
    client = FakeRedis()
    presence = PresenceRegistry(RedisPresenceStore(client, key="presence"))

    presence.register("u1", "c1")
    presence.register("u1", "c2")
    presence.register("u2", "c1")

    assert client.scripts, "compare-and-delete script should be registered"
    assert presence.remove_by_connection("c1") == ["u2"]
    assert presence.lookup("u1") == "c2"
    assert client.hashes["presence"] == {"u1": "c2"}
