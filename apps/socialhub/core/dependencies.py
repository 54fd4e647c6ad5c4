"""Central dependency providers (FastAPI + tasks).

These helpers keep heavy clients (Mongo, Redis) and the realtime hub
process-scoped, avoiding per-request construction and enabling test-time
cache clearing/overrides.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from pymongo.database import Database

from socialhub.core.settings import settings

if TYPE_CHECKING:
    from socialhub.connectors.media_storage import MediaStorage
    from socialhub.connectors.mongo_connector import MongoConnector
    from socialhub.realtime.hub import RealtimeHub
    from socialhub.realtime.stores import PresenceStore
    from socialhub.services.conversations import ConversationStore
    from socialhub.services.groups import GroupService
    from socialhub.services.messaging import MessagingService
    from socialhub.services.notifications import NotificationService
    from socialhub.services.stories import StoryService
    from socialhub.services.users import UserAccountService, UserDirectory


@lru_cache(maxsize=1)
def get_mongo_connector() -> MongoConnector:
    from socialhub.connectors.mongo_connector import MongoConnector

    return MongoConnector()


@lru_cache(maxsize=1)
def get_mongo_database() -> Database:
    return get_mongo_connector().database


@lru_cache(maxsize=1)
def get_presence_store() -> PresenceStore:
    from socialhub.realtime.stores import InMemoryPresenceStore, RedisPresenceStore

    backend = (settings.presence_backend or "memory").strip().lower()
    if backend == "redis":
        from socialhub.core.redis_client import get_redis_client

        return RedisPresenceStore(get_redis_client(), key=settings.presence_redis_key)
    return InMemoryPresenceStore()


@lru_cache(maxsize=1)
def get_realtime_hub() -> RealtimeHub:
    from socialhub.realtime.hub import RealtimeHub

    return RealtimeHub(presence_store=get_presence_store())


@lru_cache(maxsize=1)
def get_conversation_store() -> ConversationStore:
    from socialhub.services.conversations import ConversationStore

    return ConversationStore(database=get_mongo_database())


@lru_cache(maxsize=1)
def get_user_directory() -> UserDirectory:
    from socialhub.services.users import UserDirectory

    return UserDirectory(database=get_mongo_database())


@lru_cache(maxsize=1)
def get_user_account_service() -> UserAccountService:
    from socialhub.services.users import UserAccountService, parse_email_domains

    return UserAccountService(
        database=get_mongo_database(),
        allowed_email_domains=parse_email_domains(settings.allowed_email_domains),
    )


@lru_cache(maxsize=1)
def get_notification_service() -> NotificationService:
    from socialhub.services.notifications import NotificationService

    return NotificationService(database=get_mongo_database(), users=get_user_directory())


@lru_cache(maxsize=1)
def get_group_service() -> GroupService:
    from socialhub.services.groups import GroupService

    return GroupService(
        database=get_mongo_database(),
        notifications=get_notification_service(),
        router=get_realtime_hub().router,
        users=get_user_directory(),
    )


@lru_cache(maxsize=1)
def get_messaging_service() -> MessagingService:
    from socialhub.services.messaging import MessagingService

    return MessagingService(
        conversations=get_conversation_store(),
        groups=get_group_service(),
        users=get_user_directory(),
        router=get_realtime_hub().router,
    )


@lru_cache(maxsize=1)
def get_media_storage() -> MediaStorage:
    from socialhub.connectors.media_storage import HttpMediaStorage

    return HttpMediaStorage(settings.media_upload_url, timeout=settings.media_upload_timeout)


@lru_cache(maxsize=1)
def get_story_service() -> StoryService:
    from socialhub.services.stories import StoryService

    return StoryService(
        database=get_mongo_database(),
        media_storage=get_media_storage(),
        upload_dir=settings.scheduled_upload_dir,
        ttl_hours=settings.story_ttl_hours,
        users=get_user_directory(),
    )


__all__ = [
    "get_conversation_store",
    "get_group_service",
    "get_media_storage",
    "get_messaging_service",
    "get_mongo_connector",
    "get_mongo_database",
    "get_notification_service",
    "get_presence_store",
    "get_realtime_hub",
    "get_story_service",
    "get_user_account_service",
    "get_user_directory",
]
