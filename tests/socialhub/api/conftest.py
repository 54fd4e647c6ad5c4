from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fakes import FakeDatabase, FakeMediaStorage
from socialhub.core import dependencies as deps
from socialhub.core.security import create_access_token
from socialhub.main import create_app
from socialhub.realtime.hub import RealtimeHub
from socialhub.services.conversations import ConversationStore
from socialhub.services.groups import GroupService
from socialhub.services.messaging import MessagingService
from socialhub.services.notifications import NotificationService
from socialhub.services.stories import StoryService
from socialhub.services.users import UserAccountService, UserDirectory


@dataclass
class ApiHarness:
    app: FastAPI
    client: TestClient
    db: FakeDatabase
    hub: RealtimeHub
    storage: FakeMediaStorage

    def login(self, user_id: ObjectId) -> None:
        self.client.headers["Authorization"] = f"Bearer {create_access_token(str(user_id))}"


@pytest.fixture()
def api(tmp_path: Path) -> ApiHarness:
    db = FakeDatabase()
    hub = RealtimeHub()
    storage = FakeMediaStorage()
    users = UserDirectory(database=db)  # type: ignore[arg-type]
    notifications = NotificationService(database=db, users=users)  # type: ignore[arg-type]
    groups = GroupService(database=db, notifications=notifications, router=hub.router, users=users)  # type: ignore[arg-type]
    messaging = MessagingService(
        conversations=ConversationStore(database=db),  # type: ignore[arg-type]
        groups=groups,
        users=users,
        router=hub.router,
    )
    stories = StoryService(
        database=db,  # type: ignore[arg-type]
        media_storage=storage,
        upload_dir=str(tmp_path / "scheduled"),
        users=users,
    )
    accounts = UserAccountService(database=db)  # type: ignore[arg-type]

    app = create_app()
    app.dependency_overrides[deps.get_realtime_hub] = lambda: hub
    app.dependency_overrides[deps.get_notification_service] = lambda: notifications
    app.dependency_overrides[deps.get_group_service] = lambda: groups
    app.dependency_overrides[deps.get_messaging_service] = lambda: messaging
    app.dependency_overrides[deps.get_story_service] = lambda: stories
    app.dependency_overrides[deps.get_user_account_service] = lambda: accounts

    return ApiHarness(app=app, client=TestClient(app), db=db, hub=hub, storage=storage)
