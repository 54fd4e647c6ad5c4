from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from socialhub.core.exceptions import NotFoundError
from socialhub.core.utils import utcnow
from socialhub.services.users import UserDirectory


@dataclass
class NotificationService:
    """Per-user activity notifications (invites, and later likes/follows)."""

    database: Database
    users: UserDirectory | None = None

    def __post_init__(self) -> None:
        self._notifications: Collection = self.database.get_collection("notifications")

    def ensure_indexes(self) -> None:
        self._notifications.create_index(
            [("user", ASCENDING), ("createdAt", DESCENDING)], name="user_created"
        )

    def create(
        self,
        *,
        type_: str,
        user: ObjectId,
        from_user: ObjectId | None = None,
        group_id: ObjectId | None = None,
        message: str | None = None,
    ) -> dict[str, Any]:
        now = utcnow()
        doc: dict[str, Any] = {
            "type": type_,
            "user": user,
            "fromUser": from_user,
            "groupId": group_id,
            "message": message,
            "read": False,
            "createdAt": now,
            "updatedAt": now,
        }
        doc["_id"] = self._notifications.insert_one(doc).inserted_id
        return doc

    def list_for(self, user: ObjectId) -> list[dict[str, Any]]:
        docs = list(self._notifications.find({"user": user}).sort([("createdAt", DESCENDING)]))
        if self.users is not None:
            docs = self.users.attach_authors(docs, "fromUser")
        return docs

    def mark_read(self, notification_id: ObjectId, user: ObjectId) -> None:
        res = self._notifications.update_one(
            {"_id": notification_id, "user": user},
            {"$set": {"read": True, "updatedAt": utcnow()}},
        )
        if not res.matched_count:
            raise NotFoundError("Notification not found")

    def clear(self, user: ObjectId) -> int:
        return self._notifications.delete_many({"user": user}).deleted_count


__all__ = ["NotificationService"]
