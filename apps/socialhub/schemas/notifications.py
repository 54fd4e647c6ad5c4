from __future__ import annotations

from pydantic import Field

from socialhub.schemas.base import MongoRecord, WireModel
from socialhub.schemas.ids import PyObjectId
from socialhub.schemas.messages import AuthorSummary


class NotificationRecord(MongoRecord):
    type: str
    user: PyObjectId
    from_user: AuthorSummary | PyObjectId | None = None
    group_id: PyObjectId | None = None
    message: str | None = None
    read: bool = False


class NotificationListResponse(WireModel):
    success: bool = True
    notifications: list[NotificationRecord] = Field(default_factory=list)


__all__ = ["NotificationListResponse", "NotificationRecord"]
