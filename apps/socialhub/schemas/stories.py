from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from socialhub.schemas.base import MongoRecord, WireModel
from socialhub.schemas.ids import PyObjectId
from socialhub.schemas.messages import AuthorSummary


class StoryStatus(str, Enum):
    scheduled = "scheduled"
    active = "active"
    failed = "failed"


class MediaType(str, Enum):
    image = "image"
    video = "video"


class StoryRecord(MongoRecord):
    author: AuthorSummary | PyObjectId
    media_url: str | None = None
    media_type: MediaType = MediaType.image
    status: StoryStatus = StoryStatus.active
    scheduled_at: datetime | None = None
    published_at: datetime | None = None
    expires_at: datetime | None = None


class StoryResponse(WireModel):
    success: bool = True
    story: StoryRecord
    message: str | None = None


class StoryListResponse(WireModel):
    success: bool = True
    stories: list[StoryRecord] = Field(default_factory=list)


__all__ = ["MediaType", "StoryListResponse", "StoryRecord", "StoryResponse", "StoryStatus"]
