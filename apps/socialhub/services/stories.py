"""Stories: short-lived media posts, optionally scheduled for later.

An immediate story is uploaded to the media store straight away and expires
after ``STORY_TTL_HOURS``. A story scheduled for the future keeps its bytes
on local disk until the periodic publisher uploads them and flips the story
to ``active``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database

from socialhub.connectors.media_storage import MediaStorage
from socialhub.core.exceptions import InvalidRequestError
from socialhub.core.utils import as_utc, utcnow
from socialhub.schemas.stories import MediaType, StoryStatus
from socialhub.services.users import UserDirectory

logger = logging.getLogger(__name__)


def media_type_for(content_type: str | None) -> MediaType:
    if (content_type or "").startswith("video/"):
        return MediaType.video
    return MediaType.image


@dataclass
class StoryService:
    database: Database
    media_storage: MediaStorage
    upload_dir: str = ".socialhub_data/scheduled-uploads"
    ttl_hours: int = 24
    users: UserDirectory | None = None

    def __post_init__(self) -> None:
        self._stories: Collection = self.database.get_collection("stories")

    def ensure_indexes(self) -> None:
        self._stories.create_index(
            [("expiresAt", ASCENDING)], expireAfterSeconds=0, name="expires_at_ttl"
        )
        self._stories.create_index(
            [("status", ASCENDING), ("scheduledAt", ASCENDING)], name="status_scheduled_at"
        )

    def create_story(
        self,
        author: ObjectId,
        *,
        data: bytes,
        filename: str,
        content_type: str,
        scheduled_at: datetime | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        if not data:
            raise InvalidRequestError("Media required", code="media_required")

        now = now or utcnow()
        scheduled_at = as_utc(scheduled_at) if scheduled_at else None
        doc: dict[str, Any] = {
            "author": author,
            "mediaType": media_type_for(content_type).value,
            "contentType": content_type,
            "createdAt": now,
            "updatedAt": now,
        }

        if scheduled_at and scheduled_at > now:
            doc.update(
                status=StoryStatus.scheduled.value,
                scheduledAt=scheduled_at,
                tempPath=str(self._save_temp(data, filename)),
            )
        else:
            doc.update(
                status=StoryStatus.active.value,
                mediaUrl=self.media_storage.upload(data, filename=filename, content_type=content_type),
                publishedAt=now,
                expiresAt=now + timedelta(hours=self.ttl_hours),
            )

        doc["_id"] = self._stories.insert_one(doc).inserted_id
        logger.info("Story %s created by %s (%s)", doc["_id"], author, doc["status"])
        return doc

    def list_active(self, now: datetime | None = None) -> list[dict[str, Any]]:
        now = now or utcnow()
        docs = list(
            self._stories.find(
                {"status": StoryStatus.active.value, "expiresAt": {"$gt": now}}
            ).sort([("createdAt", DESCENDING)])
        )
        if self.users is not None:
            docs = self.users.attach_authors(docs, "author")
        return docs

    def publish_scheduled(self, now: datetime | None = None) -> int:
        """Upload and activate every scheduled story that is due.

        A story whose upload fails stays scheduled and is retried on the next
        run; one whose media file is gone is marked failed and never retried.
        The rest of the batch still goes through.
        """
        now = now or utcnow()
        due = list(
            self._stories.find(
                {"status": StoryStatus.scheduled.value, "scheduledAt": {"$lte": now}}
            )
        )
        published = 0
        for story in due:
            try:
                self._publish_one(story, now)
            except FileNotFoundError:
                logger.warning("Media for scheduled story %s is missing; marking failed", story.get("_id"))
                self._mark_failed(story, now)
                continue
            except Exception as exc:
                logger.warning("Failed to publish scheduled story %s: %s", story.get("_id"), exc)
                continue
            published += 1
        if due:
            logger.info("Published %d of %d scheduled stories", published, len(due))
        return published

    def _publish_one(self, story: dict[str, Any], now: datetime) -> None:
        if not story.get("tempPath"):
            raise FileNotFoundError(f"story {story.get('_id')} has no media file")
        temp_path = Path(story["tempPath"])
        url = self.media_storage.upload(
            temp_path.read_bytes(),
            filename=temp_path.name,
            content_type=story.get("contentType") or "application/octet-stream",
        )
        self._stories.update_one(
            {"_id": story["_id"]},
            {
                "$set": {
                    "status": StoryStatus.active.value,
                    "mediaUrl": url,
                    "publishedAt": now,
                    "expiresAt": now + timedelta(hours=self.ttl_hours),
                    "updatedAt": now,
                },
                "$unset": {"tempPath": ""},
            },
        )
        temp_path.unlink(missing_ok=True)

    def _mark_failed(self, story: dict[str, Any], now: datetime) -> None:
        # expiresAt lets the TTL index reap the failed document.
        self._stories.update_one(
            {"_id": story["_id"]},
            {
                "$set": {"status": StoryStatus.failed.value, "expiresAt": now, "updatedAt": now},
                "$unset": {"tempPath": ""},
            },
        )

    def _save_temp(self, data: bytes, filename: str) -> Path:
        directory = Path(self.upload_dir)
        directory.mkdir(parents=True, exist_ok=True)
        safe_name = Path(filename or "media").name
        path = directory / f"story-{uuid.uuid4().hex[:12]}-{safe_name}"
        path.write_bytes(data)
        return path


__all__ = ["StoryService", "media_type_for"]
