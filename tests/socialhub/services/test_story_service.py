from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from bson import ObjectId

from fakes import FakeDatabase, FakeMediaStorage
from socialhub.core.exceptions import InvalidRequestError
from socialhub.schemas.stories import StoryRecord
from socialhub.services.stories import StoryService, media_type_for
from socialhub.services.users import UserDirectory

AUTHOR = ObjectId()
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _service(tmp_path: Path, storage: FakeMediaStorage | None = None) -> tuple[StoryService, FakeDatabase]:
    db = FakeDatabase()
    svc = StoryService(
        database=db,  # type: ignore[arg-type]
        media_storage=storage or FakeMediaStorage(),
        upload_dir=str(tmp_path / "scheduled"),
        ttl_hours=24,
    )
    return svc, db


def test_media_type_from_content_type() -> None:
    assert media_type_for("video/mp4").value == "video"
    assert media_type_for("image/png").value == "image"
    assert media_type_for(None).value == "image"


def test_immediate_story_is_uploaded_and_active(tmp_path: Path) -> None:
    storage = FakeMediaStorage()
    svc, _ = _service(tmp_path, storage)

    story = svc.create_story(
        AUTHOR, data=b"img", filename="sunset.png", content_type="image/png", now=NOW
    )

    assert story["status"] == "active"
    assert story["mediaUrl"].endswith("sunset.png")
    assert story["expiresAt"] == NOW + timedelta(hours=24)
    assert storage.uploads == [("sunset.png", "image/png", b"img")]
    assert [s["_id"] for s in svc.list_active(now=NOW)] == [story["_id"]]
    assert svc.list_active(now=NOW + timedelta(hours=25)) == []


def test_empty_upload_is_rejected(tmp_path: Path) -> None:
    svc, _ = _service(tmp_path)
    with pytest.raises(InvalidRequestError):
        svc.create_story(AUTHOR, data=b"", filename="x.png", content_type="image/png")


def test_scheduled_story_waits_then_publishes(tmp_path: Path) -> None:
    storage = FakeMediaStorage()
    svc, db = _service(tmp_path, storage)
    when = NOW + timedelta(hours=2)

    story = svc.create_story(
        AUTHOR,
        data=b"clip",
        filename="clip.mp4",
        content_type="video/mp4",
        scheduled_at=when,
        now=NOW,
    )

    temp = Path(story["tempPath"])
    assert story["status"] == "scheduled"
    assert story["mediaType"] == "video"
    assert temp.read_bytes() == b"clip"
    assert storage.uploads == []
    assert svc.list_active(now=NOW) == []

    assert svc.publish_scheduled(now=NOW + timedelta(hours=1)) == 0
    assert svc.publish_scheduled(now=when) == 1

    [stored] = db["stories"].docs
    assert stored["status"] == "active"
    assert stored["publishedAt"] == when
    assert stored["expiresAt"] == when + timedelta(hours=24)
    assert "tempPath" not in stored
    assert not temp.exists()
    assert storage.uploads[0][1] == "video/mp4"


def test_failed_publish_stays_scheduled(tmp_path: Path) -> None:
    svc, db = _service(tmp_path, FakeMediaStorage(fail=True))
    svc.create_story(
        AUTHOR,
        data=b"img",
        filename="a.png",
        content_type="image/png",
        scheduled_at=NOW + timedelta(minutes=5),
        now=NOW,
    )

    assert svc.publish_scheduled(now=NOW + timedelta(hours=1)) == 0
    assert db["stories"].docs[0]["status"] == "scheduled"


def test_ensure_indexes_adds_ttl(tmp_path: Path) -> None:
    svc, db = _service(tmp_path)
    svc.ensure_indexes()
    assert any(opts.get("expireAfterSeconds") == 0 for _, opts in db["stories"].indexes)


def test_missing_media_marks_story_failed(tmp_path: Path) -> None:
    storage = FakeMediaStorage()
    svc, db = _service(tmp_path, storage)
    story = svc.create_story(
        AUTHOR,
        data=b"img",
        filename="a.png",
        content_type="image/png",
        scheduled_at=NOW + timedelta(minutes=5),
        now=NOW,
    )
    Path(story["tempPath"]).unlink()
    later = NOW + timedelta(hours=1)

    assert svc.publish_scheduled(now=later) == 0

    [stored] = db["stories"].docs
    assert stored["status"] == "failed"
    assert stored["expiresAt"] == later
    assert "tempPath" not in stored
    assert storage.uploads == []
    calls_before = len(db["stories"].calls)
    assert svc.publish_scheduled(now=later + timedelta(minutes=1)) == 0
    assert db["stories"].calls[calls_before:] == ["find"]


def test_active_stories_list_author_display_fields(tmp_path: Path) -> None:
    svc, db = _service(tmp_path)
    db["users"].docs.append({"_id": AUTHOR, "username": "sam", "profilePicture": "s.png"})
    svc.users = UserDirectory(database=db)  # type: ignore[arg-type]
    svc.create_story(AUTHOR, data=b"img", filename="a.png", content_type="image/png", now=NOW)

    [story] = svc.list_active(now=NOW)

    wire = StoryRecord.model_validate(story).to_wire()
    assert wire["author"] == {"_id": str(AUTHOR), "username": "sam", "profilePicture": "s.png"}
