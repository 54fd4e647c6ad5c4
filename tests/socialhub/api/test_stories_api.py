from __future__ import annotations

from datetime import datetime, timedelta, timezone

from bson import ObjectId

AUTHOR = ObjectId()


def test_upload_story_now(api) -> None:  # type: ignore[no-untyped-def]
    api.db["users"].docs.append({"_id": AUTHOR, "username": "sam", "profilePicture": "s.png"})
    api.login(AUTHOR)
    resp = api.client.post(
        "/api/v1/story/", files={"media": ("beach.jpg", b"jpeg-bytes", "image/jpeg")}
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Story uploaded"
    assert body["story"]["status"] == "active"
    assert body["story"]["mediaType"] == "image"
    assert api.storage.uploads[0][0] == "beach.jpg"

    listed = api.client.get("/api/v1/story/").json()["stories"]
    assert [s["_id"] for s in listed] == [body["story"]["_id"]]
    assert listed[0]["author"] == {"_id": str(AUTHOR), "username": "sam", "profilePicture": "s.png"}


def test_schedule_story_for_later(api) -> None:  # type: ignore[no-untyped-def]
    api.login(AUTHOR)
    when = (datetime.now(timezone.utc) + timedelta(hours=3)).isoformat()
    resp = api.client.post(
        "/api/v1/story/",
        files={"media": ("clip.mp4", b"mp4", "video/mp4")},
        data={"scheduledAt": when},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Story scheduled"
    assert body["story"]["status"] == "scheduled"
    assert api.storage.uploads == []
    assert api.client.get("/api/v1/story/").json()["stories"] == []


def test_missing_media_is_400(api) -> None:  # type: ignore[no-untyped-def]
    api.login(AUTHOR)
    resp = api.client.post("/api/v1/story/")
    assert resp.status_code == 400
    assert resp.json()["code"] == "media_required"
