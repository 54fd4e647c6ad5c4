from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from starlette.concurrency import run_in_threadpool

from socialhub.api.dependencies import get_current_user_id
from socialhub.core.dependencies import get_story_service
from socialhub.core.exceptions import InvalidRequestError
from socialhub.schemas.stories import StoryListResponse, StoryRecord, StoryResponse, StoryStatus
from socialhub.services.stories import StoryService

router = APIRouter(prefix="/api/v1/story", tags=["stories"])


@router.post("/", status_code=status.HTTP_201_CREATED)
async def add_story(
    media: Optional[UploadFile] = File(default=None),
    scheduled_at: Optional[datetime] = Form(default=None, alias="scheduledAt"),
    user_id: ObjectId = Depends(get_current_user_id),
    svc: StoryService = Depends(get_story_service),
) -> dict:
    if media is None:
        raise InvalidRequestError("Media required", code="media_required")
    data = await media.read()
    doc = await run_in_threadpool(
        lambda: svc.create_story(
            user_id,
            data=data,
            filename=media.filename or "media",
            content_type=media.content_type or "application/octet-stream",
            scheduled_at=scheduled_at,
        )
    )
    story = StoryRecord.model_validate(doc)
    message = "Story scheduled" if story.status is StoryStatus.scheduled else "Story uploaded"
    return StoryResponse(story=story, message=message).to_wire()


@router.get("/")
def list_stories(
    _user_id: ObjectId = Depends(get_current_user_id),
    svc: StoryService = Depends(get_story_service),
) -> dict:
    stories = [StoryRecord.model_validate(doc) for doc in svc.list_active()]
    return StoryListResponse(stories=stories).to_wire()
