from __future__ import annotations

import logging

from celery import shared_task

from socialhub.core.dependencies import get_story_service

logger = logging.getLogger(__name__)


@shared_task(name="socialhub.tasks.stories.publish_scheduled_stories")
def publish_scheduled_stories() -> dict:
    """Upload and activate scheduled stories whose time has come."""
    svc = get_story_service()
    published = svc.publish_scheduled()
    logger.info("Scheduled story run finished (published=%d)", published)
    return {"published": published}
