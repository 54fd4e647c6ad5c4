from __future__ import annotations

from bson import ObjectId
from fastapi import APIRouter, Depends

from socialhub.api.dependencies import get_current_user_id
from socialhub.core.dependencies import get_group_service, get_notification_service
from socialhub.schemas.groups import InviteListResponse, InviteRecord
from socialhub.schemas.ids import parse_object_id
from socialhub.schemas.notifications import NotificationListResponse, NotificationRecord
from socialhub.services.groups import GroupService
from socialhub.services.notifications import NotificationService

router = APIRouter(prefix="/api/v1/notification", tags=["notifications"])


@router.get("/")
def list_notifications(
    user_id: ObjectId = Depends(get_current_user_id),
    svc: NotificationService = Depends(get_notification_service),
) -> dict:
    notifications = [NotificationRecord.model_validate(doc) for doc in svc.list_for(user_id)]
    return NotificationListResponse(notifications=notifications).to_wire()


@router.get("/group-invites")
def group_invites(
    user_id: ObjectId = Depends(get_current_user_id),
    groups: GroupService = Depends(get_group_service),
) -> dict:
    invites = [InviteRecord.model_validate(doc) for doc in groups.pending_invites(user_id)]
    return InviteListResponse(invites=invites).to_wire()


@router.post("/{notification_id}/read")
def mark_read(
    notification_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: NotificationService = Depends(get_notification_service),
) -> dict:
    svc.mark_read(parse_object_id(notification_id, field="notificationId"), user_id)
    return {"success": True}


@router.delete("/clear")
def clear_notifications(
    user_id: ObjectId = Depends(get_current_user_id),
    svc: NotificationService = Depends(get_notification_service),
) -> dict:
    deleted = svc.clear(user_id)
    return {"success": True, "deleted": deleted}
