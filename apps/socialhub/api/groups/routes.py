from __future__ import annotations

from bson import ObjectId
from fastapi import APIRouter, Depends, status

from socialhub.api.dependencies import get_current_user_id
from socialhub.core.dependencies import get_group_service
from socialhub.core.exceptions import InvalidRequestError
from socialhub.schemas.groups import (
    GroupCreate,
    GroupListResponse,
    GroupRecord,
    GroupResponse,
    GroupUpdate,
    InviteCreate,
    InviteListResponse,
    InviteRecord,
    InviteResponse,
    MemberRemove,
)
from socialhub.schemas.ids import parse_object_id
from socialhub.services.groups import GroupService

router = APIRouter(prefix="/api/v1/group", tags=["groups"])


def _group_response(doc: dict) -> dict:
    return GroupResponse(group=GroupRecord.model_validate(doc)).to_wire()


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_group(
    payload: GroupCreate,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    return _group_response(svc.create_group(user_id, payload))


@router.get("/mine")
def my_groups(
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    groups = [GroupRecord.model_validate(doc) for doc in svc.my_groups(user_id)]
    return GroupListResponse(groups=groups).to_wire()


@router.get("/invites/pending")
def pending_invites(
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    invites = [InviteRecord.model_validate(doc) for doc in svc.pending_invites(user_id)]
    return InviteListResponse(invites=invites).to_wire()


@router.post("/invite/send", status_code=status.HTTP_201_CREATED)
async def send_invite(
    payload: InviteCreate,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    if not payload.group_id or not payload.invited_user_id:
        raise InvalidRequestError("groupId and invitedUserId required", code="missing_fields")
    invite = await svc.send_invite(
        parse_object_id(payload.group_id, field="groupId"),
        user_id,
        parse_object_id(payload.invited_user_id, field="invitedUserId"),
    )
    return InviteResponse(invite=InviteRecord.model_validate(invite)).to_wire()


@router.post("/invite/{invite_id}/accept")
def accept_invite(
    invite_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    invite, group = svc.accept_invite(parse_object_id(invite_id, field="inviteId"), user_id)
    return InviteResponse(
        invite=InviteRecord.model_validate(invite), group=GroupRecord.model_validate(group)
    ).to_wire()


@router.post("/invite/{invite_id}/reject")
def reject_invite(
    invite_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    invite = svc.reject_invite(parse_object_id(invite_id, field="inviteId"), user_id)
    return InviteResponse(invite=InviteRecord.model_validate(invite)).to_wire()


@router.post("/member/remove")
def remove_member(
    payload: MemberRemove,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    if not payload.group_id or not payload.member_id:
        raise InvalidRequestError("groupId and memberId required", code="missing_fields")
    group = svc.remove_member(
        parse_object_id(payload.group_id, field="groupId"),
        user_id,
        parse_object_id(payload.member_id, field="memberId"),
    )
    return _group_response(group)


@router.post("/{group_id}/join")
def join_group(
    group_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    return _group_response(svc.join_group(parse_object_id(group_id, field="groupId"), user_id))


@router.post("/{group_id}/leave")
def leave_group(
    group_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    return _group_response(svc.leave_group(parse_object_id(group_id, field="groupId"), user_id))


@router.put("/{group_id}")
def update_group(
    group_id: str,
    patch: GroupUpdate,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: GroupService = Depends(get_group_service),
) -> dict:
    group = svc.update_group(parse_object_id(group_id, field="groupId"), user_id, patch)
    return _group_response(group)
