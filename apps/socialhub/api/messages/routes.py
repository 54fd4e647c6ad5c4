from __future__ import annotations

from bson import ObjectId
from fastapi import APIRouter, Depends, status

from socialhub.api.dependencies import get_current_user_id
from socialhub.core.dependencies import get_messaging_service
from socialhub.schemas.ids import parse_object_id
from socialhub.schemas.messages import MessageCreate, MessageListResponse, MessageResponse
from socialhub.services.messaging import MessagingService

router = APIRouter(prefix="/api/v1/message", tags=["messages"])


@router.post("/send/{receiver_id}", status_code=status.HTTP_201_CREATED)
async def send_message(
    receiver_id: str,
    payload: MessageCreate,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: MessagingService = Depends(get_messaging_service),
) -> dict:
    receiver = parse_object_id(receiver_id, field="receiverId")
    message = await svc.send_direct(user_id, receiver, payload.text_message)
    return MessageResponse(new_message=message).to_wire()


@router.get("/all/{other_id}")
def get_messages(
    other_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: MessagingService = Depends(get_messaging_service),
) -> dict:
    other = parse_object_id(other_id, field="otherId")
    return MessageListResponse(messages=svc.get_direct_history(user_id, other)).to_wire()


@router.post("/group/{group_id}/send", status_code=status.HTTP_201_CREATED)
async def send_group_message(
    group_id: str,
    payload: MessageCreate,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: MessagingService = Depends(get_messaging_service),
) -> dict:
    message = await svc.send_group(
        user_id, parse_object_id(group_id, field="groupId"), payload.text_message
    )
    return MessageResponse(new_message=message).to_wire()


@router.get("/group/{group_id}/all")
def get_group_messages(
    group_id: str,
    user_id: ObjectId = Depends(get_current_user_id),
    svc: MessagingService = Depends(get_messaging_service),
) -> dict:
    messages = svc.get_group_history(user_id, parse_object_id(group_id, field="groupId"))
    return MessageListResponse(messages=messages).to_wire()
