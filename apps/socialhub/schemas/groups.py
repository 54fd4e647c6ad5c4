from __future__ import annotations

from enum import Enum

from pydantic import Field

from socialhub.schemas.base import MongoRecord, WireModel
from socialhub.schemas.ids import PyObjectId
from socialhub.schemas.messages import AuthorSummary


class InviteStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class GroupCreate(WireModel):
    name: str = ""
    is_private: bool = True
    description: str = ""
    members: list[str] = Field(default_factory=list)


class GroupUpdate(WireModel):
    name: str | None = None
    description: str | None = None
    is_private: bool | None = None


class GroupRecord(MongoRecord):
    name: str
    owner: PyObjectId
    members: list[PyObjectId] = Field(default_factory=list)
    is_private: bool = True
    description: str = ""


class InviteCreate(WireModel):
    group_id: str | None = None
    invited_user_id: str | None = None


class MemberRemove(WireModel):
    group_id: str | None = None
    member_id: str | None = None


class GroupSummary(WireModel):
    """Name of the group an invite points at."""

    id: PyObjectId = Field(alias="_id")
    name: str = ""


class InviteRecord(MongoRecord):
    group_id: GroupSummary | PyObjectId
    invited_by: AuthorSummary | PyObjectId
    invited_user: PyObjectId
    status: InviteStatus = InviteStatus.pending


class GroupResponse(WireModel):
    success: bool = True
    group: GroupRecord


class GroupListResponse(WireModel):
    success: bool = True
    groups: list[GroupRecord] = Field(default_factory=list)


class InviteResponse(WireModel):
    success: bool = True
    invite: InviteRecord
    group: GroupRecord | None = None


class InviteListResponse(WireModel):
    success: bool = True
    invites: list[InviteRecord] = Field(default_factory=list)


__all__ = [
    "GroupCreate",
    "GroupListResponse",
    "GroupRecord",
    "GroupResponse",
    "GroupSummary",
    "GroupUpdate",
    "InviteCreate",
    "InviteListResponse",
    "InviteRecord",
    "InviteResponse",
    "InviteStatus",
    "MemberRemove",
]
