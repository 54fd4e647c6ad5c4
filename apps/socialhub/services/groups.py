"""Group chats: membership, ownership and the invite workflow.

Group membership here is the authorization source for group messaging:
the messaging service calls `require_member` before persisting, and the
socket layer trusts that only members join a group's room.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from starlette.concurrency import run_in_threadpool

from socialhub.core.exceptions import InvalidRequestError, NotFoundError, PermissionDeniedError
from socialhub.core.utils import utcnow
from socialhub.realtime.router import MessageDeliveryRouter
from socialhub.schemas.groups import GroupCreate, GroupUpdate, InviteStatus
from socialhub.schemas.ids import parse_object_id
from socialhub.schemas.notifications import NotificationRecord
from socialhub.schemas.realtime import OutboundEvent
from socialhub.services.notifications import NotificationService
from socialhub.services.users import UserDirectory

logger = logging.getLogger(__name__)

GROUP_INVITE_NOTIFICATION = "group_invite"


def _is_member(group: dict[str, Any], user_id: ObjectId) -> bool:
    return any(str(m) == str(user_id) for m in group.get("members") or [])


@dataclass
class GroupService:
    database: Database
    notifications: NotificationService
    router: MessageDeliveryRouter | None = field(default=None)
    users: UserDirectory | None = field(default=None)

    def __post_init__(self) -> None:
        self._groups: Collection = self.database.get_collection("groups")
        self._invites: Collection = self.database.get_collection("group_invites")

    def ensure_indexes(self) -> None:
        self._groups.create_index([("members", ASCENDING)], name="members")
        self._invites.create_index(
            [("invitedUser", ASCENDING), ("status", ASCENDING)], name="invited_user_status"
        )
        self._invites.create_index(
            [("groupId", ASCENDING), ("invitedUser", ASCENDING)], name="group_invited_user"
        )

    # Groups
    def create_group(self, owner: ObjectId, payload: GroupCreate) -> dict[str, Any]:
        name = (payload.name or "").strip()
        if not name:
            raise InvalidRequestError("Group name required", code="group_name_required")

        members: list[ObjectId] = [owner]
        for raw in payload.members:
            if not raw:
                continue
            member = parse_object_id(raw, field="members")
            if member not in members:
                members.append(member)

        now = utcnow()
        doc = {
            "name": name,
            "owner": owner,
            "members": members,
            "isPrivate": payload.is_private,
            "description": payload.description or "",
            "createdAt": now,
            "updatedAt": now,
        }
        doc["_id"] = self._groups.insert_one(doc).inserted_id
        logger.info("Group %s created by %s with %d members", doc["_id"], owner, len(members))
        return doc

    def get_group(self, group_id: ObjectId) -> dict[str, Any]:
        group = self._groups.find_one({"_id": group_id})
        if not group:
            raise NotFoundError("Group not found")
        return group

    def require_member(self, group_id: ObjectId, user_id: ObjectId) -> dict[str, Any]:
        group = self._groups.find_one({"_id": group_id})
        if not group or not _is_member(group, user_id):
            raise PermissionDeniedError("Not a group member", code="not_group_member")
        return group

    def my_groups(self, user_id: ObjectId) -> list[dict[str, Any]]:
        return list(self._groups.find({"members": user_id}).sort([("updatedAt", DESCENDING)]))

    def join_group(self, group_id: ObjectId, user_id: ObjectId) -> dict[str, Any]:
        self.get_group(group_id)
        # Private groups are joinable directly for now; invites are the curated path.
        return self._update_group(group_id, {"$addToSet": {"members": user_id}})

    def leave_group(self, group_id: ObjectId, user_id: ObjectId) -> dict[str, Any]:
        self.get_group(group_id)
        return self._update_group(group_id, {"$pull": {"members": user_id}})

    def update_group(self, group_id: ObjectId, user_id: ObjectId, patch: GroupUpdate) -> dict[str, Any]:
        group = self.get_group(group_id)
        if str(group["owner"]) != str(user_id):
            raise PermissionDeniedError("Only owner can update", code="not_group_owner")
        changes: dict[str, Any] = {}
        if patch.name and patch.name.strip():
            changes["name"] = patch.name.strip()
        if patch.description is not None:
            changes["description"] = patch.description
        if patch.is_private is not None:
            changes["isPrivate"] = patch.is_private
        return self._update_group(group_id, {"$set": changes})

    def remove_member(self, group_id: ObjectId, owner: ObjectId, member_id: ObjectId) -> dict[str, Any]:
        group = self.get_group(group_id)
        if str(group["owner"]) != str(owner):
            raise PermissionDeniedError("Only owner can remove members", code="not_group_owner")
        if str(group["owner"]) == str(member_id):
            raise InvalidRequestError("Cannot remove owner", code="cannot_remove_owner")
        return self._update_group(group_id, {"$pull": {"members": member_id}})

    def _update_group(self, group_id: ObjectId, update: dict[str, Any]) -> dict[str, Any]:
        update = dict(update)
        update["$set"] = {**update.get("$set", {}), "updatedAt": utcnow()}
        doc = self._groups.find_one_and_update(
            {"_id": group_id}, update, return_document=ReturnDocument.AFTER
        )
        if not doc:
            raise NotFoundError("Group not found")
        return doc

    # Invites
    def create_invite(
        self, group_id: ObjectId, invited_by: ObjectId, invited_user: ObjectId
    ) -> tuple[dict[str, Any], dict[str, Any], dict[str, Any]]:
        group = self.get_group(group_id)
        if str(group["owner"]) != str(invited_by):
            raise PermissionDeniedError("Only owner can invite", code="not_group_owner")
        if self._invites.find_one({"groupId": group_id, "invitedUser": invited_user}):
            raise InvalidRequestError("User already invited", code="already_invited")
        if _is_member(group, invited_user):
            raise InvalidRequestError("User already member", code="already_member")

        now = utcnow()
        invite = {
            "groupId": group_id,
            "invitedBy": invited_by,
            "invitedUser": invited_user,
            "status": InviteStatus.pending.value,
            "createdAt": now,
            "updatedAt": now,
        }
        invite["_id"] = self._invites.insert_one(invite).inserted_id
        notification = self.notifications.create(
            type_=GROUP_INVITE_NOTIFICATION,
            user=invited_user,
            from_user=invited_by,
            group_id=group_id,
            message=f"You were invited to join {group['name']}",
        )
        return invite, group, notification

    async def send_invite(
        self, group_id: ObjectId, invited_by: ObjectId, invited_user: ObjectId
    ) -> dict[str, Any]:
        """Persist the invite, then tell the invitee live if they are online."""
        invite, group, notification = await run_in_threadpool(
            self.create_invite, group_id, invited_by, invited_user
        )
        if self.router is not None:
            await self.router.push_to_user(
                str(invited_user),
                OutboundEvent.group_invite.value,
                {
                    "inviteId": str(invite["_id"]),
                    "groupName": group["name"],
                    "invitedBy": str(invited_by),
                },
            )
            await self.router.push_to_user(
                str(invited_user),
                OutboundEvent.notification.value,
                NotificationRecord.model_validate(notification).to_wire(),
            )
        return invite

    def pending_invites(self, user_id: ObjectId) -> list[dict[str, Any]]:
        """Pending invites for `user_id` with the group name and inviter filled in."""
        invites = list(
            self._invites.find(
                {"invitedUser": user_id, "status": InviteStatus.pending.value}
            ).sort([("createdAt", DESCENDING)])
        )
        if not invites:
            return []
        group_ids = list({str(i["groupId"]): i["groupId"] for i in invites}.values())
        names = {
            str(g["_id"]): {"_id": g["_id"], "name": g.get("name") or ""}
            for g in self._groups.find({"_id": {"$in": group_ids}}, {"name": 1})
        }
        invites = [{**i, "groupId": names.get(str(i["groupId"]), i["groupId"])} for i in invites]
        if self.users is not None:
            invites = self.users.attach_authors(invites, "invitedBy")
        return invites

    def _pending_invite_for(self, invite_id: ObjectId, user_id: ObjectId) -> dict[str, Any]:
        invite = self._invites.find_one({"_id": invite_id})
        if not invite:
            raise NotFoundError("Invite not found")
        if str(invite["invitedUser"]) != str(user_id):
            raise PermissionDeniedError("Not invited", code="not_invited")
        if invite["status"] != InviteStatus.pending.value:
            raise InvalidRequestError(f"Invite already {invite['status']}", code="invite_closed")
        return invite

    def _set_invite_status(self, invite_id: ObjectId, status: InviteStatus) -> dict[str, Any]:
        return self._invites.find_one_and_update(
            {"_id": invite_id},
            {"$set": {"status": status.value, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )

    def accept_invite(self, invite_id: ObjectId, user_id: ObjectId) -> tuple[dict[str, Any], dict[str, Any]]:
        invite = self._pending_invite_for(invite_id, user_id)
        group = self._update_group(invite["groupId"], {"$addToSet": {"members": user_id}})
        return self._set_invite_status(invite_id, InviteStatus.accepted), group

    def reject_invite(self, invite_id: ObjectId, user_id: ObjectId) -> dict[str, Any]:
        self._pending_invite_for(invite_id, user_id)
        return self._set_invite_status(invite_id, InviteStatus.rejected)


__all__ = ["GROUP_INVITE_NOTIFICATION", "GroupService"]
