from __future__ import annotations

import asyncio

import pytest
from bson import ObjectId

from fakes import FakeConnection, FakeDatabase
from socialhub.core.exceptions import InvalidRequestError, NotFoundError, PermissionDeniedError
from socialhub.realtime.hub import RealtimeHub
from socialhub.schemas.groups import GroupCreate, GroupUpdate, InviteRecord
from socialhub.services.groups import GroupService
from socialhub.services.notifications import NotificationService
from socialhub.services.users import UserDirectory

OWNER = ObjectId()
GUEST = ObjectId()
OTHER = ObjectId()


def _service(hub: RealtimeHub | None = None) -> tuple[GroupService, FakeDatabase]:
    db = FakeDatabase()
    svc = GroupService(
        database=db,  # type: ignore[arg-type]
        notifications=NotificationService(database=db),  # type: ignore[arg-type]
        router=hub.router if hub else None,
    )
    return svc, db


def test_create_group_requires_name_and_includes_owner() -> None:
    svc, _ = _service()
    with pytest.raises(InvalidRequestError) as excinfo:
        svc.create_group(OWNER, GroupCreate(name="  "))
    assert excinfo.value.message == "Group name required"

    group = svc.create_group(OWNER, GroupCreate(name="Climbers", members=[str(GUEST), str(OWNER)]))
    assert group["members"] == [OWNER, GUEST]
    assert group["isPrivate"] is True


def test_create_group_rejects_bad_member_ids() -> None:
    svc, _ = _service()
    with pytest.raises(InvalidRequestError):
        svc.create_group(OWNER, GroupCreate(name="Climbers", members=["nope"]))


def test_join_leave_and_my_groups() -> None:
    svc, _ = _service()
    group = svc.create_group(OWNER, GroupCreate(name="Runners"))

    svc.join_group(group["_id"], GUEST)
    svc.join_group(group["_id"], GUEST)
    assert [g["_id"] for g in svc.my_groups(GUEST)] == [group["_id"]]
    assert svc.get_group(group["_id"])["members"] == [OWNER, GUEST]

    svc.leave_group(group["_id"], GUEST)
    assert svc.my_groups(GUEST) == []


def test_missing_group_is_not_found() -> None:
    svc, _ = _service()
    with pytest.raises(NotFoundError):
        svc.join_group(ObjectId(), GUEST)


def test_only_owner_updates_and_removes() -> None:
    svc, _ = _service()
    group = svc.create_group(OWNER, GroupCreate(name="Chess", members=[str(GUEST)]))

    with pytest.raises(PermissionDeniedError):
        svc.update_group(group["_id"], GUEST, GroupUpdate(name="Checkers"))
    updated = svc.update_group(group["_id"], OWNER, GroupUpdate(name="Chess club", is_private=False))
    assert updated["name"] == "Chess club"
    assert updated["isPrivate"] is False

    with pytest.raises(PermissionDeniedError):
        svc.remove_member(group["_id"], GUEST, OWNER)
    with pytest.raises(InvalidRequestError) as excinfo:
        svc.remove_member(group["_id"], OWNER, OWNER)
    assert excinfo.value.message == "Cannot remove owner"

    after = svc.remove_member(group["_id"], OWNER, GUEST)
    assert after["members"] == [OWNER]


def test_invite_flow_notifies_online_invitee() -> None:
    hub = RealtimeHub()
    guest_conn = FakeConnection("c-guest")
    hub.attach(guest_conn)
    hub.presence.register(str(GUEST), "c-guest")
    svc, db = _service(hub)
    group = svc.create_group(OWNER, GroupCreate(name="Film night"))

    invite = asyncio.run(svc.send_invite(group["_id"], OWNER, GUEST))

    assert invite["status"] == "pending"
    events = [frame["event"] for frame in guest_conn.sent]
    assert events == ["groupInviteNotification", "notification"]
    assert guest_conn.sent[0]["data"] == {
        "inviteId": str(invite["_id"]),
        "groupName": "Film night",
        "invitedBy": str(OWNER),
    }
    [notification] = db["notifications"].docs
    assert notification["type"] == "group_invite"
    assert notification["user"] == GUEST

    assert [i["_id"] for i in svc.pending_invites(GUEST)] == [invite["_id"]]
    accepted, joined = svc.accept_invite(invite["_id"], GUEST)
    assert accepted["status"] == "accepted"
    assert GUEST in joined["members"]
    assert svc.pending_invites(GUEST) == []


def test_invite_rules() -> None:
    svc, _ = _service()
    group = svc.create_group(OWNER, GroupCreate(name="Band", members=[str(OTHER)]))

    with pytest.raises(PermissionDeniedError):
        svc.create_invite(group["_id"], GUEST, OTHER)
    with pytest.raises(InvalidRequestError, match="already member"):
        svc.create_invite(group["_id"], OWNER, OTHER)

    invite, _, _ = svc.create_invite(group["_id"], OWNER, GUEST)
    with pytest.raises(InvalidRequestError, match="already invited"):
        svc.create_invite(group["_id"], OWNER, GUEST)

    with pytest.raises(PermissionDeniedError):
        svc.accept_invite(invite["_id"], OTHER)
    rejected = svc.reject_invite(invite["_id"], GUEST)
    assert rejected["status"] == "rejected"
    with pytest.raises(InvalidRequestError, match="Invite already rejected"):
        svc.accept_invite(invite["_id"], GUEST)
    with pytest.raises(NotFoundError):
        svc.reject_invite(ObjectId(), GUEST)


def test_pending_invites_carry_group_name_and_inviter() -> None:
    db = FakeDatabase()
    db["users"].docs.append({"_id": OWNER, "username": "olive", "profilePicture": "o.png"})
    svc = GroupService(
        database=db,  # type: ignore[arg-type]
        notifications=NotificationService(database=db),  # type: ignore[arg-type]
        users=UserDirectory(database=db),  # type: ignore[arg-type]
    )
    group = svc.create_group(OWNER, GroupCreate(name="Film night"))
    svc.create_invite(group["_id"], OWNER, GUEST)

    [invite] = svc.pending_invites(GUEST)

    assert invite["groupId"] == {"_id": group["_id"], "name": "Film night"}
    assert invite["invitedBy"].username == "olive"
    wire = InviteRecord.model_validate(invite).to_wire()
    assert wire["groupId"] == {"_id": str(group["_id"]), "name": "Film night"}
    assert wire["invitedBy"] == {"_id": str(OWNER), "username": "olive", "profilePicture": "o.png"}
