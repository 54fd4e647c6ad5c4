"""Send and read chat messages.

A send always persists first and only then routes: a message that could not
be stored raises `MessageDeliveryError` and is never pushed to anyone, while
anything that goes wrong after a successful write (author lookup, routing) is
logged and otherwise ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable

from bson import ObjectId
from starlette.concurrency import run_in_threadpool

from socialhub.core.exceptions import InvalidRequestError, MessageDeliveryError, SocialHubException
from socialhub.realtime.router import MessageDeliveryRouter
from socialhub.schemas.messages import AuthorSummary, ConversationKind, MessageRecord
from socialhub.services.conversations import ConversationStore
from socialhub.services.groups import GroupService
from socialhub.services.users import UserDirectory

logger = logging.getLogger(__name__)


def _require_text(text: str | None) -> str:
    body = (text or "").strip()
    if not body:
        raise InvalidRequestError("Message required", code="message_required")
    return body


@dataclass
class MessagingService:
    conversations: ConversationStore
    groups: GroupService
    users: UserDirectory
    router: MessageDeliveryRouter | None = None

    # ------------- direct -------------
    def _persist_direct(self, sender: ObjectId, receiver: ObjectId, body: str) -> dict[str, Any]:
        conversation = self.conversations.find_or_create_conversation(
            ConversationKind.direct, participants=[sender, receiver]
        )
        return self.conversations.append_message(
            conversation, {"senderId": sender, "receiverId": receiver, "message": body}
        )

    async def send_direct(self, sender: ObjectId, receiver: ObjectId, text: str | None) -> MessageRecord:
        body = _require_text(text)
        doc = await self._persist(self._persist_direct, sender, receiver, body)
        message = MessageRecord.model_validate(doc)
        if self.router is not None:
            await self._route(self.router.deliver_direct(message), message)
        return message

    def get_direct_history(self, user: ObjectId, other: ObjectId) -> list[MessageRecord]:
        docs = self.conversations.get_history(ConversationKind.direct, participants=[user, other])
        return [MessageRecord.model_validate(doc) for doc in docs]

    # ------------- group -------------
    def _persist_group(self, sender: ObjectId, group_id: ObjectId, body: str) -> dict[str, Any]:
        group = self.groups.require_member(group_id, sender)
        conversation = self.conversations.find_or_create_conversation(
            ConversationKind.group,
            participants=list(group.get("members") or []),
            group_id=group_id,
        )
        return self.conversations.append_message(
            conversation, {"senderId": sender, "groupId": group_id, "message": body}
        )

    async def send_group(self, sender: ObjectId, group_id: ObjectId, text: str | None) -> MessageRecord:
        body = _require_text(text)
        doc = await self._persist(self._persist_group, sender, group_id, body)
        author = await self._author(sender)
        message = MessageRecord.model_validate({**doc, "senderId": author})
        if self.router is not None:
            await self._route(self.router.deliver_group(message, author), message)
        return message

    def get_group_history(self, user: ObjectId, group_id: ObjectId) -> list[MessageRecord]:
        self.groups.require_member(group_id, user)
        docs = self.conversations.get_history(ConversationKind.group, group_id=group_id)
        return [MessageRecord.model_validate(doc) for doc in self.users.attach_authors(docs, "senderId")]

    # ------------- helpers -------------
    async def _author(self, sender: ObjectId) -> AuthorSummary:
        # The message is already stored; a failed lookup only costs the display fields.
        try:
            return await run_in_threadpool(self.users.get_author, sender)
        except Exception as exc:
            logger.warning("Author lookup failed for %s: %s", sender, exc)
            return UserDirectory.bare_author(sender)

    async def _persist(self, fn, *args: Any) -> dict[str, Any]:
        try:
            return await run_in_threadpool(fn, *args)
        except SocialHubException:
            raise
        except Exception as exc:
            logger.error("Failed to persist message: %s", exc)
            raise MessageDeliveryError("Message could not be saved") from exc

    async def _route(self, delivery: Awaitable[Any], message: MessageRecord) -> None:
        try:
            await delivery
        except Exception:
            logger.exception("Live delivery failed for message %s", message.id)


__all__ = ["MessagingService"]
