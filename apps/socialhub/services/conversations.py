"""Conversation persistence gateway (Mongo-backed).

Collections:
- conversations: one document per direct pair or per group, with the ordered
  list of message ids
- messages: the message bodies

Each conversation carries a canonical ``key`` (``direct:<a>:<b>`` with the
participant ids sorted, or ``group:<groupId>``) backed by a unique index.
Find-or-create is a single upsert on that key, so two first messages racing
into the same conversation converge on one document instead of creating two.

All methods are synchronous (pymongo); async callers run them in the
threadpool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from socialhub.core.utils import utcnow
from socialhub.schemas.messages import ConversationKind

logger = logging.getLogger(__name__)


def conversation_key(
    kind: ConversationKind,
    *,
    participants: Sequence[ObjectId] | None = None,
    group_id: ObjectId | None = None,
) -> str:
    if kind is ConversationKind.group:
        if group_id is None:
            raise ValueError("group conversations need a group_id")
        return f"group:{group_id}"
    ids = sorted({str(p) for p in participants or ()})
    if not ids:
        raise ValueError("direct conversations need participants")
    return "direct:" + ":".join(ids)


def order_by_ids(docs: Iterable[dict[str, Any]], ids: Sequence[Any]) -> list[dict[str, Any]]:
    """Return ``docs`` in the order their ``_id`` appears in ``ids``."""
    position = {str(_id): idx for idx, _id in enumerate(ids)}
    return sorted(
        (doc for doc in docs if str(doc.get("_id")) in position),
        key=lambda doc: position[str(doc["_id"])],
    )


@dataclass
class ConversationStore:
    database: Database

    def __post_init__(self) -> None:
        self._conversations: Collection = self.database.get_collection("conversations")
        self._messages: Collection = self.database.get_collection("messages")

    def ensure_indexes(self) -> None:
        self._conversations.create_index(
            [("key", ASCENDING)], unique=True, name="conversation_key_unique"
        )
        self._conversations.create_index([("participants", ASCENDING)], name="participants")
        self._messages.create_index([("createdAt", ASCENDING)], name="created_at")

    def find_conversation(
        self,
        kind: ConversationKind,
        *,
        participants: Sequence[ObjectId] | None = None,
        group_id: ObjectId | None = None,
    ) -> dict[str, Any] | None:
        key = conversation_key(kind, participants=participants, group_id=group_id)
        return self._conversations.find_one({"key": key})

    def find_or_create_conversation(
        self,
        kind: ConversationKind,
        *,
        participants: Sequence[ObjectId] | None = None,
        group_id: ObjectId | None = None,
    ) -> dict[str, Any]:
        key = conversation_key(kind, participants=participants, group_id=group_id)
        now = utcnow()
        on_insert = {
            "type": kind.value,
            "key": key,
            "groupId": group_id,
            "participants": list(participants or []),
            "messages": [],
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            doc = self._conversations.find_one_and_update(
                {"key": key},
                {"$setOnInsert": on_insert},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            # A concurrent upsert won the insert; the document exists now.
            logger.debug("Concurrent create for conversation %s; re-reading", key)
            doc = self._conversations.find_one({"key": key})
            if doc is None:
                raise
        return doc

    def append_message(self, conversation: dict[str, Any], message: dict[str, Any]) -> dict[str, Any]:
        """Insert ``message`` and link it at the end of the conversation."""
        now = utcnow()
        doc = dict(message)
        doc.setdefault("createdAt", now)
        doc.setdefault("updatedAt", now)
        result = self._messages.insert_one(doc)
        doc["_id"] = result.inserted_id
        self._conversations.update_one(
            {"_id": conversation["_id"]},
            {"$push": {"messages": doc["_id"]}, "$set": {"updatedAt": now}},
        )
        return doc

    def get_history(
        self,
        kind: ConversationKind,
        *,
        participants: Sequence[ObjectId] | None = None,
        group_id: ObjectId | None = None,
    ) -> list[dict[str, Any]]:
        conversation = self.find_conversation(kind, participants=participants, group_id=group_id)
        if not conversation:
            return []
        ids = list(conversation.get("messages") or [])
        if not ids:
            return []
        return order_by_ids(self._messages.find({"_id": {"$in": ids}}), ids)


__all__ = ["ConversationStore", "conversation_key", "order_by_ids"]
