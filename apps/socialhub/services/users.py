"""User accounts and the display fields other features embed.

`UserAccountService` owns registration, password login and email
verification. `UserDirectory` is the read side every other feature uses to
swap a bare user id for ``{_id, username, profilePicture}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from socialhub.core.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from socialhub.core.security import VERIFY_PURPOSE, decode_access_token, hash_password, verify_password
from socialhub.core.utils import utcnow
from socialhub.schemas.ids import parse_object_id
from socialhub.schemas.messages import AuthorSummary
from socialhub.schemas.users import RegisterRequest

logger = logging.getLogger(__name__)

_DISPLAY_PROJECTION = {"username": 1, "profilePicture": 1}


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def parse_email_domains(raw: str | None) -> tuple[str, ...]:
    return tuple(d.strip().lower() for d in (raw or "").split(",") if d.strip())


@dataclass
class UserDirectory:
    database: Database

    def __post_init__(self) -> None:
        self._users: Collection = self.database.get_collection("users")

    def get_author(self, user_id: ObjectId) -> AuthorSummary:
        doc = self._users.find_one({"_id": user_id}, _DISPLAY_PROJECTION)
        return self._summary(user_id, doc)

    def authors_for(self, user_ids: Iterable[ObjectId]) -> dict[str, AuthorSummary]:
        ids = list({str(uid): uid for uid in user_ids}.values())
        if not ids:
            return {}
        found = {str(doc["_id"]): doc for doc in self._users.find({"_id": {"$in": ids}}, _DISPLAY_PROJECTION)}
        return {str(uid): self._summary(uid, found.get(str(uid))) for uid in ids}

    def attach_authors(self, docs: Iterable[dict[str, Any]], field: str) -> list[dict[str, Any]]:
        """Return copies of ``docs`` with the user id under ``field`` expanded."""
        docs = list(docs)
        authors = self.authors_for(doc[field] for doc in docs if doc.get(field))
        return [
            {**doc, field: authors[str(doc[field])]} if doc.get(field) else doc
            for doc in docs
        ]

    @staticmethod
    def bare_author(user_id: ObjectId) -> AuthorSummary:
        return UserDirectory._summary(user_id, None)

    @staticmethod
    def _summary(user_id: ObjectId, doc: dict | None) -> AuthorSummary:
        doc = doc or {}
        return AuthorSummary(
            id=user_id,
            username=doc.get("username") or "",
            profile_picture=doc.get("profilePicture") or "",
        )


@dataclass
class UserAccountService:
    database: Database
    allowed_email_domains: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        self._users: Collection = self.database.get_collection("users")

    def ensure_indexes(self) -> None:
        self._users.create_index([("email", ASCENDING)], unique=True, name="email_unique")

    def register(self, payload: RegisterRequest) -> dict[str, Any]:
        username = (payload.username or "").strip()
        email = _normalize_email(payload.email)
        if not username or not email or not payload.password:
            raise InvalidRequestError("Something is missing, please check!", code="missing_fields")
        if self.allowed_email_domains and not email.endswith(self.allowed_email_domains):
            raise InvalidRequestError(
                "Registration is restricted by email domain", code="email_domain_not_allowed"
            )
        if self._users.find_one({"email": email}, {"_id": 1}):
            raise ConflictError("Try different email", code="email_taken")

        now = utcnow()
        doc: dict[str, Any] = {
            "username": username,
            "email": email,
            "password": hash_password(payload.password),
            "profilePicture": "",
            "bio": "",
            "followers": [],
            "following": [],
            "isVerified": False,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            doc["_id"] = self._users.insert_one(doc).inserted_id
        except DuplicateKeyError as exc:
            raise ConflictError("Try different email", code="email_taken") from exc
        logger.info("User %s registered", doc["_id"])
        return doc

    def authenticate(self, email: str | None, password: str | None) -> dict[str, Any]:
        email = _normalize_email(email)
        if not email or not password:
            raise InvalidRequestError("Something is missing, please check!", code="missing_fields")
        doc = self._users.find_one({"email": email})
        if not doc or not verify_password(password, doc.get("password")):
            raise AuthenticationError("Incorrect email or password", code="invalid_credentials")
        return doc

    def verify_email(self, token: str | None) -> dict[str, Any]:
        if not token:
            raise InvalidRequestError("Verification token missing", code="verification_token_missing")
        try:
            user_id = decode_access_token(token, purpose=VERIFY_PURPOSE)
        except AuthenticationError as exc:
            raise InvalidRequestError(
                "Invalid or expired token", code="invalid_verification_token"
            ) from exc
        doc = self._users.find_one_and_update(
            {"_id": parse_object_id(user_id, field="userId")},
            {"$set": {"isVerified": True, "updatedAt": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError("User not found")
        return doc

    def pending_verification(self, email: str | None) -> dict[str, Any]:
        """Return the unverified account for ``email`` so a new link can be issued."""
        email = _normalize_email(email)
        if not email:
            raise InvalidRequestError("Email required", code="email_required")
        doc = self._users.find_one({"email": email})
        if not doc:
            raise NotFoundError("User not found")
        if doc.get("isVerified"):
            raise InvalidRequestError("Already verified", code="already_verified")
        return doc


__all__ = ["UserAccountService", "UserDirectory", "parse_email_domains"]
