"""Shared API dependencies."""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from fastapi import Header, Request

from socialhub.core.exceptions import AuthenticationError, InvalidRequestError
from socialhub.core.security import decode_access_token
from socialhub.core.settings import settings
from socialhub.schemas.ids import parse_object_id


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> ObjectId:
    """Resolve the caller from the session cookie, falling back to a bearer token."""
    token = request.cookies.get(settings.access_token_cookie) or _bearer_token(authorization)
    if not token:
        raise AuthenticationError("User not authenticated")
    try:
        return parse_object_id(decode_access_token(token), field="userId")
    except InvalidRequestError as exc:
        raise AuthenticationError("Invalid session token", code="invalid_token") from exc
