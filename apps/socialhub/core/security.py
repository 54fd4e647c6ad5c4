"""JWT and password helpers for the session cookie issued at login.

Tokens carry the user id under ``userId`` and an ``exp`` claim. Single-purpose
tokens (email verification) add a ``purpose`` claim and are never accepted as
a session.
"""

from __future__ import annotations

from datetime import timedelta

import jwt
from passlib.context import CryptContext

from socialhub.core.exceptions import AuthenticationError
from socialhub.core.settings import settings
from socialhub.core.utils import utcnow

VERIFY_PURPOSE = "verify"

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:  # not a hash this context understands
        return False


def create_access_token(
    user_id: str, *, ttl: timedelta | None = None, purpose: str | None = None
) -> str:
    expires = utcnow() + (ttl or timedelta(hours=settings.access_token_ttl_hours))
    payload = {"userId": str(user_id), "exp": expires}
    if purpose:
        payload["purpose"] = purpose
    return jwt.encode(
        payload, settings.secret_key.get_secret_value(), algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str, *, purpose: str | None = None) -> str:
    """Return the user id encoded in ``token`` or raise ``AuthenticationError``.

    The token's ``purpose`` claim must equal ``purpose``; session tokens have none.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Session expired", code="token_expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid session token", code="invalid_token") from exc

    user_id = payload.get("userId")
    if not user_id or payload.get("purpose") != purpose:
        raise AuthenticationError("Invalid session token", code="invalid_token")
    return str(user_id)


__all__ = [
    "VERIFY_PURPOSE",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
