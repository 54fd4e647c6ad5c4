from __future__ import annotations

from pydantic import Field

from socialhub.schemas.base import MongoRecord, WireModel
from socialhub.schemas.ids import PyObjectId


class RegisterRequest(WireModel):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(WireModel):
    email: str = ""
    password: str = ""


class EmailRequest(WireModel):
    email: str = ""


class UserRecord(MongoRecord):
    """Public view of an account; the password hash never leaves the service."""

    username: str
    email: str
    profile_picture: str = ""
    bio: str = ""
    followers: list[PyObjectId] = Field(default_factory=list)
    following: list[PyObjectId] = Field(default_factory=list)
    is_verified: bool = False


class UserResponse(WireModel):
    success: bool = True
    message: str | None = None
    user: UserRecord | None = None


class VerificationResponse(WireModel):
    success: bool = True
    message: str | None = None
    verify_url: str | None = None


__all__ = [
    "EmailRequest",
    "LoginRequest",
    "RegisterRequest",
    "UserRecord",
    "UserResponse",
    "VerificationResponse",
]
