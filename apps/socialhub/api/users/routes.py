from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, Request, Response, status

from socialhub.core.dependencies import get_user_account_service
from socialhub.core.security import VERIFY_PURPOSE, create_access_token
from socialhub.core.settings import settings
from socialhub.schemas.users import (
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    UserRecord,
    UserResponse,
    VerificationResponse,
)
from socialhub.services.users import UserAccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/user", tags=["users"])


def _cookie_options(max_age: int) -> dict[str, Any]:
    # Cross-site cookies need SameSite=None, which browsers only accept over HTTPS.
    production = settings.app_env.strip().lower() == "production"
    return {
        "httponly": True,
        "samesite": "none" if production else "lax",
        "secure": production,
        "max_age": max_age,
    }


def _verify_url(request: Request, user_id: ObjectId) -> str:
    token = create_access_token(
        str(user_id),
        ttl=timedelta(hours=settings.verification_token_ttl_hours),
        purpose=VERIFY_PURPOSE,
    )
    logger.info("Verification link issued for user %s", user_id)
    return str(request.url_for("verify_email").include_query_params(token=token))


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    request: Request,
    svc: UserAccountService = Depends(get_user_account_service),
) -> dict:
    user = svc.register(payload)
    return VerificationResponse(
        message="Account created successfully. Please verify your email.",
        verify_url=_verify_url(request, user["_id"]),
    ).to_wire()


@router.post("/login")
def login(
    payload: LoginRequest,
    response: Response,
    svc: UserAccountService = Depends(get_user_account_service),
) -> dict:
    user = UserRecord.model_validate(svc.authenticate(payload.email, payload.password))
    response.set_cookie(
        settings.access_token_cookie,
        create_access_token(str(user.id)),
        **_cookie_options(settings.access_token_ttl_hours * 3600),
    )
    return UserResponse(message=f"Welcome back {user.username}", user=user).to_wire()


@router.api_route("/logout", methods=["GET", "POST"])
def logout(response: Response) -> dict:
    options = _cookie_options(0)
    response.delete_cookie(
        settings.access_token_cookie,
        path="/",
        secure=options["secure"],
        httponly=True,
        samesite=options["samesite"],
    )
    return UserResponse(message="Logged out successfully.").to_wire()


@router.get("/verify")
def verify_email(
    token: Optional[str] = None,
    svc: UserAccountService = Depends(get_user_account_service),
) -> dict:
    svc.verify_email(token)
    return VerificationResponse(message="Email verified successfully").to_wire()


@router.post("/resend-verification")
def resend_verification(
    payload: EmailRequest,
    request: Request,
    svc: UserAccountService = Depends(get_user_account_service),
) -> dict:
    user = svc.pending_verification(payload.email)
    return VerificationResponse(verify_url=_verify_url(request, user["_id"])).to_wire()
