"""Authentication routes for the EstiMate Pro API.

Routes:
- POST /api/auth/signup                  - Create a trialing builder account
- POST /api/auth/login                   - Start a session
- POST /api/auth/logout                  - End the session
- GET  /api/auth/me                      - Current builder
- POST /api/auth/password-reset/request  - Email a reset link
- POST /api/auth/password-reset/confirm  - Set a new password
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response

from estimatepro.config import get_config
from estimatepro.core.audit_logger import log_action
from estimatepro.db.connection import get_session
from estimatepro.db.repository import create_builder, get_builder, get_builder_by_email
from estimatepro.notifications.email import EmailService
from estimatepro.web.auth import (
    consume_reset_token,
    create_reset_token,
    create_session,
    hash_password,
    verify_password,
)
from estimatepro.web.auth import logout as auth_logout
from estimatepro.web.dependencies import (
    CurrentBuilder,
    get_session_token,
    require_builder,
    survey_link,
)
from estimatepro.web.models import (
    AuthResponse,
    BuilderResponse,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    SignupRequest,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key="session",
        value=token,
        httponly=True,
        max_age=get_config().auth.session_expiry_hours * 3600,
        samesite="lax",
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(request: Request, response: Response, payload: SignupRequest):
    """Create a builder on a free trial and log them in."""
    config = get_config()
    async with get_session() as session:
        if await get_builder_by_email(session, payload.email):
            raise HTTPException(status_code=409, detail="Email already registered")

        builder = await create_builder(
            session,
            email=payload.email,
            password_hash=hash_password(payload.password),
            business_name=payload.business_name,
            contact_name=payload.contact_name,
            phone=payload.phone,
            trial_days=config.auth.trial_days,
            slug_bytes=config.survey.slug_bytes,
        )
        await log_action(
            request, "SIGNUP", builder.email, builder_id=builder.id, resource_type="builder", session=session
        )
        body = BuilderResponse.from_model(builder, survey_link(builder.survey_slug))

    token = create_session(str(builder.id), builder.email, builder.role)
    _set_session_cookie(response, token)
    logger.info("builder_signed_up", builder_id=str(builder.id))
    return AuthResponse(token=token, builder=body)


@router.post("/login", response_model=AuthResponse)
async def login(request: Request, response: Response, payload: LoginRequest):
    async with get_session() as session:
        builder = await get_builder_by_email(session, payload.email)
        valid = builder is not None and verify_password(payload.password, builder.password_hash)
        if not valid:
            await log_action(request, "LOGIN_FAILED", payload.email, resource_type="system", session=session)
        elif not builder.access_disabled:
            builder.last_login = datetime.now(timezone.utc)
            await log_action(
                request, "LOGIN", builder.email, builder_id=builder.id, resource_type="system", session=session
            )
            body = BuilderResponse.from_model(builder, survey_link(builder.survey_slug))

    if not valid:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if builder.access_disabled:
        raise HTTPException(status_code=403, detail="Account access disabled")

    token = create_session(str(builder.id), builder.email, builder.role)
    _set_session_cookie(response, token)
    return AuthResponse(token=token, builder=body)


@router.post("/logout", status_code=204)
async def logout(request: Request, token: str | None = Depends(get_session_token)):
    """Invalidate the session and clear the cookie."""
    auth_logout(token)
    response = Response(status_code=204)
    response.delete_cookie("session")
    return response


@router.get("/me", response_model=BuilderResponse)
async def me(current: CurrentBuilder = Depends(require_builder)):
    async with get_session() as session:
        builder = await get_builder(session, current.id)
    if builder is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return BuilderResponse.from_model(builder, survey_link(builder.survey_slug))


@router.post("/password-reset/request")
async def request_password_reset(request: Request, payload: PasswordResetRequest):
    """Email a reset link. Always answers the same way so emails can't be probed."""
    config = get_config()
    async with get_session() as session:
        builder = await get_builder_by_email(session, payload.email)

    if builder is not None:
        token = create_reset_token(str(builder.id))
        reset_url = f"{config.survey.public_base_url}/reset-password?token={token}"
        EmailService().send_password_reset(
            builder.email,
            builder.contact_name,
            reset_url,
            config.auth.reset_token_expiry_minutes,
        )
        logger.info("password_reset_requested", builder_id=str(builder.id))

    return {"message": "If that email is registered, a reset link has been sent."}


@router.post("/password-reset/confirm")
async def confirm_password_reset(request: Request, payload: PasswordResetConfirm):
    builder_id = consume_reset_token(payload.token)
    if builder_id is None:
        raise HTTPException(status_code=400, detail="Reset link is invalid or has expired")

    async with get_session() as session:
        builder = await get_builder(session, builder_id)
        if builder is None:
            raise HTTPException(status_code=400, detail="Reset link is invalid or has expired")
        builder.password_hash = hash_password(payload.password)
        await log_action(
            request, "PASSWORD_RESET", builder.email, builder_id=builder.id, resource_type="builder", session=session
        )

    return {"message": "Password updated"}
