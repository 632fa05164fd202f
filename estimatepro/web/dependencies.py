"""Shared dependencies for EstiMate Pro web routes.

Dependencies are injected using FastAPI's Depends() system.

Usage:
    from fastapi import Depends
    from estimatepro.web.dependencies import CurrentBuilder, require_builder

    @router.get("/api/leads")
    async def list_leads(current: CurrentBuilder = Depends(require_builder)):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from fastapi import Cookie, Depends, Header, HTTPException
from sqlalchemy import select

from estimatepro.config import get_config
from estimatepro.db.connection import get_session
from estimatepro.db.models import BuilderModel
from estimatepro.db.repository import get_builder
from estimatepro.web.auth import validate_session


@dataclass(frozen=True)
class CurrentBuilder:
    """The authenticated builder a request acts for."""

    id: UUID
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_session_token(
    authorization: str | None = Header(default=None),
    session: str | None = Cookie(default=None),
) -> str | None:
    """Session token from ``Authorization: Bearer`` or the session cookie."""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return session


async def _first_builder() -> BuilderModel | None:
    async with get_session() as db:
        result = await db.execute(select(BuilderModel).order_by(BuilderModel.created_at).limit(1))
        return result.scalars().first()


async def require_builder(token: str | None = Depends(get_session_token)) -> CurrentBuilder:
    """Dependency requiring an authenticated builder with access enabled.

    Raises:
        HTTPException: 401 if not authenticated, 403 if access is disabled
    """
    if get_config().auth.auth_disabled:
        builder = await _first_builder()
        if builder is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        return CurrentBuilder(id=builder.id, email=builder.email, role=builder.role)

    session_data = validate_session(token)
    if not session_data:
        raise HTTPException(status_code=401, detail="Authentication required")

    async with get_session() as db:
        builder = await get_builder(db, session_data["builder_id"])
    if builder is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    if builder.access_disabled:
        raise HTTPException(status_code=403, detail="Account access disabled")

    return CurrentBuilder(id=builder.id, email=builder.email, role=builder.role)


async def require_admin(current: CurrentBuilder = Depends(require_builder)) -> CurrentBuilder:
    """Dependency requiring the admin role.

    Raises:
        HTTPException: 403 if the builder is not an admin
    """
    if not current.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return current


def survey_link(slug: str) -> str:
    return f"{get_config().survey.public_base_url}/survey/{slug}"
