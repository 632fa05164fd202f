from uuid import UUID

import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from estimatepro.db.connection import get_session
from estimatepro.db.models import AuditLogModel

logger = structlog.get_logger(__name__)


async def log_action(
    request: Request | None,
    action: str,
    actor: str,
    builder_id: str | UUID | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    details: dict | None = None,
    session: AsyncSession | None = None,
) -> None:
    """Record an action in the audit trail.

    Args:
        request: FastAPI request object (for IP address)
        action: Action name (e.g., "LOGIN", "BUILDER_ACCESS_CHANGED")
        actor: Email of the acting builder or admin
        builder_id: ID of the acting builder
        resource_type: Type of resource affected
        resource_id: ID of resource affected
        details: Additional details
        session: Optional existing DB session. If None, creates a new one.
    """
    ip_address = request.client.host if request is not None and request.client else None

    if isinstance(builder_id, str):
        try:
            builder_id = UUID(builder_id)
        except ValueError:
            builder_id = None

    entry = AuditLogModel(
        builder_id=builder_id,
        actor=actor,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        details=details,
        ip_address=ip_address,
    )
    logger.info("audit", action=action, actor=actor, resource_type=resource_type, resource_id=resource_id)

    if session is not None:
        # Caller owns the commit
        session.add(entry)
    else:
        async with get_session() as new_session:
            new_session.add(entry)
