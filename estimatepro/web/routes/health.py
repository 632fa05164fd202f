"""Health check API routes."""

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from estimatepro import __version__
from estimatepro.db.connection import get_db

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", status_code=status.HTTP_200_OK)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check application health.

    Verifies database connectivity.
    """
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "version": __version__}
    except SQLAlchemyError as e:
        logger.error("health_check_failed", error=str(e))
        return {"status": "error", "database": "disconnected", "detail": str(e)}
