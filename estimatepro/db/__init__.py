"""Database layer for EstiMate Pro with async SQLAlchemy."""

from estimatepro.db.connection import get_session, init_db
from estimatepro.db.models import (
    AuditLogModel,
    Base,
    BuilderModel,
    LeadModel,
    PricingItemModel,
)

__all__ = [
    "Base",
    "BuilderModel",
    "PricingItemModel",
    "LeadModel",
    "AuditLogModel",
    "get_session",
    "init_db",
]
