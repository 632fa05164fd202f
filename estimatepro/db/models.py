"""SQLAlchemy async database models for EstiMate Pro.

Works on PostgreSQL and SQLite: generic ``Uuid`` and ``JSON`` column types
only. Money columns are ``Numeric`` and are converted to float at the
repository boundary.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class BuilderModel(Base):
    """Builder account (also used for admins)."""

    __tablename__ = "builders"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    business_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    contact_name: Mapped[str] = mapped_column(Text, nullable=False, default="")
    phone: Mapped[str] = mapped_column(Text, nullable=False, default="")
    abn: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    role: Mapped[str] = mapped_column(String(20), nullable=False, default="builder")
    survey_slug: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    # Subscription
    subscription_status: Mapped[str] = mapped_column(String(20), nullable=False, default="trialing")
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    access_disabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # final | base
    pricing_mode: Mapped[str] = mapped_column(String(10), nullable=False, default="final")

    last_login: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    pricing_items: Mapped[list[PricingItemModel]] = relationship(
        back_populates="builder",
        cascade="all, delete-orphan",
        order_by="PricingItemModel.position",
    )

    def __repr__(self) -> str:
        return f"<BuilderModel(email='{self.email}', role='{self.role}')>"


class PricingItemModel(Base):
    """One row of a builder's ordered pricing table."""

    __tablename__ = "pricing_items"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    builder_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("builders.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Stable pricing setup catalog key (None for freeform rows)
    key: Mapped[str | None] = mapped_column(String(64))
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    applicability: Mapped[str] = mapped_column(Text, nullable=False, default="All estimates")
    price_type: Mapped[str] = mapped_column(String(20), nullable=False, default="fixed")

    final_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    base_cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    markup_percent: Mapped[Decimal | None] = mapped_column(Numeric(7, 3))
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 3))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    builder: Mapped[BuilderModel] = relationship(back_populates="pricing_items")

    __table_args__ = (Index("idx_pricing_items_builder_position", "builder_id", "position"),)


class LeadModel(Base):
    """A client survey submission with its stored estimate."""

    __tablename__ = "leads"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    builder_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("builders.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(40), nullable=False, default="New")

    # Denormalised for listing and search
    client_name: Mapped[str] = mapped_column(Text, nullable=False)
    client_phone: Mapped[str] = mapped_column(Text, nullable=False, default="")
    client_email: Mapped[str] = mapped_column(Text, nullable=False, default="")
    client_suburb: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Full survey answers (camelCase, as submitted after coercion)
    survey: Mapped[dict] = mapped_column(JSON, nullable=False)
    calculated_areas: Mapped[dict] = mapped_column(JSON, nullable=False)
    estimate_line_items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    base_estimate: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    high_estimate: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now(), onupdate=_utcnow
    )

    __table_args__ = (
        Index("idx_leads_builder_created", "builder_id", "created_at"),
        Index("idx_leads_builder_status", "builder_id", "status"),
    )


class AuditLogModel(Base):
    """Audit trail of account and admin actions."""

    __tablename__ = "audit_log"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    builder_id: Mapped[UUID | None] = mapped_column(Uuid(as_uuid=True), index=True)
    actor: Mapped[str] = mapped_column(Text, nullable=False)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    resource_type: Mapped[str | None] = mapped_column(String(64))
    resource_id: Mapped[str | None] = mapped_column(Text)
    details: Mapped[dict | None] = mapped_column(JSON)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, server_default=func.now()
    )
