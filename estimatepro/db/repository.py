"""Database queries for builders, pricing profiles and leads.

Converts between ORM rows and the pydantic domain models. Numeric columns
are handed to the domain layer as floats.
"""

from __future__ import annotations

import secrets
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from estimatepro.db.models import BuilderModel, LeadModel, PricingItemModel
from estimatepro.models import (
    BuilderIdentity,
    CalculatedAreas,
    EstimateLineItem,
    EstimateResult,
    PricingItem,
    PricingProfile,
    SubscriptionStatus,
    SurveyResponse,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (SQLite) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_float(value: Decimal | float | None) -> float | None:
    return None if value is None else float(value)


def new_survey_slug(nbytes: int = 6) -> str:
    return secrets.token_urlsafe(nbytes)


# ============================================================================
# Builders
# ============================================================================


async def get_builder(session: AsyncSession, builder_id: UUID | str) -> BuilderModel | None:
    if isinstance(builder_id, str):
        try:
            builder_id = UUID(builder_id)
        except ValueError:
            return None
    return await session.get(BuilderModel, builder_id)


async def get_builder_by_email(session: AsyncSession, email: str) -> BuilderModel | None:
    stmt = select(BuilderModel).where(func.lower(BuilderModel.email) == email.strip().lower())
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_builder_by_slug(session: AsyncSession, slug: str) -> BuilderModel | None:
    stmt = select(BuilderModel).where(BuilderModel.survey_slug == slug)
    result = await session.execute(stmt)
    return result.scalars().first()


async def create_builder(
    session: AsyncSession,
    *,
    email: str,
    password_hash: str,
    business_name: str = "",
    contact_name: str = "",
    phone: str = "",
    role: str = "builder",
    trial_days: int = 14,
    slug_bytes: int = 6,
) -> BuilderModel:
    """Insert a new trialing builder with a fresh survey slug."""
    builder = BuilderModel(
        email=email.strip().lower(),
        password_hash=password_hash,
        business_name=business_name,
        contact_name=contact_name,
        phone=phone,
        role=role,
        survey_slug=new_survey_slug(slug_bytes),
        subscription_status=SubscriptionStatus.TRIALING.value,
        trial_ends_at=utcnow() + timedelta(days=trial_days),
    )
    session.add(builder)
    await session.flush()
    return builder


async def list_builders(
    session: AsyncSession,
    subscription: str | None = None,
    search: str | None = None,
) -> Sequence[BuilderModel]:
    stmt = select(BuilderModel).where(BuilderModel.role == "builder")
    if subscription:
        stmt = stmt.where(BuilderModel.subscription_status == subscription)
    if search:
        pattern = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            or_(
                func.lower(BuilderModel.email).like(pattern),
                func.lower(BuilderModel.business_name).like(pattern),
                func.lower(BuilderModel.contact_name).like(pattern),
            )
        )
    result = await session.execute(stmt.order_by(BuilderModel.created_at.desc()))
    return result.scalars().all()


async def count_builders_by_subscription(session: AsyncSession) -> dict[str, int]:
    stmt = (
        select(BuilderModel.subscription_status, func.count(BuilderModel.id))
        .where(BuilderModel.role == "builder")
        .group_by(BuilderModel.subscription_status)
    )
    result = await session.execute(stmt)
    counts = {status.value: 0 for status in SubscriptionStatus}
    for status, count in result.all():
        counts[status] = count
    return counts


def account_status_label(builder: BuilderModel, now: datetime | None = None) -> str:
    """Human status shown to admins: Disabled, Active (Paid), Trial or Expired."""
    if builder.access_disabled:
        return "Disabled"
    if builder.subscription_status == SubscriptionStatus.ACTIVE.value:
        return "Active (Paid)"
    now = now or utcnow()
    trial_ends_at = as_utc(builder.trial_ends_at)
    if builder.subscription_status == SubscriptionStatus.TRIALING.value and (
        trial_ends_at is None or trial_ends_at > now
    ):
        return "Trial"
    return "Expired"


def builder_identity(builder: BuilderModel) -> BuilderIdentity:
    return BuilderIdentity(
        business_name=builder.business_name,
        contact_name=builder.contact_name,
        abn=builder.abn,
        email=builder.email,
        phone=builder.phone,
    )


# ============================================================================
# Pricing profiles
# ============================================================================


def pricing_item_from_model(row: PricingItemModel) -> PricingItem:
    return PricingItem(
        key=row.key,
        item_name=row.item_name,
        applicability=row.applicability,
        price_type=row.price_type,
        final_price=_to_float(row.final_price),
        base_cost=_to_float(row.base_cost),
        markup_percent=_to_float(row.markup_percent),
        quantity=_to_float(row.quantity),
        is_active=row.is_active,
    )


async def load_pricing_profile(session: AsyncSession, builder: BuilderModel) -> PricingProfile:
    stmt = (
        select(PricingItemModel)
        .where(PricingItemModel.builder_id == builder.id)
        .order_by(PricingItemModel.position)
    )
    result = await session.execute(stmt)
    return PricingProfile(
        pricing_mode=builder.pricing_mode,
        pricing_items=[pricing_item_from_model(row) for row in result.scalars().all()],
    )


async def save_pricing_profile(
    session: AsyncSession, builder: BuilderModel, profile: PricingProfile
) -> PricingProfile:
    """Replace a builder's pricing table; rows with blank names are dropped."""
    await session.execute(delete(PricingItemModel).where(PricingItemModel.builder_id == builder.id))

    kept = [item for item in profile.pricing_items if item.item_name]
    for position, item in enumerate(kept):
        session.add(
            PricingItemModel(
                builder_id=builder.id,
                position=position,
                key=item.key,
                item_name=item.item_name,
                applicability=item.applicability or "All estimates",
                price_type=item.price_type.value,
                final_price=item.final_price,
                base_cost=item.base_cost,
                markup_percent=item.markup_percent,
                quantity=item.quantity,
                is_active=item.is_active,
            )
        )
    builder.pricing_mode = profile.pricing_mode.value
    await session.flush()
    return PricingProfile(pricing_mode=profile.pricing_mode, pricing_items=kept)


# ============================================================================
# Leads
# ============================================================================


async def create_lead(
    session: AsyncSession,
    builder_id: UUID,
    survey: SurveyResponse,
    areas: CalculatedAreas,
    estimate: EstimateResult,
) -> LeadModel:
    lead = LeadModel(
        builder_id=builder_id,
        status="New",
        client_name=survey.client_name,
        client_phone=survey.client_phone,
        client_email=survey.client_email,
        client_suburb=survey.client_suburb,
        survey=survey.model_dump(mode="json", by_alias=True),
        calculated_areas=areas.model_dump(mode="json", by_alias=True),
        estimate_line_items=[
            line.model_dump(mode="json", by_alias=True) for line in estimate.line_items
        ],
        base_estimate=estimate.base_estimate,
        high_estimate=estimate.high_estimate,
    )
    session.add(lead)
    await session.flush()
    return lead


async def list_leads(
    session: AsyncSession,
    builder_id: UUID | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> Sequence[LeadModel]:
    """Leads newest first, optionally scoped to a builder and status."""
    stmt = select(LeadModel)
    if builder_id is not None:
        stmt = stmt.where(LeadModel.builder_id == builder_id)
    if status:
        stmt = stmt.where(LeadModel.status == status)
    stmt = stmt.order_by(LeadModel.created_at.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_lead(
    session: AsyncSession, lead_id: UUID, builder_id: UUID | None = None
) -> LeadModel | None:
    """Fetch a lead; with ``builder_id`` only that builder's leads are visible."""
    lead = await session.get(LeadModel, lead_id)
    if lead is None or (builder_id is not None and lead.builder_id != builder_id):
        return None
    return lead


async def delete_lead(session: AsyncSession, lead: LeadModel) -> None:
    await session.delete(lead)
    await session.flush()


async def count_leads(
    session: AsyncSession,
    builder_id: UUID | None = None,
    since: datetime | None = None,
) -> int:
    stmt = select(func.count(LeadModel.id))
    if builder_id is not None:
        stmt = stmt.where(LeadModel.builder_id == builder_id)
    if since is not None:
        stmt = stmt.where(LeadModel.created_at >= since)
    result = await session.execute(stmt)
    return int(result.scalar_one())


def lead_survey(lead: LeadModel) -> SurveyResponse:
    return SurveyResponse.model_validate(lead.survey or {})


def lead_areas(lead: LeadModel) -> CalculatedAreas:
    return CalculatedAreas.model_validate(lead.calculated_areas or {})


def lead_line_items(lead: LeadModel) -> list[EstimateLineItem]:
    return [EstimateLineItem.model_validate(line) for line in lead.estimate_line_items or []]


def start_of_month(now: datetime | None = None) -> datetime:
    now = now or utcnow()
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

