"""Admin routes.

Routes:
- GET   /api/admin/summary                 - Builder and lead counts
- GET   /api/admin/builders                - Builders (?subscription=&search=)
- GET   /api/admin/builders/{id}           - Builder with status label
- PATCH /api/admin/builders/{id}/access    - Enable/disable a builder
- GET   /api/admin/builders/{id}/pricing   - A builder's pricing profile
- PUT   /api/admin/builders/{id}/pricing   - Replace a builder's pricing
- GET   /api/admin/leads                   - Leads (?builderId=&status=)
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from estimatepro.core.audit_logger import log_action
from estimatepro.db.connection import get_session
from estimatepro.db.repository import (
    account_status_label,
    count_builders_by_subscription,
    count_leads,
    get_builder,
    list_builders,
    list_leads,
    load_pricing_profile,
    save_pricing_profile,
    start_of_month,
)
from estimatepro.models import LeadStatus, PricingProfile, SubscriptionStatus
from estimatepro.web.dependencies import CurrentBuilder, require_admin, survey_link
from estimatepro.web.models import (
    AccessUpdate,
    AdminBuilderDetail,
    AdminSummary,
    BuilderResponse,
    LeadSummary,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _builder_response(builder) -> BuilderResponse:
    return BuilderResponse.from_model(
        builder, survey_link(builder.survey_slug), account_status_label(builder)
    )


@router.get("/summary", response_model=AdminSummary)
async def summary(admin: CurrentBuilder = Depends(require_admin)):
    async with get_session() as session:
        by_subscription = await count_builders_by_subscription(session)
        total_leads = await count_leads(session)
        this_month = await count_leads(session, since=start_of_month())

    return AdminSummary(
        builders_by_subscription=by_subscription,
        total_builders=sum(by_subscription.values()),
        total_leads=total_leads,
        leads_this_month=this_month,
    )


@router.get("/builders", response_model=list[BuilderResponse])
async def builders(
    subscription: SubscriptionStatus | None = None,
    search: str | None = None,
    admin: CurrentBuilder = Depends(require_admin),
):
    async with get_session() as session:
        rows = await list_builders(session, subscription.value if subscription else None, search)
    return [_builder_response(builder) for builder in rows]


@router.get("/builders/{builder_id}", response_model=AdminBuilderDetail)
async def builder_detail(builder_id: UUID, admin: CurrentBuilder = Depends(require_admin)):
    async with get_session() as session:
        builder = await get_builder(session, builder_id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        lead_count = await count_leads(session, builder_id)
        this_month = await count_leads(session, builder_id, since=start_of_month())

    return AdminBuilderDetail(
        builder=_builder_response(builder),
        lead_count=lead_count,
        leads_this_month=this_month,
    )


@router.patch("/builders/{builder_id}/access", response_model=BuilderResponse)
async def set_access(
    request: Request,
    builder_id: UUID,
    payload: AccessUpdate,
    admin: CurrentBuilder = Depends(require_admin),
):
    async with get_session() as session:
        builder = await get_builder(session, builder_id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        builder.access_disabled = payload.access_disabled
        await log_action(
            request,
            "BUILDER_ACCESS_CHANGED",
            admin.email,
            builder_id=admin.id,
            resource_type="builder",
            resource_id=str(builder_id),
            details={"access_disabled": payload.access_disabled},
            session=session,
        )
        body = _builder_response(builder)
    return body


@router.get("/builders/{builder_id}/pricing", response_model=PricingProfile)
async def builder_pricing(builder_id: UUID, admin: CurrentBuilder = Depends(require_admin)):
    async with get_session() as session:
        builder = await get_builder(session, builder_id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        return await load_pricing_profile(session, builder)


@router.put("/builders/{builder_id}/pricing", response_model=PricingProfile)
async def update_builder_pricing(
    request: Request,
    builder_id: UUID,
    profile: PricingProfile,
    admin: CurrentBuilder = Depends(require_admin),
):
    async with get_session() as session:
        builder = await get_builder(session, builder_id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        saved = await save_pricing_profile(session, builder, profile)
        await log_action(
            request,
            "BUILDER_PRICING_UPDATED",
            admin.email,
            builder_id=admin.id,
            resource_type="builder",
            resource_id=str(builder_id),
            details={"items": len(saved.pricing_items)},
            session=session,
        )
    return saved


@router.get("/leads", response_model=list[LeadSummary])
async def leads(
    builder_id: UUID | None = Query(default=None, alias="builderId"),
    status: LeadStatus | None = None,
    admin: CurrentBuilder = Depends(require_admin),
):
    async with get_session() as session:
        rows = await list_leads(session, builder_id, status.value if status else None)
    return [LeadSummary.from_model(lead) for lead in rows]
