"""Lead management routes.

Routes:
- GET    /api/leads                 - Leads, newest first (optional ?status=)
- GET    /api/leads/{id}            - Lead with survey answers and estimate
- PATCH  /api/leads/{id}/status     - Move a lead through the pipeline
- DELETE /api/leads/{id}            - Delete a lead
- GET    /api/leads/{id}/estimate   - Displayed base/high range
"""

from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response

from estimatepro.db.connection import get_session
from estimatepro.db.repository import delete_lead, get_lead, list_leads
from estimatepro.leads.service import lead_estimate
from estimatepro.models import EstimateResult, LeadStatus
from estimatepro.web.dependencies import CurrentBuilder, require_builder
from estimatepro.web.models import LeadDetail, LeadStatusUpdate, LeadSummary

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/leads", tags=["leads"])


@router.get("", response_model=list[LeadSummary])
async def get_leads(
    status: LeadStatus | None = None,
    current: CurrentBuilder = Depends(require_builder),
):
    async with get_session() as session:
        leads = await list_leads(session, current.id, status.value if status else None)
    return [LeadSummary.from_model(lead) for lead in leads]


@router.get("/{lead_id}", response_model=LeadDetail)
async def get_lead_detail(lead_id: UUID, current: CurrentBuilder = Depends(require_builder)):
    async with get_session() as session:
        lead = await get_lead(session, lead_id, current.id)
    if lead is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    return LeadDetail.from_model(lead)


@router.patch("/{lead_id}/status", response_model=LeadSummary)
async def update_lead_status(
    lead_id: UUID,
    payload: LeadStatusUpdate,
    current: CurrentBuilder = Depends(require_builder),
):
    async with get_session() as session:
        lead = await get_lead(session, lead_id, current.id)
        if lead is None:
            raise HTTPException(status_code=404, detail="Lead not found")
        previous = lead.status
        lead.status = payload.status.value
        body = LeadSummary.from_model(lead)

    logger.info("lead_status_changed", lead_id=str(lead_id), old=previous, new=payload.status.value)
    return body


@router.delete("/{lead_id}", status_code=204)
async def remove_lead(lead_id: UUID, current: CurrentBuilder = Depends(require_builder)):
    async with get_session() as session:
        lead = await get_lead(session, lead_id, current.id)
        if lead is None:
            raise HTTPException(status_code=404, detail="Lead not found")
        await delete_lead(session, lead)

    logger.info("lead_deleted", lead_id=str(lead_id), builder_id=str(current.id))
    return Response(status_code=204)


@router.get("/{lead_id}/estimate", response_model=EstimateResult)
async def get_lead_estimate(lead_id: UUID, current: CurrentBuilder = Depends(require_builder)):
    """Base/high range re-derived from the stored line items."""
    async with get_session() as session:
        lead = await get_lead(session, lead_id, current.id)
    if lead is None:
        raise HTTPException(status_code=404, detail="Lead not found")
    return lead_estimate(lead)
