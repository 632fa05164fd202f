"""Builder dashboard route."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from estimatepro.db.connection import get_session
from estimatepro.db.repository import count_leads, get_builder, list_leads, start_of_month
from estimatepro.web.dependencies import CurrentBuilder, require_builder, survey_link
from estimatepro.web.models import DashboardResponse, LeadSummary

router = APIRouter(tags=["dashboard"])

RECENT_LEADS = 5


@router.get("/api/dashboard", response_model=DashboardResponse)
async def dashboard(current: CurrentBuilder = Depends(require_builder)):
    """Leads this month, the most recent leads and the survey link."""
    async with get_session() as session:
        builder = await get_builder(session, current.id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        this_month = await count_leads(session, current.id, since=start_of_month())
        recent = await list_leads(session, current.id, limit=RECENT_LEADS)

    return DashboardResponse(
        leads_this_month=this_month,
        recent_leads=[LeadSummary.from_model(lead) for lead in recent],
        survey_link=survey_link(builder.survey_slug),
    )
