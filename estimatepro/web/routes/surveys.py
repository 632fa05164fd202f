"""Public client survey routes (no authentication).

Routes:
- GET  /api/surveys/{slug} - Builder shown on the survey form
- POST /api/surveys/{slug} - Submit a survey; creates a lead
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, HTTPException

from estimatepro.config import get_config
from estimatepro.db.connection import get_session
from estimatepro.db.repository import get_builder_by_slug
from estimatepro.leads.service import SurveyValidationError, lead_estimate, notify_new_lead, submit_survey
from estimatepro.models import LeadStatus, SurveyResponse
from estimatepro.web.models import PublicBuilderResponse, SurveySubmitResponse

router = APIRouter(prefix="/api/surveys", tags=["surveys"])


@router.get("/{slug}", response_model=PublicBuilderResponse)
async def get_survey(slug: str):
    async with get_session() as session:
        builder = await get_builder_by_slug(session, slug)
    if builder is None or builder.access_disabled:
        raise HTTPException(status_code=404, detail="Survey not found")
    return PublicBuilderResponse(
        business_name=builder.business_name or builder.contact_name or "Builder",
        max_photos=get_config().survey.max_photos,
    )


@router.post("/{slug}", response_model=SurveySubmitResponse, status_code=201)
async def submit(slug: str, survey: SurveyResponse, background_tasks: BackgroundTasks):
    """Store the survey as a New lead and alert the builder by email."""
    config = get_config()
    async with get_session() as session:
        builder = await get_builder_by_slug(session, slug)
        if builder is None or builder.access_disabled:
            raise HTTPException(status_code=404, detail="Survey not found")
        try:
            lead = await submit_survey(session, builder, survey, config)
        except SurveyValidationError as exc:
            raise HTTPException(status_code=422, detail=exc.errors) from exc
        builder_email = builder.email
        estimate = lead_estimate(lead, config)

    background_tasks.add_task(notify_new_lead, builder_email, survey, estimate)
    return SurveySubmitResponse(lead_id=lead.id, status=LeadStatus.NEW)
