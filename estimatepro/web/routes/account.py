"""Builder account routes.

Routes:
- GET  /api/builders/me                     - Account settings
- PUT  /api/builders/me                     - Update business details
- GET  /api/builders/survey-link            - Current client survey link
- POST /api/builders/survey-link/regenerate - Issue a new survey slug
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from estimatepro.config import get_config
from estimatepro.core.audit_logger import log_action
from estimatepro.db.connection import get_session
from estimatepro.db.repository import get_builder, new_survey_slug
from estimatepro.web.dependencies import CurrentBuilder, require_builder, survey_link
from estimatepro.web.models import AccountUpdate, BuilderResponse, SurveyLinkResponse

router = APIRouter(prefix="/api/builders", tags=["account"])


@router.get("/me", response_model=BuilderResponse)
async def get_account(current: CurrentBuilder = Depends(require_builder)):
    async with get_session() as session:
        builder = await get_builder(session, current.id)
    if builder is None:
        raise HTTPException(status_code=404, detail="Builder not found")
    return BuilderResponse.from_model(builder, survey_link(builder.survey_slug))


@router.put("/me", response_model=BuilderResponse)
async def update_account(
    request: Request,
    payload: AccountUpdate,
    current: CurrentBuilder = Depends(require_builder),
):
    """Update business details. Subscription fields are read-only here."""
    changes = payload.model_dump(exclude_none=True)
    async with get_session() as session:
        builder = await get_builder(session, current.id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        for field, value in changes.items():
            setattr(builder, field, value.strip())
        await log_action(
            request,
            "ACCOUNT_UPDATE",
            current.email,
            builder_id=current.id,
            resource_type="builder",
            resource_id=str(current.id),
            details={"fields": sorted(changes)},
            session=session,
        )
        body = BuilderResponse.from_model(builder, survey_link(builder.survey_slug))
    return body


@router.get("/survey-link", response_model=SurveyLinkResponse)
async def get_survey_link(current: CurrentBuilder = Depends(require_builder)):
    async with get_session() as session:
        builder = await get_builder(session, current.id)
    if builder is None:
        raise HTTPException(status_code=404, detail="Builder not found")
    return SurveyLinkResponse(survey_slug=builder.survey_slug, survey_link=survey_link(builder.survey_slug))


@router.post("/survey-link/regenerate", response_model=SurveyLinkResponse)
async def regenerate_survey_link(request: Request, current: CurrentBuilder = Depends(require_builder)):
    """Replace the survey slug; the previous link stops working."""
    async with get_session() as session:
        builder = await get_builder(session, current.id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        builder.survey_slug = new_survey_slug(get_config().survey.slug_bytes)
        await log_action(
            request,
            "SURVEY_LINK_REGENERATED",
            current.email,
            builder_id=current.id,
            resource_type="builder",
            resource_id=str(current.id),
            session=session,
        )
        slug = builder.survey_slug
    return SurveyLinkResponse(survey_slug=slug, survey_link=survey_link(slug))
