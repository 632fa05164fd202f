"""Lead workflows: survey submission, stored estimates and quotes.

Keeps routes thin: each function takes an open session (where it needs one)
and the builder it acts for, and returns domain models or ORM rows.
"""

from __future__ import annotations

from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from estimatepro.config import AppConfig, get_config
from estimatepro.db.models import BuilderModel, LeadModel
from estimatepro.db.repository import (
    builder_identity,
    create_lead,
    lead_line_items,
    lead_survey,
    load_pricing_profile,
)
from estimatepro.estimate.areas import compute_areas
from estimatepro.estimate.engine import compute_estimate, derive_estimate_range
from estimatepro.estimate.quote import compute_totals, initialize_quote
from estimatepro.models import (
    EstimateResult,
    QuoteDocument,
    QuoteState,
    SurveyResponse,
)
from estimatepro.notifications.email import EmailService
from estimatepro.reporting.formatting import format_currency

logger = structlog.get_logger(__name__)


class SurveyValidationError(ValueError):
    """Survey submission is missing required answers."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = errors


def validate_survey(survey: SurveyResponse, max_photos: int = 5) -> list[str]:
    """Return the problems with a submission; empty when it can be stored."""
    errors = []
    required = {
        "clientName": survey.client_name,
        "clientPhone": survey.client_phone,
        "bathroomType": survey.bathroom_type,
        "tilingLevel": survey.tiling_level,
        "homeAgeCategory": survey.home_age_category,
    }
    for field, value in required.items():
        if not value:
            errors.append(f"{field} is required")

    has_dimensions = all(
        value for value in (survey.floor_length, survey.floor_width, survey.wall_height)
    )
    if not has_dimensions and not survey.total_area:
        errors.append("Enter totalArea or floorLength, floorWidth and wallHeight")

    if len(survey.photo_urls) > max_photos:
        errors.append(f"At most {max_photos} photos can be attached")
    return errors


async def submit_survey(
    session: AsyncSession,
    builder: BuilderModel,
    survey: SurveyResponse,
    config: AppConfig | None = None,
) -> LeadModel:
    """Store a client survey as a new lead with its computed estimate.

    Raises:
        SurveyValidationError: If required answers are missing
    """
    config = config or get_config()
    errors = validate_survey(survey, config.survey.max_photos)
    if errors:
        raise SurveyValidationError(errors)

    profile = await load_pricing_profile(session, builder)
    areas = compute_areas(survey, config.estimate)
    estimate = compute_estimate(profile, survey, config.estimate)
    lead = await create_lead(session, builder.id, survey, areas, estimate)

    logger.info(
        "lead_submitted",
        builder_id=str(builder.id),
        lead_id=str(lead.id),
        line_items=len(estimate.line_items),
        base_estimate=estimate.base_estimate,
    )
    return lead


def notify_new_lead(builder_email: str, survey: SurveyResponse, estimate: EstimateResult) -> None:
    """Best-effort new lead email; failures are logged, never raised."""
    sent = EmailService().send_new_lead_alert(
        builder_email,
        {
            "client_name": survey.client_name,
            "client_phone": survey.client_phone,
            "client_email": survey.client_email,
            "client_suburb": survey.client_suburb,
            "bathroom_type": survey.bathroom_type,
            "tiling_level": survey.tiling_level,
            "estimate_range": (
                f"{format_currency(estimate.base_estimate)} - "
                f"{format_currency(estimate.high_estimate)}"
            ),
        },
    )
    if not sent:
        logger.warning("new_lead_alert_not_sent", builder_email=builder_email)


def lead_estimate(lead: LeadModel, config: AppConfig | None = None) -> EstimateResult:
    """Displayed range for a stored lead, re-derived from its line items."""
    config = config or get_config()
    return derive_estimate_range(
        lead_line_items(lead),
        lead_survey(lead).wall_changes,
        config.estimate.high_multiplier,
    )


def lead_quote(lead: LeadModel, terms: str) -> QuoteState:
    return initialize_quote(lead_line_items(lead), lead_survey(lead).wall_changes, terms)


def build_quote_document(
    builder: BuilderModel,
    lead: LeadModel,
    state: QuoteState,
    config: AppConfig | None = None,
    issued_at: datetime | None = None,
) -> QuoteDocument:
    """Assemble everything the PDF exporter prints for one quote.

    Areas are recomputed from the stored measurements.
    """
    config = config or get_config()
    survey = lead_survey(lead)
    document = QuoteDocument(
        builder=builder_identity(builder),
        survey=survey,
        areas=compute_areas(survey, config.estimate),
        totals=compute_totals(state, config.quote.gst_rate),
        terms=state.terms,
    )
    if issued_at is not None:
        document.issued_at = issued_at
    return document
