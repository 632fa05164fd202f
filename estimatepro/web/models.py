"""Request/response models for the EstiMate Pro web API.

All models serialise camelCase on the wire (see ``CamelModel``).

Usage:
    from estimatepro.web.models import LeadStatusUpdate

    @router.patch("/api/leads/{lead_id}/status")
    async def update_status(lead_id: UUID, payload: LeadStatusUpdate):
        ...
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from estimatepro.db.models import BuilderModel, LeadModel
from estimatepro.models import (
    CalculatedAreas,
    CamelModel,
    EstimateLineItem,
    LeadStatus,
    PricingMode,
    PricingSetupRow,
    QuoteOperation,
    QuoteState,
    QuoteTotals,
)

# ============================================================================
# Auth & account
# ============================================================================


class SignupRequest(CamelModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=8)
    business_name: str = ""
    contact_name: str = ""
    phone: str = ""


class LoginRequest(CamelModel):
    email: str
    password: str


class PasswordResetRequest(CamelModel):
    email: str


class PasswordResetConfirm(CamelModel):
    token: str
    password: str = Field(min_length=8)


class AccountUpdate(CamelModel):
    """Editable account settings; omitted fields are left unchanged."""

    business_name: str | None = None
    contact_name: str | None = None
    phone: str | None = None
    abn: str | None = None


class BuilderResponse(CamelModel):
    id: UUID
    email: str
    business_name: str
    contact_name: str
    phone: str
    abn: str
    role: str
    survey_slug: str
    survey_link: str
    subscription_status: str
    trial_ends_at: datetime | None = None
    access_disabled: bool = False
    pricing_mode: PricingMode = PricingMode.FINAL
    status_label: str | None = None
    last_login: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_model(
        cls, builder: BuilderModel, survey_link: str, status_label: str | None = None
    ) -> BuilderResponse:
        return cls(
            id=builder.id,
            email=builder.email,
            business_name=builder.business_name,
            contact_name=builder.contact_name,
            phone=builder.phone,
            abn=builder.abn,
            role=builder.role,
            survey_slug=builder.survey_slug,
            survey_link=survey_link,
            subscription_status=builder.subscription_status,
            trial_ends_at=builder.trial_ends_at,
            access_disabled=builder.access_disabled,
            pricing_mode=builder.pricing_mode,
            status_label=status_label,
            last_login=builder.last_login,
            created_at=builder.created_at,
        )


class AuthResponse(CamelModel):
    token: str
    builder: BuilderResponse


class SurveyLinkResponse(CamelModel):
    survey_slug: str
    survey_link: str


# ============================================================================
# Leads
# ============================================================================


class LeadSummary(CamelModel):
    id: UUID
    client_name: str
    client_phone: str
    client_email: str
    client_suburb: str
    status: LeadStatus
    base_estimate: float
    high_estimate: float
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, lead: LeadModel) -> LeadSummary:
        return cls(
            id=lead.id,
            client_name=lead.client_name,
            client_phone=lead.client_phone,
            client_email=lead.client_email,
            client_suburb=lead.client_suburb,
            status=lead.status,
            base_estimate=float(lead.base_estimate or 0),
            high_estimate=float(lead.high_estimate or 0),
            created_at=lead.created_at,
        )


class LeadDetail(LeadSummary):
    survey: dict[str, Any] = Field(default_factory=dict)
    calculated_areas: CalculatedAreas = Field(default_factory=CalculatedAreas)
    estimate_line_items: list[EstimateLineItem] = Field(default_factory=list)

    @classmethod
    def from_model(cls, lead: LeadModel) -> LeadDetail:
        summary = LeadSummary.from_model(lead)
        return cls(
            **summary.model_dump(),
            survey=lead.survey or {},
            calculated_areas=CalculatedAreas.model_validate(lead.calculated_areas or {}),
            estimate_line_items=[
                EstimateLineItem.model_validate(line) for line in lead.estimate_line_items or []
            ],
        )


class LeadStatusUpdate(CamelModel):
    status: LeadStatus


class DashboardResponse(CamelModel):
    leads_this_month: int
    recent_leads: list[LeadSummary]
    survey_link: str


# ============================================================================
# Pricing
# ============================================================================


class PricingSetupResponse(CamelModel):
    pricing_mode: PricingMode
    rows: list[PricingSetupRow]


class PricingSetupUpdate(CamelModel):
    rows: list[PricingSetupRow]
    pricing_mode: PricingMode | None = None


# ============================================================================
# Quotes
# ============================================================================


class QuoteResponse(CamelModel):
    state: QuoteState
    totals: QuoteTotals


class RecomputeRequest(CamelModel):
    state: QuoteState
    operations: list[QuoteOperation] = Field(default_factory=list)


class QuotePdfRequest(CamelModel):
    state: QuoteState


# ============================================================================
# Public survey
# ============================================================================


class PublicBuilderResponse(CamelModel):
    business_name: str
    max_photos: int


class SurveySubmitResponse(CamelModel):
    lead_id: UUID
    status: LeadStatus


# ============================================================================
# Admin
# ============================================================================


class AccessUpdate(CamelModel):
    access_disabled: bool


class AdminSummary(CamelModel):
    builders_by_subscription: dict[str, int]
    total_builders: int
    total_leads: int
    leads_this_month: int


class AdminBuilderDetail(CamelModel):
    builder: BuilderResponse
    lead_count: int
    leads_this_month: int
