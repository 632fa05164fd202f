"""Pytest configuration and fixtures for EstiMate Pro tests.

Provides common fixtures for testing.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from estimatepro.config import reset_config
from estimatepro.db.models import BuilderModel, LeadModel
from estimatepro.models import (
    EstimateLineItem,
    PriceType,
    PricingItem,
    PricingProfile,
    SurveyResponse,
)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://app.example.com")
    monkeypatch.delenv("ESTIMATEPRO_AUTH_DISABLED", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_survey() -> SurveyResponse:
    """2m x 2m bathroom with 2.5m walls: floor 4, wall 20, total 24 m²."""
    return SurveyResponse(
        client_name="Jane Citizen",
        client_phone="0400 000 000",
        client_email="jane@example.com",
        client_suburb="Carlton",
        floor_length=2,
        floor_width=2,
        wall_height=2.5,
        bathroom_type="House",
        tiling_level="Standard",
        tiles_supply="yes_include",
        toilet_location="same_location",
        wall_changes="no",
        home_age_category="1990s",
    )


@pytest.fixture
def sample_profile() -> PricingProfile:
    """Small pricing table covering every price type."""
    return PricingProfile(
        pricing_items=[
            PricingItem(item_name="Demolition", price_type=PriceType.FIXED, final_price=1500),
            PricingItem(
                item_name="Tiling (labour)",
                applicability="Standard",
                price_type=PriceType.SQM,
                final_price=100,
            ),
            PricingItem(
                item_name="Project management",
                price_type=PriceType.PERCENTAGE,
                markup_percent=10,
            ),
            PricingItem(
                item_name="Toilet relocation",
                applicability="If customer selects toilet will change",
                final_price=900,
            ),
        ]
    )


@pytest.fixture
def builder_model() -> BuilderModel:
    """Transient builder row (never flushed)."""
    return BuilderModel(
        id=uuid4(),
        email="builder@example.com",
        password_hash="not-a-hash",
        business_name="Citizen Bathrooms",
        contact_name="Sam Builder",
        phone="03 9000 0000",
        abn="12 345 678 901",
        role="builder",
        survey_slug="abc123",
        subscription_status="trialing",
        trial_ends_at=datetime.now(timezone.utc) + timedelta(days=14),
        access_disabled=False,
        pricing_mode="final",
        last_login=None,
        created_at=datetime(2026, 10, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def lead_model(builder_model: BuilderModel, sample_survey: SurveyResponse) -> LeadModel:
    """Transient lead whose stored estimate includes a wall knock row."""
    lines = [
        EstimateLineItem(item_name="Demolition", price_type=PriceType.FIXED, quantity=1, unit_price=1500, total=1500),
        EstimateLineItem(
            item_name="Wall knock/shift labour", price_type=PriceType.FIXED, quantity=1, unit_price=800, total=800
        ),
        EstimateLineItem(
            item_name="Project management",
            price_type=PriceType.PERCENTAGE,
            quantity=1,
            quantity_label="10%",
            unit_price=10,
            total=150,
        ),
    ]
    return LeadModel(
        id=uuid4(),
        builder_id=builder_model.id,
        status="New",
        client_name=sample_survey.client_name,
        client_phone=sample_survey.client_phone,
        client_email=sample_survey.client_email,
        client_suburb=sample_survey.client_suburb,
        survey=sample_survey.model_dump(mode="json", by_alias=True),
        calculated_areas={"floorArea": 4, "wallArea": 20, "totalArea": 24},
        estimate_line_items=[line.model_dump(mode="json", by_alias=True) for line in lines],
        base_estimate=2450,
        high_estimate=3185,
        created_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
    )


@pytest.fixture
def mock_db_session():
    """Mock database session with async context manager."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()

    async_cm = AsyncMock()
    async_cm.__aenter__.return_value = session
    async_cm.__aexit__.return_value = None

    return async_cm
