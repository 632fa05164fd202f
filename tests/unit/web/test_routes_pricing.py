"""Tests for estimatepro.web.routes.pricing - Pricing profile routes."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from estimatepro.estimate.catalog import PRICING_CATALOG
from estimatepro.models import PricingItem, PricingProfile
from estimatepro.web.dependencies import CurrentBuilder, require_builder
from estimatepro.web.routes import pricing


@pytest.fixture
def app(builder_model):
    """Create test FastAPI app with pricing router."""
    test_app = FastAPI()
    test_app.include_router(pricing.router)
    test_app.dependency_overrides[require_builder] = lambda: CurrentBuilder(
        id=builder_model.id, email=builder_model.email, role="builder"
    )
    return test_app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


async def _echo_profile(session, builder, profile):
    return profile


class TestPricingProfile:
    """Tests for GET/PUT /api/builders/pricing."""

    @patch("estimatepro.web.routes.pricing.load_pricing_profile", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_session")
    def test_get_profile(
        self, mock_get_session, mock_get_builder, mock_load, client, mock_db_session, builder_model, sample_profile
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_builder.return_value = builder_model
        mock_load.return_value = sample_profile

        response = client.get("/api/builders/pricing")

        assert response.status_code == 200
        data = response.json()
        assert data["pricingMode"] == "final"
        assert [item["itemName"] for item in data["pricingItems"]][:2] == ["Demolition", "Tiling (labour)"]

    @patch("estimatepro.web.routes.pricing.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_session")
    def test_missing_builder(self, mock_get_session, mock_get_builder, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_get_builder.return_value = None

        assert client.get("/api/builders/pricing").status_code == 404

    @patch("estimatepro.web.routes.pricing.save_pricing_profile", side_effect=_echo_profile)
    @patch("estimatepro.web.routes.pricing.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_session")
    def test_put_profile_coerces_rows(
        self, mock_get_session, mock_get_builder, mock_save, client, mock_db_session, builder_model
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_builder.return_value = builder_model

        response = client.put(
            "/api/builders/pricing",
            json={
                "pricingMode": "base",
                "pricingItems": [
                    {"itemName": "Demolition", "priceType": "fixed", "baseCost": "1200"},
                    {"itemName": "Tiling (labour)", "priceType": "sqm", "finalPrice": "abc"},
                ],
            },
        )

        assert response.status_code == 200
        saved = mock_save.call_args.args[2]
        assert saved.pricing_mode.value == "base"
        assert saved.pricing_items[0].base_cost == 1200.0
        assert saved.pricing_items[1].final_price == 0.0


class TestPricingSetup:
    """Tests for GET/PUT /api/builders/pricing/setup."""

    @patch("estimatepro.web.routes.pricing.load_pricing_profile", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_session")
    def test_form_seeded_from_stored_prices(
        self, mock_get_session, mock_get_builder, mock_load, client, mock_db_session, builder_model
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_builder.return_value = builder_model
        mock_load.return_value = PricingProfile(
            pricing_items=[PricingItem(item_name="Electrical", final_price=450)]
        )

        response = client.get("/api/builders/pricing/setup")

        assert response.status_code == 200
        rows = {row["key"]: row for row in response.json()["rows"]}
        assert len(rows) == len(PRICING_CATALOG)
        assert rows["electrical"]["value"] == 450.0
        assert rows["painting"]["value"] is None
        assert rows["painting"]["isActive"] is True

    @patch("estimatepro.web.routes.pricing.save_pricing_profile", side_effect=_echo_profile)
    @patch("estimatepro.web.routes.pricing.load_pricing_profile", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.pricing.get_session")
    def test_save_keeps_freeform_rows(
        self, mock_get_session, mock_get_builder, mock_load, mock_save, client, mock_db_session, builder_model
    ):
        mock_get_session.return_value = mock_db_session
        mock_get_builder.return_value = builder_model
        mock_load.return_value = PricingProfile(
            pricing_items=[
                PricingItem(item_name="Base Default", final_price=5000),
                PricingItem(item_name="Electrical", final_price=300),
            ]
        )

        response = client.put(
            "/api/builders/pricing/setup",
            json={"rows": [{"key": "electrical", "value": 450}, {"key": "project_management", "value": "12"}]},
        )

        assert response.status_code == 200
        saved = mock_save.call_args.args[2]
        assert [item.item_name for item in saved.pricing_items] == [
            "Base Default",
            "Electrical",
            "Project management",
        ]
        rows = {row["key"]: row for row in response.json()["rows"]}
        assert rows["electrical"]["value"] == 450.0
        assert rows["project_management"]["value"] == 12.0
