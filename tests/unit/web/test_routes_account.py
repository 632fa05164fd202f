"""Tests for estimatepro.web.routes.account - Builder account routes."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from estimatepro.web.dependencies import CurrentBuilder, require_builder
from estimatepro.web.routes import account


@pytest.fixture
def app(builder_model):
    """Create test FastAPI app with account router."""
    test_app = FastAPI()
    test_app.include_router(account.router)
    test_app.dependency_overrides[require_builder] = lambda: CurrentBuilder(
        id=builder_model.id, email=builder_model.email, role="builder"
    )
    return test_app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


class TestAccount:
    """Tests for GET/PUT /api/builders/me."""

    @patch("estimatepro.web.routes.account.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.account.get_session")
    def test_get_account(self, mock_get_session, mock_get, client, mock_db_session, builder_model):
        mock_get_session.return_value = mock_db_session
        mock_get.return_value = builder_model

        response = client.get("/api/builders/me")

        assert response.status_code == 200
        data = response.json()
        assert data["abn"] == "12 345 678 901"
        assert "passwordHash" not in data

    @patch("estimatepro.web.routes.account.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.account.get_session")
    def test_update_only_given_fields(self, mock_get_session, mock_get, client, mock_db_session, builder_model):
        mock_get_session.return_value = mock_db_session
        mock_get.return_value = builder_model

        response = client.put("/api/builders/me", json={"businessName": "  Renamed Co ", "abn": "98 765"})

        assert response.status_code == 200
        assert builder_model.business_name == "Renamed Co"
        assert builder_model.abn == "98 765"
        assert builder_model.contact_name == "Sam Builder"


class TestSurveyLink:
    """Tests for the survey link routes."""

    @patch("estimatepro.web.routes.account.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.account.get_session")
    def test_get_link(self, mock_get_session, mock_get, client, mock_db_session, builder_model):
        mock_get_session.return_value = mock_db_session
        mock_get.return_value = builder_model

        response = client.get("/api/builders/survey-link")

        assert response.json() == {
            "surveySlug": "abc123",
            "surveyLink": "https://app.example.com/survey/abc123",
        }

    @patch("estimatepro.web.routes.account.new_survey_slug", return_value="fresh99")
    @patch("estimatepro.web.routes.account.get_builder", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.account.get_session")
    def test_regenerate(self, mock_get_session, mock_get, mock_slug, client, mock_db_session, builder_model):
        mock_get_session.return_value = mock_db_session
        mock_get.return_value = builder_model

        response = client.post("/api/builders/survey-link/regenerate")

        assert response.status_code == 200
        assert response.json()["surveyLink"] == "https://app.example.com/survey/fresh99"
        assert builder_model.survey_slug == "fresh99"
