"""Tests for estimatepro.web.routes.surveys - Public client survey routes."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from estimatepro.web.routes import surveys


@pytest.fixture
def app():
    """Create test FastAPI app with surveys router (no auth)."""
    test_app = FastAPI()
    test_app.include_router(surveys.router)
    return test_app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def survey_payload(sample_survey) -> dict:
    return sample_survey.model_dump(mode="json", by_alias=True)


class TestGetSurvey:
    """Tests for GET /api/surveys/{slug}."""

    @patch("estimatepro.web.routes.surveys.get_builder_by_slug", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_session")
    def test_shows_builder(self, mock_get_session, mock_by_slug, client, mock_db_session, builder_model):
        mock_get_session.return_value = mock_db_session
        mock_by_slug.return_value = builder_model

        response = client.get("/api/surveys/abc123")

        assert response.status_code == 200
        assert response.json() == {"businessName": "Citizen Bathrooms", "maxPhotos": 5}

    @patch("estimatepro.web.routes.surveys.get_builder_by_slug", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_session")
    def test_unknown_slug(self, mock_get_session, mock_by_slug, client, mock_db_session):
        mock_get_session.return_value = mock_db_session
        mock_by_slug.return_value = None

        assert client.get("/api/surveys/nope").status_code == 404

    @patch("estimatepro.web.routes.surveys.get_builder_by_slug", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_session")
    def test_disabled_builder_hidden(self, mock_get_session, mock_by_slug, client, mock_db_session, builder_model):
        mock_get_session.return_value = mock_db_session
        builder_model.access_disabled = True
        mock_by_slug.return_value = builder_model

        assert client.get("/api/surveys/abc123").status_code == 404


class TestSubmitSurvey:
    """Tests for POST /api/surveys/{slug}."""

    @patch("estimatepro.web.routes.surveys.notify_new_lead")
    @patch("estimatepro.web.routes.surveys.submit_survey", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_builder_by_slug", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_session")
    def test_creates_lead_and_alerts_builder(
        self,
        mock_get_session,
        mock_by_slug,
        mock_submit,
        mock_notify,
        client,
        mock_db_session,
        builder_model,
        lead_model,
        survey_payload,
    ):
        mock_get_session.return_value = mock_db_session
        mock_by_slug.return_value = builder_model
        mock_submit.return_value = lead_model

        response = client.post("/api/surveys/abc123", json=survey_payload)

        assert response.status_code == 201
        assert response.json() == {"leadId": str(lead_model.id), "status": "New"}
        mock_notify.assert_called_once()
        email, survey, estimate = mock_notify.call_args.args
        assert email == "builder@example.com"
        assert survey.client_name == "Jane Citizen"
        assert estimate.base_estimate == 1650.0

    @patch("estimatepro.web.routes.surveys.notify_new_lead")
    @patch("estimatepro.web.routes.surveys.get_builder_by_slug", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_session")
    def test_incomplete_survey_rejected(
        self, mock_get_session, mock_by_slug, mock_notify, client, mock_db_session, builder_model
    ):
        mock_get_session.return_value = mock_db_session
        mock_by_slug.return_value = builder_model

        response = client.post("/api/surveys/abc123", json={"clientName": "Jane", "floorLength": "2"})

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert "clientPhone is required" in detail
        assert "Enter totalArea or floorLength, floorWidth and wallHeight" in detail
        mock_notify.assert_not_called()

    @patch("estimatepro.web.routes.surveys.submit_survey", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_builder_by_slug", new_callable=AsyncMock)
    @patch("estimatepro.web.routes.surveys.get_session")
    def test_unknown_slug(self, mock_get_session, mock_by_slug, mock_submit, client, mock_db_session, survey_payload):
        mock_get_session.return_value = mock_db_session
        mock_by_slug.return_value = None

        assert client.post("/api/surveys/nope", json=survey_payload).status_code == 404
        mock_submit.assert_not_awaited()
