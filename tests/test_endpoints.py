"""Tests for API endpoints."""

from unittest.mock import AsyncMock, Mock, patch

from fastapi import Response
from fastapi.testclient import TestClient

from slackbot.main import app

client = TestClient(app)


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check_returns_200(self):
        """Test that health check returns 200 status."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_check_response_structure(self):
        """Test that health check returns expected JSON structure."""
        response = client.get("/health")
        data = response.json()

        assert "status" in data
        assert "timestamp" in data
        assert "version" in data

        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"

    def test_health_check_content_type(self):
        """Test that health check returns JSON content type."""
        response = client.get("/health")
        assert response.headers["content-type"] == "application/json"


class TestSlackEventsEndpoint:
    """Tests for the Slack Events API endpoint."""

    def test_events_delegated_to_bolt(self):
        """Test that event callbacks are handed to the Bolt request handler."""
        handler = Mock()
        handler.handle = AsyncMock(return_value=Response(content="", status_code=200))

        with patch("slackbot.api.endpoints.get_request_handler", return_value=handler):
            response = client.post("/slack/events", json={"type": "event_callback"})

        assert response.status_code == 200
        handler.handle.assert_awaited_once()


class TestAPIDocumentation:
    """Tests for API documentation endpoints."""

    def test_openapi_json_available(self):
        """Test that OpenAPI JSON specification is available."""
        response = client.get("/openapi.json")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"

    def test_openapi_lists_routes(self):
        paths = client.get("/openapi.json").json()["paths"]
        assert "/slack/events" in paths
        assert "/health" in paths

    def test_swagger_ui_available(self):
        """Test that Swagger UI is available."""
        response = client.get("/docs")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
