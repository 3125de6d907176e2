"""
Tests for exception handlers and middleware registered in main.py.
"""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models import get_db


@pytest.fixture
def lenient_client(db_session):
    """Client that returns 500 responses instead of re-raising server errors."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestExceptionHandlers:
    """Tests for the JSON error responses."""

    def test_domain_error_becomes_detail(self, client, auth_headers):
        """Test that service errors keep their status code and message."""
        response = client.post("/v1/tests/999/start", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"detail": "Scheduled test not found."}

    def test_validation_error_lists_fields(self, client):
        """Test that schema failures are reported field by field."""
        response = client.post("/v1/auth/login", json={"personal_id": "PID-1"})

        assert response.status_code == 422
        errors = response.json()["detail"]
        assert any(error["loc"][-1] == "password" for error in errors)

    def test_unhandled_error_has_error_id(self, lenient_client):
        """Test that unexpected failures return an opaque error with an id."""
        with patch(
            "app.api.v1.auth.authenticate",
            side_effect=RuntimeError("secret connection string"),
        ), patch("app.main.capture_error") as mock_capture:
            response = lenient_client.post(
                "/v1/auth/login",
                json={"personal_id": "PID-1", "password": "whatever"},
            )

        assert response.status_code == 500
        data = response.json()
        assert data["detail"] == "Internal server error"
        assert data["error_id"]
        assert "secret" not in response.text
        mock_capture.assert_called_once()

    def test_server_http_errors_are_reported(self, client, auth_headers, scheduled_test):
        """Test that 5xx HTTP errors go to error tracking."""
        with patch(
            "app.api.v1.tests.list_available",
            side_effect=RuntimeError("db unreachable"),
        ), patch("app.main.capture_error") as mock_capture:
            response = client.get("/v1/tests/available", headers=auth_headers)

        assert response.status_code == 500
        mock_capture.assert_called_once()


class TestMiddleware:
    """Tests for request logging and size limits."""

    def test_request_id_is_echoed(self, client):
        """Test that a caller-supplied request id is returned."""
        response = client.get("/", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        """Test that a request id is generated when absent."""
        response = client.get("/")

        assert response.headers["X-Request-ID"]

    def test_oversized_body_rejected(self, client):
        """Test that bodies above the configured limit are refused."""
        response = client.post(
            "/v1/tests/attempts/1/submit-section",
            content="x" * (2 * 1024 * 1024),
        )

        assert response.status_code == 413
        assert response.json() == {"detail": "Request body too large"}


class TestHealth:
    """Tests for the health and root endpoints."""

    def test_health_reports_database(self, client):
        """Test a healthy database probe."""
        response = client.get("/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "ok"
        assert data["service"] == "Exam Room API"

    def test_health_degraded_when_database_fails(self, client, db_session):
        """Test that a failing probe still answers 200 with a degraded body."""
        with patch.object(db_session, "execute", side_effect=RuntimeError("down")):
            response = client.get("/v1/health")

        assert response.status_code == 200
        assert response.json()["database"] == "unavailable"
        assert response.json()["status"] == "degraded"

    def test_root(self, client):
        """Test the root endpoint."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/v1/docs"
