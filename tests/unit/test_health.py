"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_healthz_endpoint():
    """Test the basic health check endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "datekeeper-reminders"


def test_readyz_endpoint_all_checks_healthy():
    """Test readiness endpoint when the database is up and secrets are set."""
    with (
        patch("app.routes.health.db_health_check", AsyncMock(return_value={"healthy": True})),
        patch("app.routes.health.settings.CRON_SECRET", "cron-secret"),
        patch("app.routes.health.settings.RESEND_API_KEY", "re_key"),
    ):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is True
    assert data["checks"]["database"]["ok"] is True
    assert data["checks"]["configuration"]["ok"] is True


def test_readyz_endpoint_database_unhealthy():
    """Test readiness endpoint when Postgres is down."""
    with (
        patch(
            "app.routes.health.db_health_check",
            AsyncMock(return_value={"healthy": False, "error": "Connection failed"}),
        ),
        patch("app.routes.health.settings.CRON_SECRET", "cron-secret"),
        patch("app.routes.health.settings.RESEND_API_KEY", "re_key"),
    ):
        response = client.get("/readyz")

    # Should still return 200, but overall_ok should be False
    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["ok"] is False
    assert data["checks"]["database"]["error"] == "Connection failed"


def test_readyz_endpoint_missing_secrets():
    """Test readiness endpoint when the cron secret and mail key are missing."""
    with (
        patch("app.routes.health.db_health_check", AsyncMock(return_value={"healthy": True})),
        patch("app.routes.health.settings.CRON_SECRET", None),
        patch("app.routes.health.settings.RESEND_API_KEY", None),
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is False
    issues = data["checks"]["configuration"]["issues"]
    assert "CRON_SECRET not set" in issues
    assert "RESEND_API_KEY not set" in issues
