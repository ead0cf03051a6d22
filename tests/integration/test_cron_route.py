"""
Cron trigger endpoint: authorization, response shape and failure mapping.
"""

import pytest
from fastapi.testclient import TestClient

from app.features.reminders.domain import FailureDetail, RunSummary
from app.features.reminders.jobs.reminder_job import (
    ReminderJobError,
    ReminderRunInProgress,
    get_reminder_job,
)
from app.main import app

SECRET = "cron-test-secret"


class StubJob:
    def __init__(self, summary: RunSummary | None = None, error: Exception | None = None):
        self.summary = summary or RunSummary()
        self.error = error
        self.runs = 0

    async def run_once(self) -> RunSummary:
        self.runs += 1
        if self.error:
            raise self.error
        return self.summary


@pytest.fixture
def stub_job(monkeypatch):
    monkeypatch.setattr("app.features.reminders.api.router.settings.CRON_SECRET", SECRET)
    job = StubJob()
    app.dependency_overrides[get_reminder_job] = lambda: job
    yield job
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


def _auth(secret: str = SECRET) -> dict:
    return {"Authorization": f"Bearer {secret}"}


def test_missing_header_is_unauthorized(client, stub_job):
    response = client.post("/api/cron/reminders")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert stub_job.runs == 0


def test_wrong_secret_is_unauthorized(client, stub_job):
    response = client.post("/api/cron/reminders", headers=_auth("nope"))

    assert response.status_code == 401
    assert stub_job.runs == 0


def test_unset_secret_rejects_everything(client, stub_job, monkeypatch):
    monkeypatch.setattr("app.features.reminders.api.router.settings.CRON_SECRET", None)

    response = client.post("/api/cron/reminders", headers={"Authorization": "Bearer None"})

    assert response.status_code == 401
    assert stub_job.runs == 0


def test_clean_run_returns_summary_without_failure_details(client, stub_job):
    stub_job.summary = RunSummary(
        total_sent=3, processed_windows=["1_DAY", "3_DAYS", "1_WEEK", "2_WEEKS", "1_MONTH"]
    )

    response = client.post("/api/cron/reminders", headers=_auth())

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Email notifications processing completed"
    assert body["totalNotificationsSent"] == 3
    assert body["totalFailures"] == 0
    assert body["processedReminderTypes"][0] == "1_DAY"
    assert "failureDetails" not in body


def test_failed_dispatches_are_reported(client, stub_job):
    stub_job.summary = RunSummary(
        total_sent=0,
        total_failures=1,
        processed_windows=["1_DAY"],
        failure_details=[FailureDetail(user="unknown", error="No email or events", attempts=0)],
    )

    response = client.post("/api/cron/reminders", headers=_auth())

    assert response.status_code == 200
    assert response.json()["failureDetails"] == [
        {"user": "unknown", "error": "No email or events", "attempts": 0}
    ]


def test_overlapping_run_is_a_conflict(client, stub_job):
    stub_job.error = ReminderRunInProgress("already running", operation="run_once")

    response = client.post("/api/cron/reminders", headers=_auth())

    assert response.status_code == 409
    assert response.json() == {"error": "Reminder run already in progress"}


def test_job_failure_is_internal_server_error(client, stub_job):
    stub_job.error = ReminderJobError("database unavailable", operation="run_once")

    response = client.post("/api/cron/reminders", headers=_auth())

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_error_responses_are_documented(client):
    schema = client.get("/openapi.json").json()

    responses = schema["paths"]["/api/cron/reminders"]["post"]["responses"]
    for code in ("401", "409", "500"):
        assert responses[code]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorResponse"
        }
