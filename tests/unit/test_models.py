import pytest

from app.features.reminders.domain import (
    FailureDetail,
    Recurrence,
    RunSummary,
    category_forces_yearly,
)
from app.models.api.reminder_response import ReminderRunResponse


def test_recurrence_parse_is_case_insensitive():
    assert Recurrence.parse("yearly") is Recurrence.YEARLY
    assert Recurrence.parse("Monthly") is Recurrence.MONTHLY
    assert Recurrence.parse(None) is Recurrence.NONE
    assert Recurrence.parse("") is Recurrence.NONE


def test_recurrence_parse_rejects_unknown_labels():
    with pytest.raises(ValueError):
        Recurrence.parse("Weekly")


def test_birthdays_and_anniversaries_force_yearly():
    assert category_forces_yearly("Birthday")
    assert category_forces_yearly("Anniversary")
    assert not category_forces_yearly("Holiday")


def test_summary_omits_failure_details_when_nothing_failed():
    summary = RunSummary(total_sent=4, processed_windows=["1_DAY"])

    assert summary.to_dict() == {
        "totalNotificationsSent": 4,
        "totalFailures": 0,
        "processedReminderTypes": ["1_DAY"],
    }


def test_response_payload_keeps_camel_case_and_failures():
    summary = RunSummary(
        total_sent=1,
        total_failures=1,
        processed_windows=["1_DAY", "3_DAYS"],
        failure_details=[FailureDetail(user="a@example.com", error="bounced", attempts=3)],
    )

    payload = ReminderRunResponse.from_summary(summary, "done").to_payload()

    assert payload["message"] == "done"
    assert payload["totalNotificationsSent"] == 1
    assert payload["failureDetails"] == [{"user": "a@example.com", "error": "bounced", "attempts": 3}]


def test_response_payload_drops_failure_details_key_when_clean():
    payload = ReminderRunResponse.from_summary(RunSummary(), "done").to_payload()

    assert "failureDetails" not in payload
    assert payload["processedReminderTypes"] == []
