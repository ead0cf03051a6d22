# app/models/api/reminder_response.py
"""
Reminder cron API response models.
Field names follow the JSON contract the scheduler already consumes.
"""

from pydantic import BaseModel, ConfigDict, Field

from app.features.reminders.domain import RunSummary


class FailureDetailResponse(BaseModel):
    """One failed (user, window) dispatch."""

    user: str = Field(..., description="Recipient email, or 'unknown'")
    error: str = Field(..., description="Normalized failure message")
    attempts: int = Field(..., description="Delivery attempts made")


class ReminderRunResponse(BaseModel):
    """Summary returned to the scheduler after a reminder run."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="Human readable run status")
    total_notifications_sent: int = Field(
        ..., alias="totalNotificationsSent", description="Events notified by successful emails"
    )
    total_failures: int = Field(..., alias="totalFailures", description="Failed dispatches")
    processed_reminder_types: list[str] = Field(
        ..., alias="processedReminderTypes", description="Window tags processed, in order"
    )
    failure_details: list[FailureDetailResponse] | None = Field(
        None, alias="failureDetails", description="Present only when totalFailures > 0"
    )

    @classmethod
    def from_summary(cls, summary: RunSummary, message: str) -> "ReminderRunResponse":
        return cls(message=message, **summary.to_dict())

    def to_payload(self) -> dict:
        """JSON body with camelCase keys; failureDetails dropped when absent."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    error: str
