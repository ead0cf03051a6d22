"""
Domain models for the event reminder feature.

Events and users are read-only snapshots of rows owned by the web app.
Windows, occurrences and run results are value types produced by the
pipeline; none of them are persisted.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class Recurrence(str, Enum):
    NONE = "None"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"

    @classmethod
    def parse(cls, value: str | None) -> "Recurrence":
        """Map a stored recurrence label to the enum; empty means no recurrence."""
        if not value:
            return cls.NONE
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unknown recurrence '{value}'")


# Categories the creation form always stores as yearly events
YEARLY_CATEGORIES = frozenset({"Birthday", "Anniversary"})


def category_forces_yearly(category: str | None) -> bool:
    return category in YEARLY_CATEGORIES


@dataclass(frozen=True, slots=True)
class ReminderEvent:
    """A stored date event as seen by the reminder pipeline."""

    id: str
    owner_id: str
    name: str
    base_date: date
    recurrence: Recurrence = Recurrence.NONE
    category: str = "Other"
    notes: str | None = None
    color: str | None = None
    reminder_tags: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class ReminderUser:
    """A user together with the events that matched a due-event query."""

    id: str
    email: str | None
    display_name: str | None = None
    events: tuple[ReminderEvent, ...] = ()


@dataclass(frozen=True, slots=True)
class LookaheadWindow:
    """How far ahead a reminder fires, and how the email words it."""

    tag: str
    days: int
    display_name: str


LOOKAHEAD_WINDOWS: tuple[LookaheadWindow, ...] = (
    LookaheadWindow(tag="1_DAY", days=1, display_name="tomorrow"),
    LookaheadWindow(tag="3_DAYS", days=3, display_name="in 3 days"),
    LookaheadWindow(tag="1_WEEK", days=7, display_name="in 1 week"),
    LookaheadWindow(tag="2_WEEKS", days=14, display_name="in 2 weeks"),
    LookaheadWindow(tag="1_MONTH", days=30, display_name="in 1 month"),
)

WINDOWS_BY_TAG: dict[str, LookaheadWindow] = {w.tag: w for w in LOOKAHEAD_WINDOWS}


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Inclusive UTC interval covering one calendar day."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True, slots=True)
class Occurrence:
    """A concrete date produced by expanding an event's recurrence."""

    id: str
    date: date
    event: ReminderEvent
    original_date: date


class DispatchState(str, Enum):
    PENDING = "pending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED_PERMANENTLY = "failed_permanently"


@dataclass(frozen=True, slots=True)
class SendResult:
    """What the mail transport reports for one send call."""

    message_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """Outcome of delivering one (user, window) notification."""

    success: bool
    state: DispatchState
    message_id: str | None = None
    attempt: int | None = None
    reason: str | None = None
    error: str | None = None
    total_attempts: int = 0

    @property
    def failure_message(self) -> str:
        return self.error or self.reason or "Unknown error"


@dataclass(frozen=True, slots=True)
class FailureDetail:
    user: str
    error: str
    attempts: int
    reminder_type: str | None = None


@dataclass(slots=True)
class RunSummary:
    """Aggregated result of one reminder run across all windows."""

    total_sent: int = 0
    total_failures: int = 0
    processed_windows: list[str] = field(default_factory=list)
    failure_details: list[FailureDetail] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape; failureDetails only appears when something failed."""
        data: dict[str, Any] = {
            "totalNotificationsSent": self.total_sent,
            "totalFailures": self.total_failures,
            "processedReminderTypes": list(self.processed_windows),
        }
        if self.total_failures > 0:
            data["failureDetails"] = [
                {"user": f.user, "error": f.error, "attempts": f.attempts}
                for f in self.failure_details
            ]
        return data
