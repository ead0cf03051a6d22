"""Builders and in-memory fakes shared by the reminder tests."""

from datetime import date

from app.features.reminders.domain import (
    Recurrence,
    ReminderEvent,
    ReminderUser,
    SendResult,
)


def make_event(
    event_id: str = "evt-1",
    *,
    owner_id: str = "user-123",
    name: str = "Mom's Birthday",
    base_date: date = date(1960, 8, 10),
    recurrence: Recurrence = Recurrence.YEARLY,
    category: str = "Birthday",
    notes: str | None = None,
    tags: tuple[str, ...] = ("1_DAY",),
) -> ReminderEvent:
    return ReminderEvent(
        id=event_id,
        owner_id=owner_id,
        name=name,
        base_date=base_date,
        recurrence=recurrence,
        category=category,
        notes=notes,
        reminder_tags=frozenset(tags),
    )


def make_user(
    user_id: str = "user-123",
    *,
    email: str | None = "user@example.com",
    events: tuple[ReminderEvent, ...] | None = None,
) -> ReminderUser:
    if events is None:
        events = (make_event(owner_id=user_id),)
    return ReminderUser(id=user_id, email=email, display_name="User", events=events)


class FakeMailer:
    """Mail transport that replays scripted outcomes.

    Each outcome is a SendResult, an exception instance to raise, or any
    other value to raise as-is. Once the script runs out every send succeeds.
    """

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.sent: list[dict] = []
        self.closed = False

    async def send(self, to: str, subject: str, html: str) -> SendResult:
        self.sent.append({"to": to, "subject": subject, "html": html})
        if self.outcomes:
            outcome = self.outcomes.pop(0)
            if isinstance(outcome, SendResult):
                return outcome
            raise outcome
        return SendResult(message_id=f"msg-{len(self.sent)}")

    async def close(self) -> None:
        self.closed = True


class FailingMailer(FakeMailer):
    """Every send raises."""

    def __init__(self, error: Exception | None = None):
        super().__init__()
        self.error = error or ConnectionError("SMTP relay unreachable")

    async def send(self, to: str, subject: str, html: str) -> SendResult:
        self.sent.append({"to": to, "subject": subject, "html": html})
        raise self.error


class FakeDueEventRepository:
    """In-memory due-event query keyed by window tag."""

    def __init__(self, users_by_tag: dict[str, list[ReminderUser]] | None = None, errors=None):
        self.users_by_tag = users_by_tag or {}
        self.errors = errors or {}
        self.calls: list[tuple] = []

    async def find_due_users(self, window, tag):
        self.calls.append((tag, window))
        if tag in self.errors:
            raise self.errors[tag]
        return list(self.users_by_tag.get(tag, []))


class FakeSleeper:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
