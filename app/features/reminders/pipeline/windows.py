"""
Lookahead window generation.
"""

from datetime import UTC, datetime, time, timedelta

from app.features.reminders.domain import DateWindow

DAY_END_OFFSET = timedelta(days=1) - timedelta(milliseconds=1)


def window_for(days_ahead: int, now: datetime | None = None) -> DateWindow:
    """
    UTC day interval ``days_ahead`` days after ``now``.

    ``start`` is midnight UTC of the target day and ``end`` is 23:59:59.999
    of the same day. Naive ``now`` values are read as UTC.
    """
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    else:
        now = now.astimezone(UTC)

    target_day = (now + timedelta(days=days_ahead)).date()
    start = datetime.combine(target_day, time.min, tzinfo=UTC)
    return DateWindow(start=start, end=start + DAY_END_OFFSET)
