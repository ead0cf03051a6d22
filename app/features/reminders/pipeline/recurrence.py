"""
Recurrence expansion for stored date events.

Turns one stored event into concrete calendar occurrences. Everything here is
a pure function over ``datetime.date`` values; callers pass ``today`` when they
need deterministic results.
"""

import calendar
from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, date, datetime

from app.features.reminders.domain import Occurrence, Recurrence, ReminderEvent


def utc_today() -> date:
    return datetime.now(UTC).date()


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_to_month(year: int, month: int, day: int) -> date:
    """Build a date, pulling ``day`` back to the month's last valid day."""
    return date(year, month, min(day, days_in_month(year, month)))


def next_yearly_date(base_date: date, today: date | None = None) -> date:
    """
    Next anniversary of ``base_date`` on or after ``today``.

    Feb 29 lands on Feb 28 in non-leap years. Never returns a past date and
    never jumps more than one year ahead of ``today``.
    """
    today = today or utc_today()
    candidate = clamp_to_month(today.year, base_date.month, base_date.day)
    if candidate < today:
        candidate = clamp_to_month(today.year + 1, base_date.month, base_date.day)
    return candidate


def monthly_dates(base_date: date, target_year: int) -> list[date]:
    """One date per month of ``target_year`` on ``base_date``'s day-of-month, clamped."""
    return [clamp_to_month(target_year, month, base_date.day) for month in range(1, 13)]


def occurrence_id(event_id: str, occurrence_date: date) -> str:
    return f"{event_id}-{occurrence_date.year}-{occurrence_date.month:02d}"


def expand_dates(
    base_date: date,
    recurrence: Recurrence,
    target_year: int | None = None,
    *,
    today: date | None = None,
) -> list[date]:
    """
    Concrete dates for ``base_date`` under ``recurrence``.

    - ``NONE``: the base date, unchanged; ``target_year`` is ignored.
    - ``YEARLY``: the single next anniversary on or after ``today``.
    - ``MONTHLY``: twelve dates, one per month of ``target_year``
      (defaults to ``today``'s year).
    """
    today = today or utc_today()

    if recurrence is Recurrence.NONE:
        return [base_date]
    if recurrence is Recurrence.YEARLY:
        return [next_yearly_date(base_date, today)]
    return monthly_dates(base_date, target_year or today.year)


def expand(
    event_or_base_date: ReminderEvent | date,
    recurrence: Recurrence | None = None,
    target_year: int | None = None,
    *,
    today: date | None = None,
) -> list[Occurrence] | list[date]:
    """
    Expand an event, or a bare base date, under a recurrence rule.

    Given a ``ReminderEvent`` the result is a list of ``Occurrence`` and
    ``recurrence`` defaults to the event's own rule. Synthesized occurrences
    get an id derived from the event id, year and month so list views can key
    on them; a non-recurring event keeps its own id.

    Given a bare ``date`` the rule is required and the result is the list of
    occurrence dates.
    """
    if not isinstance(event_or_base_date, ReminderEvent):
        if recurrence is None:
            raise TypeError("recurrence is required when expanding a bare date")
        return expand_dates(event_or_base_date, recurrence, target_year, today=today)

    event = event_or_base_date
    rule = event.recurrence if recurrence is None else recurrence
    dates = expand_dates(event.base_date, rule, target_year, today=today)

    if rule is Recurrence.NONE:
        return [
            Occurrence(
                id=event.id, date=event.base_date, event=event, original_date=event.base_date
            )
        ]

    return [
        Occurrence(
            id=occurrence_id(event.id, occurrence_date),
            date=occurrence_date,
            event=event,
            original_date=event.base_date,
        )
        for occurrence_date in dates
    ]


def age_on(original_date: date, occurrence_date: date) -> int:
    """
    Completed years between ``original_date`` and ``occurrence_date``.

    One year is subtracted when the occurrence falls before this year's
    anniversary; a leap-day original counts its Feb 28 stand-in as the
    anniversary. Never negative.
    """
    years = occurrence_date.year - original_date.year
    anniversary = clamp_to_month(occurrence_date.year, original_date.month, original_date.day)
    if occurrence_date < anniversary:
        years -= 1
    return max(years, 0)


def days_until(occurrence_date: date, today: date | None = None) -> int:
    today = today or utc_today()
    return (occurrence_date - today).days


def occurrences_for_year(
    events: Iterable[ReminderEvent], target_year: int, *, today: date | None = None
) -> list[Occurrence]:
    """Expand every event for a calendar view, ordered by date then name."""
    today = today or utc_today()
    occurrences = [
        occ for event in events for occ in expand(event, target_year=target_year, today=today)
    ]
    return sorted(occurrences, key=lambda occ: (occ.date, occ.event.name.lower()))


def group_by_month(
    occurrences: Iterable[Occurrence], start_month: int
) -> list[tuple[int, list[Occurrence]]]:
    """
    Bucket occurrences by calendar month.

    Months are ordered starting at ``start_month`` and wrapping around the
    year; months without occurrences are left out.
    """
    if not 1 <= start_month <= 12:
        raise ValueError(f"start_month must be 1-12, got {start_month}")

    buckets: dict[int, list[Occurrence]] = defaultdict(list)
    for occ in occurrences:
        buckets[occ.date.month].append(occ)

    ordered = [(start_month - 1 + offset) % 12 + 1 for offset in range(12)]
    return [
        (month, sorted(buckets[month], key=lambda occ: occ.date))
        for month in ordered
        if buckets.get(month)
    ]
