"""
Pure date computations for the reminder feature.

``recurrence`` expands stored events into occurrences and ``windows`` turns
"N days from now" into the UTC interval used to query due events.
"""

from .recurrence import (
    age_on,
    days_until,
    expand,
    expand_dates,
    group_by_month,
    next_yearly_date,
    occurrences_for_year,
)
from .windows import window_for

__all__ = [
    "age_on",
    "days_until",
    "expand",
    "expand_dates",
    "group_by_month",
    "next_yearly_date",
    "occurrences_for_year",
    "window_for",
]
