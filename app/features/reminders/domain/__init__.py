"""
Domain subpackage for the event reminder feature.
"""

from .models import (
    LOOKAHEAD_WINDOWS,
    WINDOWS_BY_TAG,
    DateWindow,
    DeliveryResult,
    DispatchState,
    FailureDetail,
    LookaheadWindow,
    Occurrence,
    Recurrence,
    ReminderEvent,
    ReminderUser,
    RunSummary,
    SendResult,
    category_forces_yearly,
)

__all__ = [
    "LOOKAHEAD_WINDOWS",
    "WINDOWS_BY_TAG",
    "DateWindow",
    "DeliveryResult",
    "DispatchState",
    "FailureDetail",
    "LookaheadWindow",
    "Occurrence",
    "Recurrence",
    "ReminderEvent",
    "ReminderUser",
    "RunSummary",
    "SendResult",
    "category_forces_yearly",
]
