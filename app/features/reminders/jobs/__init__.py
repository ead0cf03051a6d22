"""
Job runners for the event reminder feature.
"""

from .reminder_job import (
    ReminderJob,
    ReminderJobError,
    ReminderRunInProgress,
    get_reminder_job,
    run_event_reminders,
)

__all__ = [
    "ReminderJob",
    "ReminderJobError",
    "ReminderRunInProgress",
    "get_reminder_job",
    "run_event_reminders",
]
