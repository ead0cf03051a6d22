"""
Event reminder feature package.

Everything behind the daily reminder email lives here: recurrence and window
computations (``pipeline``), the due-event query (``repository``), email
rendering and delivery (``services``), the batch run (``jobs``) and its cron
trigger (``api``).
"""

from .api.router import router as reminders_router  # noqa: F401
from .jobs.reminder_job import ReminderJob, get_reminder_job, run_event_reminders  # noqa: F401
from .services.dispatcher import deliver  # noqa: F401
from .pipeline import expand, window_for  # noqa: F401
from .domain.models import LOOKAHEAD_WINDOWS, RunSummary  # noqa: F401
