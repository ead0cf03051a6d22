"""
Daily event reminder job.

Walks the five lookahead windows in order, loads the users with events due in
each window and sends every user one email per window. Produces a
``RunSummary`` for the scheduler.

A failing due-event query is not contained: it aborts the remaining windows
and surfaces as ``ReminderJobError``. Delivery failures are per (user,
window) and never stop the run.
"""

import asyncio
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from app.config import settings
from app.db.pool import db_pool
from app.features.reminders.domain import (
    LOOKAHEAD_WINDOWS,
    DeliveryResult,
    DispatchState,
    FailureDetail,
    LookaheadWindow,
    ReminderUser,
    RunSummary,
)
from app.features.reminders.pipeline.windows import window_for
from app.features.reminders.repository import DueEventQuery, due_event_repository
from app.features.reminders.services.dispatcher import Sleeper, deliver, normalize_error
from app.features.reminders.services.mailer import MailTransport, ResendMailer
from app.infrastructure.observability.logging import get_logger, log_run_summary

logger = get_logger(__name__)

RUN_COMPLETED_MESSAGE = "Email notifications processing completed"


class ReminderJobError(Exception):
    """Custom exception for reminder job operations."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


class ReminderRunInProgress(ReminderJobError):
    """Raised when a run is requested while another one is still going."""


class ReminderRunMetrics:
    """Counters for one reminder run."""

    def __init__(self, log=None):
        self.log = log or logger
        self.reset()

    def reset(self):
        """Reset all metrics for new job run."""
        self.start_time = time.monotonic()
        self.summary = RunSummary()
        self.emails_sent = 0

    def record_window(self, window: LookaheadWindow):
        self.summary.processed_windows.append(window.tag)

    def record_success(self, user: ReminderUser, window: LookaheadWindow, events_notified: int):
        """One email sent; counts every event it covered."""
        self.emails_sent += 1
        self.summary.total_sent += events_notified

        self.log.info(
            "Reminder email delivered",
            user_id=user.id,
            recipient=user.email,
            reminder_type=window.tag,
            events_notified=events_notified,
            job_run="event_reminders",
        )

    def record_failure(self, user: ReminderUser, window: LookaheadWindow, result: DeliveryResult):
        """One failed (user, window) dispatch, however many events it held."""
        self.summary.total_failures += 1
        self.summary.failure_details.append(
            FailureDetail(
                user=user.email or "unknown",
                error=result.failure_message,
                attempts=result.total_attempts,
                reminder_type=window.tag,
            )
        )

        self.log.error(
            "Reminder email failed",
            user_id=user.id,
            recipient=user.email,
            reminder_type=window.tag,
            error=result.failure_message,
            attempts=result.total_attempts,
            job_run="event_reminders",
        )

    def duration_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000


class ReminderJob:
    """
    Batch orchestrator for reminder emails.

    Collaborators are injected so the job can run against fakes: the
    due-event repository, a factory for the mail transport (one transport
    per run), the clock, the retry sleeper and the logger.

    Only one run may be active per instance; a concurrent call raises
    ``ReminderRunInProgress`` instead of double-sending.
    """

    def __init__(
        self,
        repository: DueEventQuery | None = None,
        mailer_factory: Callable[[], MailTransport] | None = None,
        *,
        windows: Sequence[LookaheadWindow] = LOOKAHEAD_WINDOWS,
        max_attempts: int | None = None,
        backoff_base_seconds: float | None = None,
        max_concurrent_dispatches: int | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Sleeper = asyncio.sleep,
        logger=None,
    ):
        self.repository = repository or due_event_repository
        self.mailer_factory = mailer_factory or ResendMailer
        self.windows = tuple(windows)
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.REMINDER_MAX_ATTEMPTS
        )
        self.backoff_base_seconds = (
            backoff_base_seconds
            if backoff_base_seconds is not None
            else settings.backoff_base_seconds()
        )
        self.max_concurrent_dispatches = (
            max_concurrent_dispatches
            if max_concurrent_dispatches is not None
            else settings.REMINDER_MAX_CONCURRENT_DISPATCHES
        )
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.max_concurrent_dispatches < 1:
            raise ValueError(
                f"max_concurrent_dispatches must be at least 1, got {self.max_concurrent_dispatches}"
            )
        self.clock = clock or (lambda: datetime.now(UTC))
        self.sleep = sleep
        self.logger = logger or get_logger(__name__)
        self.last_run_time: datetime | None = None
        self._run_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    async def run_once(self) -> RunSummary:
        """
        Run every lookahead window once.

        Returns:
            RunSummary: counts, processed windows and per-dispatch failures

        Raises:
            ReminderRunInProgress: If this job is already running
            ReminderJobError: If a due-event query fails
        """
        if self._run_lock.locked():
            self.logger.warning("Reminder job already running, skipping this invocation")
            raise ReminderRunInProgress(
                "Reminder run already in progress", operation="run_once", recoverable=True
            )

        async with self._run_lock:
            metrics = ReminderRunMetrics(self.logger)
            now = self.clock()
            mailer = self.mailer_factory()

            self.logger.info(
                "Starting reminder job",
                windows=[w.tag for w in self.windows],
                max_attempts=self.max_attempts,
                max_concurrent_dispatches=self.max_concurrent_dispatches,
            )

            try:
                for window in self.windows:
                    await self._process_window(mailer, window, now, metrics)

            except ReminderJobError:
                raise
            except Exception as e:
                self.logger.error(
                    "Reminder job failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    processed_windows=metrics.summary.processed_windows,
                )
                raise ReminderJobError(f"Reminder job failed: {e}", operation="run_once") from e

            finally:
                await self._close_mailer(mailer)

            self.last_run_time = now
            summary = metrics.summary
            log_run_summary(
                self.logger,
                {**summary.to_dict(), "emails_sent": metrics.emails_sent},
                metrics.duration_ms(),
            )
            return summary

    async def _process_window(
        self,
        mailer: MailTransport,
        window: LookaheadWindow,
        now: datetime,
        metrics: ReminderRunMetrics,
    ) -> None:
        interval = window_for(window.days, now)
        self.logger.info(
            "Processing reminder window",
            reminder_type=window.tag,
            display_name=window.display_name,
            window_start=interval.start.isoformat(),
            window_end=interval.end.isoformat(),
        )

        # Query failures propagate and end the run
        users = await self.repository.find_due_users(interval, window.tag)
        self.logger.info("Found users with due events", reminder_type=window.tag, user_count=len(users))

        results = await self._dispatch_all(mailer, window, users)

        for user, result in zip(users, results, strict=True):
            if result.success:
                metrics.record_success(user, window, len(user.events))
            else:
                metrics.record_failure(user, window, result)

        metrics.record_window(window)

    async def _dispatch_all(
        self, mailer: MailTransport, window: LookaheadWindow, users: list[ReminderUser]
    ) -> list[DeliveryResult]:
        """Deliver to every user; results come back in ``users`` order."""
        if self.max_concurrent_dispatches == 1:
            return [await self._dispatch(mailer, window, user) for user in users]

        semaphore = asyncio.Semaphore(self.max_concurrent_dispatches)

        async def _with_semaphore(user: ReminderUser) -> DeliveryResult:
            async with semaphore:
                return await self._dispatch(mailer, window, user)

        # Every dispatch settles before the mailer can be closed
        results = await asyncio.gather(
            *(_with_semaphore(user) for user in users), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    async def _dispatch(
        self, mailer: MailTransport, window: LookaheadWindow, user: ReminderUser
    ) -> DeliveryResult:
        """Deliver to one user; an unexpected error becomes a failed result."""
        try:
            return await deliver(
                mailer,
                user,
                window,
                user.events,
                self.max_attempts,
                backoff_base_seconds=self.backoff_base_seconds,
                sleep=self.sleep,
                logger=self.logger,
            )
        except Exception as e:
            self.logger.error(
                "Reminder dispatch crashed",
                user_id=user.id,
                reminder_type=window.tag,
                error=str(e),
                error_type=type(e).__name__,
            )
            return DeliveryResult(
                success=False,
                state=DispatchState.FAILED_PERMANENTLY,
                error=normalize_error(e),
            )

    async def _close_mailer(self, mailer: MailTransport) -> None:
        close = getattr(mailer, "close", None)
        if close is None:
            return
        try:
            await close()
        except Exception as e:
            self.logger.warning("Failed to close mail transport", error=str(e))


# Singleton instance shared by the HTTP trigger and the worker
reminder_job = ReminderJob()


def get_reminder_job() -> ReminderJob:
    """FastAPI dependency returning the shared job instance."""
    return reminder_job


# Convenience function for background job scheduling
async def run_event_reminders() -> None:
    """Worker entry point: run one reminder pass with its own database pool."""
    await db_pool.initialize()
    try:
        await reminder_job.run_once()
    finally:
        await db_pool.close()
