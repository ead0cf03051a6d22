"""
Reminder delivery with bounded retries.

One call to ``deliver`` handles one (user, window) pair: it renders a single
email for all of the user's due events and tries to send it up to
``max_attempts`` times, sleeping ``base * 2**(attempt - 1)`` between tries.
The sleeper is injected so tests can run on a fake clock.

Dispatch moves PENDING -> RETRYING -> SUCCEEDED | FAILED_PERMANENTLY and
starts fresh on every run.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from app.features.reminders.domain import (
    DeliveryResult,
    DispatchState,
    LookaheadWindow,
    ReminderEvent,
    ReminderUser,
)
from app.features.reminders.services.mailer import MailTransport
from app.features.reminders.services.notification_renderer import render_body, render_subject
from app.infrastructure.observability.logging import get_logger, log_dispatch_attempt

Sleeper = Callable[[float], Awaitable[None]]

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_BASE_SECONDS = 1.0
NO_EMAIL_OR_EVENTS = "No email or events"
UNKNOWN_ERROR = "Unknown error"


def backoff_delay(attempt: int, base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS) -> float:
    """Delay after failed ``attempt`` (1-based): base, 2*base, 4*base, ..."""
    return base_seconds * (2 ** (attempt - 1))


def normalize_error(error: BaseException | str | None) -> str:
    """Reduce whatever a failed attempt produced to a plain message."""
    if isinstance(error, BaseException):
        return str(error) or UNKNOWN_ERROR
    return error or UNKNOWN_ERROR


async def deliver(
    mailer: MailTransport,
    user: ReminderUser,
    window: LookaheadWindow,
    due_events: Sequence[ReminderEvent],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    *,
    backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS,
    sleep: Sleeper = asyncio.sleep,
    logger=None,
) -> DeliveryResult:
    """
    Deliver one reminder email for ``due_events`` to ``user``.

    Returns:
        DeliveryResult: success with ``message_id``/``attempt``, a
        non-retryable ``reason`` when there is nothing to send, or the last
        ``error`` after ``max_attempts`` failures
    """
    logger = logger or get_logger(__name__)

    if not user.email or not due_events:
        logger.warning(
            "Skipping reminder email",
            user_id=user.id,
            has_email=bool(user.email),
            event_count=len(due_events),
            reminder_type=window.tag,
        )
        return DeliveryResult(
            success=False, state=DispatchState.FAILED_PERMANENTLY, reason=NO_EMAIL_OR_EVENTS
        )

    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    subject = render_subject(window)
    html = render_body(window, due_events)
    state = DispatchState.PENDING
    last_error = UNKNOWN_ERROR

    for attempt in range(1, max_attempts + 1):
        try:
            result = await mailer.send(user.email, subject, html)
            if result.ok:
                log_dispatch_attempt(logger, user.email, window.tag, attempt, max_attempts)
                return DeliveryResult(
                    success=True,
                    state=DispatchState.SUCCEEDED,
                    message_id=result.message_id,
                    attempt=attempt,
                    total_attempts=attempt,
                )
            # Accepted by the transport but rejected by the provider
            last_error = normalize_error(result.error)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            last_error = normalize_error(e)

        log_dispatch_attempt(
            logger, user.email, window.tag, attempt, max_attempts, error=last_error
        )

        if attempt == max_attempts:
            break

        state = DispatchState.RETRYING
        delay = backoff_delay(attempt, backoff_base_seconds)
        logger.debug(
            "Retrying reminder email",
            recipient=user.email,
            reminder_type=window.tag,
            state=state.value,
            backoff_seconds=delay,
        )
        await sleep(delay)

    return DeliveryResult(
        success=False,
        state=DispatchState.FAILED_PERMANENTLY,
        error=last_error,
        total_attempts=max_attempts,
    )
