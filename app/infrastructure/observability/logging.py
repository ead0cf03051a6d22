"""
Structured logging setup for the DateKeeper reminder service.
Provides JSON-formatted logs with consistent fields for production monitoring.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging with JSON output for production.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            _add_service_context,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def _add_service_context(logger, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag every entry with the emitting service."""
    event_dict.setdefault("service", "datekeeper-reminders")
    return event_dict


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


# Convenience functions for common log patterns
def log_dispatch_attempt(
    logger,
    recipient: str | None,
    window_tag: str,
    attempt: int,
    max_attempts: int,
    error: str = None,
):
    """Log one reminder delivery attempt with consistent fields."""
    log_data = {
        "recipient": recipient,
        "reminder_type": window_tag,
        "attempt": attempt,
        "max_attempts": max_attempts,
        "log_type": "reminder_dispatch_attempt",
    }

    if error:
        log_data["error"] = error
        logger.warning("Reminder email attempt failed", **log_data)
    else:
        logger.info("Reminder email sent", **log_data)


def log_run_summary(logger, summary: dict[str, Any], duration_ms: float):
    """Log the outcome of a reminder run with consistent fields."""
    log_data = {
        "duration_ms": round(duration_ms, 2),
        "log_type": "reminder_run_completed",
        **summary,
    }

    if summary.get("totalFailures"):
        logger.warning("Reminder run completed with failures", **log_data)
    else:
        logger.info("Reminder run completed", **log_data)
