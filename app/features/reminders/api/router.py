"""
Cron trigger for the daily reminder run.

The scheduler calls ``POST /api/cron/reminders`` with
``Authorization: Bearer <CRON_SECRET>``. Anything else is rejected before the
job is touched.
"""

import hmac

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from app.config import settings
from app.features.reminders.jobs.reminder_job import (
    RUN_COMPLETED_MESSAGE,
    ReminderJob,
    ReminderRunInProgress,
    get_reminder_job,
)
from app.infrastructure.observability.logging import get_logger
from app.models.api.reminder_response import ErrorResponse, ReminderRunResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def is_authorized(authorization: str | None, secret: str | None) -> bool:
    """Constant-time bearer check; an unset secret authorizes nothing."""
    if not secret or not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {secret}".encode())


def _error(message: str) -> dict:
    return ErrorResponse(error=message).model_dump()


@router.post(
    "/reminders",
    responses={
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def trigger_reminders(
    authorization: str | None = Header(default=None),
    job: ReminderJob = Depends(get_reminder_job),
):
    if not is_authorized(authorization, settings.CRON_SECRET):
        logger.warning("Rejected reminder trigger", has_header=authorization is not None)
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content=_error("Unauthorized")
        )

    try:
        summary = await job.run_once()
    except ReminderRunInProgress:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=_error("Reminder run already in progress"),
        )
    except Exception as e:
        logger.error("Reminder cron run failed", error=str(e), error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error("Internal server error"),
        )

    response = ReminderRunResponse.from_summary(summary, RUN_COMPLETED_MESSAGE)
    return JSONResponse(status_code=status.HTTP_200_OK, content=response.to_payload())
