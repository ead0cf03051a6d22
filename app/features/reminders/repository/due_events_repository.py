"""
Due-event lookup for the reminder pipeline.

The pipeline needs exactly one capability from storage: every user owning at
least one event whose stored date falls inside a window and whose reminder
tags include a given tag, with only those matching events attached.

Matching uses the stored ``date`` column, not expanded recurrences. The whole
result set for one (window, tag) pair is loaded in memory; daily reminder
volume is small, but this will need paging if it ever is not.
"""

from collections.abc import Sequence
from datetime import date, datetime
from typing import Any, Protocol

from app.db.helpers import DatabaseError, fetch_all
from app.features.reminders.domain import DateWindow, Recurrence, ReminderEvent, ReminderUser
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DueEventRepositoryError(DatabaseError):
    """Raised when the due-event query cannot be answered."""


class DueEventQuery(Protocol):
    async def find_due_users(self, window: DateWindow, tag: str) -> list[ReminderUser]: ...


class PostgresDueEventRepository:
    """Reads due events from the web app's ``User`` / ``DateEvent`` tables."""

    DUE_EVENTS_QUERY = """
        SELECT
            u.id AS user_id,
            u.email AS user_email,
            u.name AS user_name,
            e.id AS event_id,
            e.name AS event_name,
            e.date AS event_date,
            e.category AS event_category,
            e.color AS event_color,
            e.recurrence AS event_recurrence,
            e.notes AS event_notes,
            e.reminders AS event_reminders
        FROM "DateEvent" e
        JOIN "User" u ON u.id = e."userId"
        WHERE e.date >= %s
          AND e.date <= %s
          AND %s = ANY(e.reminders)
        ORDER BY u.id, e.date, e.name
    """

    @staticmethod
    def _to_date(value: Any) -> date:
        if isinstance(value, datetime):
            return value.date()
        return value

    @classmethod
    def _row_to_event(cls, row: dict[str, Any]) -> ReminderEvent:
        return ReminderEvent(
            id=str(row["event_id"]),
            owner_id=str(row["user_id"]),
            name=row["event_name"],
            base_date=cls._to_date(row["event_date"]),
            recurrence=Recurrence.parse(row.get("event_recurrence")),
            category=row.get("event_category") or "Other",
            notes=row.get("event_notes") or None,
            color=row.get("event_color"),
            reminder_tags=frozenset(row.get("event_reminders") or ()),
        )

    @classmethod
    def group_rows(cls, rows: Sequence[dict[str, Any]]) -> list[ReminderUser]:
        """Fold joined rows into users carrying their matching events, in row order."""
        users: dict[str, dict[str, Any]] = {}
        for row in rows:
            user_id = str(row["user_id"])
            entry = users.setdefault(
                user_id,
                {"email": row.get("user_email"), "name": row.get("user_name"), "events": []},
            )
            entry["events"].append(cls._row_to_event(row))

        return [
            ReminderUser(
                id=user_id,
                email=entry["email"],
                display_name=entry["name"],
                events=tuple(entry["events"]),
            )
            for user_id, entry in users.items()
        ]

    async def find_due_users(self, window: DateWindow, tag: str) -> list[ReminderUser]:
        """
        Users with events stored inside ``window`` and tagged ``tag``.

        Raises:
            DueEventRepositoryError: If the query fails
        """
        try:
            rows = await fetch_all(self.DUE_EVENTS_QUERY, (window.start, window.end, tag))
        except DatabaseError as e:
            logger.error(
                "Due event query failed",
                reminder_type=tag,
                window_start=window.start.isoformat(),
                error=str(e),
            )
            raise DueEventRepositoryError(
                f"Failed to load due events for {tag}: {e}", operation="find_due_users"
            ) from e

        users = self.group_rows(rows)
        logger.debug(
            "Due events loaded",
            reminder_type=tag,
            window_start=window.start.isoformat(),
            user_count=len(users),
            event_count=len(rows),
        )
        return users


due_event_repository = PostgresDueEventRepository()
