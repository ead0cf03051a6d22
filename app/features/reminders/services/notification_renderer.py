"""
Reminder email rendering.
"""

from collections.abc import Sequence
from datetime import date
from html import escape

from app.features.reminders.domain import LookaheadWindow, ReminderEvent


def format_event_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def render_subject(window: LookaheadWindow) -> str:
    return f"Reminder: Your Event(s) {window.display_name}!"


def _render_event(event: ReminderEvent) -> str:
    lines = [
        f"<strong>{escape(event.name)}</strong><br>",
        f"Date: {format_event_date(event.base_date)}<br>",
        f"Category: {escape(event.category)}<br>",
    ]
    # Blank notes get no line at all
    if event.notes and event.notes.strip():
        lines.append(f"Notes: {escape(event.notes)}")
    return "<li>" + "".join(lines) + "</li>"


def render_body(window: LookaheadWindow, events: Sequence[ReminderEvent]) -> str:
    """HTML body listing every due event for one window."""
    items = "".join(_render_event(event) for event in events)
    return (
        "<h1>Upcoming Event Reminder</h1>"
        f"<p>These events are happening <strong>{escape(window.display_name)}</strong>:</p>"
        f"<ul>{items}</ul>"
        "<p>Don't forget to prepare for your special day!</p>"
    )
