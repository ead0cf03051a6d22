from datetime import date

from app.features.reminders.domain import WINDOWS_BY_TAG
from app.features.reminders.services.notification_renderer import (
    format_event_date,
    render_body,
    render_subject,
)
from tests.factories import make_event


def test_body_without_notes_has_no_notes_line_or_null():
    event = make_event(notes=None)

    html = render_body(WINDOWS_BY_TAG["1_WEEK"], [event])

    assert "Notes:" not in html
    assert "null" not in html.lower()
    assert "None" not in html


def test_body_with_blank_notes_has_no_notes_line():
    html = render_body(WINDOWS_BY_TAG["1_DAY"], [make_event(notes="   ")])

    assert "Notes:" not in html


def test_body_lists_name_date_category_and_notes():
    event = make_event(
        name="John's Birthday",
        base_date=date(2024, 3, 15),
        category="Birthday",
        notes="Best friend since college",
    )

    html = render_body(WINDOWS_BY_TAG["3_DAYS"], [event])

    assert "in 3 days" in html
    assert "John&#x27;s Birthday" in html
    assert "Date: March 15, 2024" in html
    assert "Category: Birthday" in html
    assert "Notes: Best friend since college" in html


def test_body_escapes_user_supplied_markup():
    html = render_body(WINDOWS_BY_TAG["1_DAY"], [make_event(name="<script>x</script>")])

    assert "<script>" not in html


def test_subject_uses_window_phrase():
    assert render_subject(WINDOWS_BY_TAG["2_WEEKS"]) == "Reminder: Your Event(s) in 2 weeks!"


def test_format_event_date_has_no_zero_padding():
    assert format_event_date(date(2024, 7, 4)) == "July 4, 2024"
