"""
Service layer for the event reminder feature.
"""

from .dispatcher import backoff_delay, deliver, normalize_error
from .mailer import MailTransport, MailTransportError, ResendMailer
from .notification_renderer import render_body, render_subject

__all__ = [
    "backoff_delay",
    "deliver",
    "normalize_error",
    "MailTransport",
    "MailTransportError",
    "ResendMailer",
    "render_body",
    "render_subject",
]
