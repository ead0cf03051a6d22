"""
Persistence adapters for the event reminder feature.
"""

from .due_events_repository import (
    DueEventQuery,
    DueEventRepositoryError,
    PostgresDueEventRepository,
    due_event_repository,
)

__all__ = [
    "DueEventQuery",
    "DueEventRepositoryError",
    "PostgresDueEventRepository",
    "due_event_repository",
]
