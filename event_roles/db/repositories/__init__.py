"""Repository layer for database operations.

Provides clean separation between data access and business logic.
"""

from event_roles.db.repositories.scheduled_event_repository import (
    find_scheduled_event,
    insert_scheduled_event,
)

__all__ = [
    "find_scheduled_event",
    "insert_scheduled_event",
]
