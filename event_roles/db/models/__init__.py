"""event_roles Database Models.

All models use SQLAlchemy 2.0 syntax with PostgreSQL dialect.
"""

from event_roles.db.base import Base
from event_roles.db.models.scheduled_event_record import ScheduledEventRecord

__all__ = [
    "Base",
    "ScheduledEventRecord",
]
