"""Scheduled event → custom role link ORM model.

One row per Discord scheduled event that has been given its own role.

Design principles:
- event_id (snowflake) is the primary key, so the database rejects a
  second row for the same event no matter which process writes it
- Rows are write-once: nothing in this project updates role_id
- No FK to any other table; the event and the role live in Discord
"""

from datetime import datetime

from sqlalchemy import BigInteger, Index
from sqlalchemy.orm import Mapped, mapped_column

from event_roles.db.base import Base, TZDateTime
from event_roles.utils.time import utcnow


class ScheduledEventRecord(Base):
    """
    Link between a scheduled event and the role created for it.

    Lifecycle:
    - Inserted the first time an event is processed successfully
    - Never updated, never deleted by this project
    - If the role is deleted in Discord the row stays; lookups then fail
      instead of a replacement role being created
    """

    __tablename__ = "scheduled_event_roles"

    # Discord scheduled event snowflake
    event_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)

    # Discord role snowflake created for this event
    role_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Owning guild. Informational, for "all events in guild" queries.
    guild_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TZDateTime, nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("ix_scheduled_event_roles_guild_id", "guild_id"),
        Index("ix_scheduled_event_roles_role_id", "role_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ScheduledEventRecord(event_id={self.event_id}, "
            f"role_id={self.role_id})>"
        )
