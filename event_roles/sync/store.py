"""Scheduled event record persistence.

Thin, session-per-call wrapper around the scheduled event repository, so
the service can be handed a store instead of a database session.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from event_roles.db.models import ScheduledEventRecord
from event_roles.db.repositories import find_scheduled_event, insert_scheduled_event


class ScheduledEventStore:
    """Reads and writes ScheduledEventRecord rows keyed by event ID."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def find(self, event_id: int) -> ScheduledEventRecord | None:
        """Get the record for an event, or None if it was never processed."""
        async with self.session_factory() as session:
            return await find_scheduled_event(session, event_id)

    async def create(
        self, event_id: int, role_id: int, guild_id: int | None = None
    ) -> int:
        """Insert the record for an event and commit.

        Returns:
            Affected rows; 0 means a record already existed.
        """
        async with self.session_factory() as session:
            affected = await insert_scheduled_event(
                session, event_id, role_id, guild_id
            )
            await session.commit()
            return affected
