"""Scheduled event record repository for database operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from event_roles.db.models import ScheduledEventRecord


async def find_scheduled_event(
    session: AsyncSession, event_id: int
) -> ScheduledEventRecord | None:
    """Get the record for a scheduled event, or None if not exists."""
    result = await session.execute(
        select(ScheduledEventRecord).where(ScheduledEventRecord.event_id == event_id)
    )
    return result.scalar_one_or_none()


async def insert_scheduled_event(
    session: AsyncSession,
    event_id: int,
    role_id: int,
    guild_id: int | None = None,
) -> int:
    """Insert a scheduled event record if none exists for event_id.

    Existing rows are never touched (ON CONFLICT DO NOTHING), so a row that
    lost a race to another writer reports zero affected rows.

    Args:
        session: Database session
        event_id: Scheduled event snowflake
        role_id: Role snowflake created for the event
        guild_id: Owning guild snowflake

    Returns:
        Number of rows inserted (0 or 1)
    """
    stmt = (
        pg_insert(ScheduledEventRecord)
        .values(event_id=event_id, role_id=role_id, guild_id=guild_id)
        .on_conflict_do_nothing(index_elements=["event_id"])
    )
    result = await session.execute(stmt)
    return result.rowcount or 0
