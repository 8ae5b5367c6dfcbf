"""Shared fixtures for event-roles tests."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from event_roles.db.models import ScheduledEventRecord
from event_roles.sync.assignment_queue import RoleAssignmentQueue
from event_roles.sync.gateway import DiscordGateway
from event_roles.sync.models import (
    Guild,
    Member,
    RecurrenceRule,
    Role,
    ScheduledEvent,
    Subscriber,
    User,
)

GUILD_ID = 123456789
ROLE_ID = 900000001


class FakeStore:
    """In-memory stand-in for ScheduledEventStore.

    Behaves like the ON CONFLICT DO NOTHING insert: a second create for
    the same event affects zero rows.
    """

    def __init__(self) -> None:
        self.records: dict[int, ScheduledEventRecord] = {}
        self.create_calls: list[tuple[int, int, int | None]] = []

    async def find(self, event_id: int) -> ScheduledEventRecord | None:
        return self.records.get(event_id)

    async def create(
        self, event_id: int, role_id: int, guild_id: int | None = None
    ) -> int:
        self.create_calls.append((event_id, role_id, guild_id))
        if event_id in self.records:
            return 0
        self.records[event_id] = ScheduledEventRecord(
            event_id=event_id, role_id=role_id, guild_id=guild_id
        )
        return 1


class CommitThenFailStore(FakeStore):
    """Store whose create commits the row, then loses the connection."""

    async def create(
        self, event_id: int, role_id: int, guild_id: int | None = None
    ) -> int:
        await super().create(event_id, role_id, guild_id)
        raise ConnectionResetError("connection reset after commit")


def make_event(
    event_id: int = 1001,
    name: str = "Board Game Night",
    guild: Guild | None = None,
    start: datetime | None = datetime(2025, 3, 3, 18, 0, tzinfo=timezone.utc),
    frequency: int | None = None,
) -> ScheduledEvent:
    """Build a ScheduledEvent; pass frequency to make it recurring."""
    return ScheduledEvent(
        id=event_id,
        name=name,
        guild_id=guild.id if guild else None,
        scheduled_start_time=start,
        recurrence_rule=(
            RecurrenceRule(frequency=frequency) if frequency is not None else None
        ),
        guild=guild,
    )


def make_subscriber(user_id: int, role_ids: set[int] | None = None) -> Subscriber:
    user = User(id=user_id, username=f"user{user_id}")
    member = Member(user=user, role_ids=frozenset(role_ids or ()))
    return Subscriber(user=user, member=member)


@pytest.fixture
def guild() -> Guild:
    return Guild(id=GUILD_ID, name="ACM")


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def gateway() -> AsyncMock:
    gw = AsyncMock(spec=DiscordGateway)
    gw.create_role.return_value = Role(
        id=ROLE_ID, name="Board Game Night [Mar-03 18:00]", guild_id=GUILD_ID
    )
    return gw


@pytest.fixture
def queue() -> MagicMock:
    q = MagicMock(spec=RoleAssignmentQueue)
    q.queue_assignment.return_value = True
    return q
