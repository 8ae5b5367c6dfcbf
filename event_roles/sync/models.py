"""In-memory Discord entities used by the event role pipeline.

These are read-only views of API payloads. The only field this project
ever sets after mapping is ``ScheduledEvent.custom_role_id``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any


class Frequency(IntEnum):
    """Recurrence frequency, using Discord's numbering."""

    YEARLY = 0
    MONTHLY = 1
    WEEKLY = 2
    DAILY = 3


@dataclass
class Guild:
    id: int
    name: str
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class User:
    id: int
    username: str
    global_name: str | None = None
    bot: bool = False

    @property
    def display_name(self) -> str:
        return self.global_name or self.username


@dataclass
class Member:
    """A guild member and the roles they currently hold."""

    user: User
    role_ids: frozenset[int] = frozenset()

    def has_role(self, role_id: int) -> bool:
        return role_id in self.role_ids


@dataclass
class Subscriber:
    """A user subscribed to a scheduled event.

    ``member`` is None when Discord did not return member data (for
    example the user has since left the guild).
    """

    user: User
    member: Member | None = None


@dataclass
class Role:
    id: int
    name: str
    guild_id: int | None = None
    mentionable: bool = False
    permissions: str = "0"
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class RecurrenceRule:
    frequency: int
    raw: dict[str, Any] = field(default_factory=dict, repr=False)


@dataclass
class ScheduledEvent:
    """A guild scheduled event.

    ``guild`` is the resolved owning guild; None means the event cannot
    carry a role. ``custom_role_id`` is filled in once the event has been
    resolved against the database.
    """

    id: int
    name: str
    guild_id: int | None = None
    scheduled_start_time: datetime | None = None
    recurrence_rule: RecurrenceRule | None = None
    guild: Guild | None = None
    custom_role_id: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_rule is not None
