"""Scheduled event API JSON to model mapper."""

from __future__ import annotations

from typing import Any

from event_roles.sync.models import Guild, RecurrenceRule, ScheduledEvent
from event_roles.utils.ids import parse_snowflake
from event_roles.utils.time import parse_iso8601


def map_recurrence_rule(data: dict[str, Any] | None) -> RecurrenceRule | None:
    """Convert a Discord recurrence_rule object, or None if absent."""
    if not data:
        return None
    return RecurrenceRule(
        frequency=int(data.get("frequency", -1)),
        raw=data,
    )


def map_scheduled_event(
    data: dict[str, Any], guild: Guild | None = None
) -> ScheduledEvent:
    """Convert Discord API scheduled event JSON to a ScheduledEvent.

    Args:
        data: Raw scheduled event object from Discord API
        guild: The guild the event was fetched from. Only attached when
            the payload's guild_id matches it.

    Returns:
        ScheduledEvent with ``custom_role_id`` unset
    """
    guild_id = parse_snowflake(data.get("guild_id"))
    owner = guild if guild is not None and guild.id == guild_id else None

    return ScheduledEvent(
        id=int(data["id"]),
        name=data["name"],
        guild_id=guild_id,
        scheduled_start_time=parse_iso8601(data.get("scheduled_start_time")),
        recurrence_rule=map_recurrence_rule(data.get("recurrence_rule")),
        guild=owner,
        raw=data,
    )
