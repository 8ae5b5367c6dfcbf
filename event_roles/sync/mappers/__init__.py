"""Mappers for converting Discord API JSON to in-memory models."""

from event_roles.sync.mappers.event import map_recurrence_rule, map_scheduled_event
from event_roles.sync.mappers.guild import map_guild, map_role
from event_roles.sync.mappers.member import map_member, map_subscriber, map_user

__all__ = [
    "map_guild",
    "map_member",
    "map_recurrence_rule",
    "map_role",
    "map_scheduled_event",
    "map_subscriber",
    "map_user",
]
