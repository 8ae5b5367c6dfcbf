"""Guild and role API JSON to model mappers."""

from __future__ import annotations

from typing import Any

from event_roles.sync.models import Guild, Role


def map_guild(data: dict[str, Any]) -> Guild:
    """Convert Discord API guild JSON to a Guild."""
    return Guild(id=int(data["id"]), name=data.get("name", ""), raw=data)


def map_role(data: dict[str, Any], guild_id: int | None = None) -> Role:
    """Convert Discord API role JSON to a Role.

    Args:
        data: Raw role object from Discord API
        guild_id: Parent guild ID
    """
    return Role(
        id=int(data["id"]),
        name=data["name"],
        guild_id=guild_id,
        mentionable=data.get("mentionable", False),
        permissions=str(data.get("permissions", "0")),
        raw=data,
    )
