"""User, member and subscriber API JSON to model mappers."""

from __future__ import annotations

from typing import Any

from event_roles.sync.models import Member, Subscriber, User
from event_roles.utils.ids import parse_snowflake_list


def map_user(data: dict[str, Any]) -> User:
    """Convert Discord API user JSON to a User."""
    return User(
        id=int(data["id"]),
        username=data.get("username", ""),
        global_name=data.get("global_name"),
        bot=data.get("bot", False),
    )


def map_member(data: dict[str, Any], user: User | None = None) -> Member:
    """Convert Discord API guild member JSON to a Member.

    Args:
        data: Raw guild member object
        user: User to attach when the member payload has no ``user`` key
            (as in scheduled event subscriber responses)
    """
    if user is None:
        user = map_user(data["user"])
    return Member(
        user=user,
        role_ids=parse_snowflake_list(data.get("roles")),
    )


def map_subscriber(data: dict[str, Any]) -> Subscriber:
    """Convert a scheduled event user object to a Subscriber."""
    user = map_user(data["user"])
    member_data = data.get("member")
    member = map_member(member_data, user=user) if member_data else None
    return Subscriber(user=user, member=member)
