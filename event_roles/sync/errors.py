"""Failures raised while giving a scheduled event its role.

Public service operations catch these and turn them into a None result
plus a log line. ``ScheduledEventService.try_resolve`` lets them through.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from event_roles.sync.logger import describe_event

if TYPE_CHECKING:
    from event_roles.sync.models import ScheduledEvent


class EventRoleError(Exception):
    """Base class for per-event failures."""

    def __init__(self, event: "ScheduledEvent", message: str) -> None:
        self.event = event
        self.message = message
        super().__init__(message)


class MissingGuildError(EventRoleError):
    """The event has no resolvable guild, so it cannot carry a role."""

    def __init__(self, event: "ScheduledEvent") -> None:
        super().__init__(
            event,
            f"Failed to find guild from scheduled event "
            f"{describe_event(event.name, event.id)}. "
            "Cannot proceed with creating scheduled event role.",
        )


class RoleCreationError(EventRoleError):
    """Discord refused to create the role or returned nothing."""

    def __init__(self, event: "ScheduledEvent", reason: str) -> None:
        self.reason = reason
        super().__init__(
            event,
            f"Failed to create role associated with scheduled event "
            f"{describe_event(event.name, event.id)}: {reason}",
        )


class PersistenceError(EventRoleError):
    """The event record write affected zero rows.

    The role exists in Discord but is not linked to the event.
    """

    def __init__(self, event: "ScheduledEvent", role_id: int) -> None:
        self.role_id = role_id
        super().__init__(
            event,
            f"Failed to write scheduled event "
            f"{describe_event(event.name, event.id)} into the database "
            f"(role {role_id} is unlinked).",
        )


class LookupFailure(EventRoleError):
    """The event's role or a subscriber's member could not be fetched."""

    def __init__(self, event: "ScheduledEvent", target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(
            event,
            f"Failed to fetch {target} for scheduled event "
            f"{describe_event(event.name, event.id)}: {reason}",
        )
