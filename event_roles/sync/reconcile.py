"""Startup reconciliation of scheduled event roles.

Runs once when the process starts. The assignment queue does not survive
restarts, so every subscriber who should hold an event role but does not
(including subscribers of events created while the process was down) is
found again here by comparing subscribers with role holders directly.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.markup import escape

from event_roles.sync.assignment_queue import RoleAssignmentQueue
from event_roles.sync.gateway import DiscordGateway
from event_roles.sync.logger import describe_event, logger
from event_roles.sync.models import Member, ScheduledEvent, Subscriber
from event_roles.sync.service import ScheduledEventService


@dataclass
class ReconcileResult:
    """Result of reconciling a guild."""

    events_seen: int = 0
    events_resolved: int = 0
    events_failed: int = 0
    subscribers_checked: int = 0
    members_skipped: int = 0
    assignments_queued: int = 0


async def reconcile_guild(
    gateway: DiscordGateway,
    service: ScheduledEventService,
    queue: RoleAssignmentQueue,
    guild_id: int,
    *,
    assign: bool = True,
) -> ReconcileResult:
    """Resolve every scheduled event of a guild and queue missing roles.

    Failures are logged and skipped per event and per member; nothing
    here raises.

    Args:
        gateway: Discord data source
        service: Scheduled event role service
        queue: Queue that receives missing assignments
        guild_id: The configured guild
        assign: If False, only log the assignments that would be queued

    Returns:
        Counters for the pass
    """
    result = ReconcileResult()

    try:
        guild = await gateway.fetch_guild(guild_id)
        events = await gateway.fetch_scheduled_events(guild)
    except Exception:
        logger.exception(f"Failed to fetch scheduled events of guild {guild_id}.")
        return result

    logger.guild_start(guild.id, guild.name)
    result.events_seen = len(events)

    resolved = await service.resolve_batch(events)

    for event in resolved:
        if event is None:
            result.events_failed += 1
            logger.error(
                "Failed to process scheduled event during initialization. "
                "Skipping this event."
            )
            continue

        result.events_resolved += 1
        try:
            await reconcile_event(gateway, service, queue, event, result, assign=assign)
        except Exception:
            logger.exception(
                f"Failed to reconcile scheduled event "
                f"{describe_event(event.name, event.id)}. Skipping this event."
            )

    return result


async def reconcile_event(
    gateway: DiscordGateway,
    service: ScheduledEventService,
    queue: RoleAssignmentQueue,
    event: ScheduledEvent,
    result: ReconcileResult,
    *,
    assign: bool = True,
) -> int:
    """Queue the event role for every subscriber who lacks it.

    Returns:
        Number of assignments queued (or that would be queued)
    """
    role_id = await service.lookup_role_id(event.id)
    if role_id is None:
        logger.error(
            f"Failed to find role ID for scheduled event "
            f"{describe_event(event.name, event.id)}. Skipping this event."
        )
        return 0

    subscribers = await gateway.fetch_subscribers(event)
    queued = 0

    with logger.block(escape(event.name)) as block:
        block.field("event ID", event.id)
        block.field("role ID", role_id, color="cyan")
        block.field("subscribers", len(subscribers))

        for subscriber in subscribers:
            result.subscribers_checked += 1

            member = await _refresh_member(gateway, event, subscriber)
            if member is None:
                result.members_skipped += 1
                continue

            if member.has_role(role_id):
                continue

            if not assign:
                logger.info(
                    f"Would assign role {role_id} to {member.user.display_name} "
                    f"for scheduled event {describe_event(event.name, event.id)}."
                )
                queued += 1
            elif queue.queue_assignment(event, member.user):
                queued += 1

        result.assignments_queued += queued
        block.result(f"queued {queued:,} assignment(s)")

    return queued


async def _refresh_member(
    gateway: DiscordGateway,
    event: ScheduledEvent,
    subscriber: Subscriber,
) -> Member | None:
    """Fetch the subscriber's current member state, or None to skip them."""
    guild = event.guild
    if subscriber.member is None or guild is None:
        logger.error(
            f"Failed to find member for user {subscriber.user.id} in guild "
            f"{guild.name if guild else event.guild_id}. Skipping this member."
        )
        return None

    try:
        return await gateway.fetch_member(guild.id, subscriber.user.id)
    except Exception as e:
        logger.error(
            f"Failed to fetch member {subscriber.user.id} for scheduled event "
            f"{describe_event(event.name, event.id)}: {e}. Skipping this member."
        )
        return None
