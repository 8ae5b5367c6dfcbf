"""Scheduled event role service.

Gives each scheduled event exactly one mentionable role and one database
record linking the two.

Idempotency rests on the record lookup: it is the first thing
``try_resolve`` does, before any role is created. Once a record exists
for an event, resolving it again only reads the record. Records are never
updated, so deleting an event's role in Discord does not make this
service create a replacement; ``lookup_role`` reports the missing role
instead.

Events are processed one at a time. Two overlapping resolves of the same
new event could both miss the record and create two roles; the primary
key on the record table then lets only one of them link its role.
"""

from __future__ import annotations

from collections.abc import Mapping

from event_roles.sync.assignment_queue import RoleAssignmentQueue
from event_roles.sync.client import DiscordAPIError
from event_roles.sync.errors import (
    EventRoleError,
    LookupFailure,
    MissingGuildError,
    PersistenceError,
    RoleCreationError,
)
from event_roles.sync.gateway import DiscordGateway
from event_roles.sync.logger import describe_event, logger
from event_roles.sync.models import Guild, Role, ScheduledEvent
from event_roles.sync.naming import build_role_name
from event_roles.sync.store import ScheduledEventStore


class ScheduledEventService:
    """Creates and looks up the custom role of scheduled events."""

    def __init__(
        self,
        gateway: DiscordGateway,
        store: ScheduledEventStore,
        queue: RoleAssignmentQueue,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.queue = queue

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    async def try_resolve(self, event: ScheduledEvent) -> ScheduledEvent:
        """Make sure ``event`` has a role and a record.

        Sets ``event.custom_role_id`` and returns the same event.

        Raises:
            MissingGuildError: The event has no guild.
            RoleCreationError: Discord did not create the role.
            PersistenceError: The record write affected no rows.
        """
        if event.guild is None:
            raise MissingGuildError(event)

        record = await self.store.find(event.id)
        if record is not None:
            logger.info(
                f"Scheduled event {describe_event(event.name, event.id)} already "
                "exists in the database. Skipping role creation."
            )
            event.custom_role_id = record.role_id
            return event

        role = await self._create_custom_role(event, event.guild)
        logger.info(
            f"Created role {role.name} associated with scheduled event "
            f"{describe_event(event.name, event.id)}."
        )

        await self._create_record(event, event.guild, role)
        logger.info(
            f"Wrote scheduled event {describe_event(event.name, event.id)} into "
            "the database. Marked it ready for role assignment."
        )

        self.queue.process_queues()
        event.custom_role_id = role.id
        return event

    async def resolve(self, event: ScheduledEvent) -> ScheduledEvent | None:
        """Like try_resolve, but logs failures and returns None instead."""
        try:
            return await self.try_resolve(event)
        except EventRoleError as e:
            logger.error(str(e))
        except Exception:
            logger.exception(
                f"Unexpected error processing scheduled event "
                f"{describe_event(event.name, event.id)}."
            )
        return None

    async def resolve_batch(
        self, events: Mapping[int, ScheduledEvent]
    ) -> list[ScheduledEvent | None]:
        """Resolve events one at a time, in iteration order.

        Returns:
            One entry per input event, None where the event failed.
        """
        results: list[ScheduledEvent | None] = []
        for event in events.values():
            try:
                results.append(await self.resolve(event))
            except Exception:
                logger.exception(
                    f"Failed to process scheduled event "
                    f"{describe_event(event.name, event.id)} in batch."
                )
                results.append(None)
        return results

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    async def lookup_role_id(self, event_id: int) -> int | None:
        """Role ID recorded for an event, or None."""
        try:
            record = await self.store.find(event_id)
        except Exception:
            logger.exception(f"Failed to read record of scheduled event {event_id}.")
            return None
        return record.role_id if record else None

    async def lookup_role(self, event: ScheduledEvent) -> Role | None:
        """Fetch the role recorded for ``event`` from its guild.

        Returns None if the event has no guild or record, or if the role
        can no longer be fetched (e.g. it was deleted in Discord).
        """
        if event.guild is None:
            logger.error(str(MissingGuildError(event)))
            return None

        role_id = await self.lookup_role_id(event.id)
        if role_id is None:
            return None

        try:
            role = await self.gateway.fetch_role(event.guild.id, role_id)
        except Exception as e:
            logger.error(str(LookupFailure(event, f"role {role_id}", str(e))))
            return None

        if role is None:
            logger.error(
                str(LookupFailure(event, f"role {role_id}", "role no longer exists"))
            )
        return role

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    async def _create_custom_role(self, event: ScheduledEvent, guild: Guild) -> Role:
        try:
            role = await self.gateway.create_role(
                guild,
                build_role_name(event),
                mentionable=True,
                reason=f"Role for the scheduled event {event.name}.",
                permissions="0",
            )
        except DiscordAPIError as e:
            raise RoleCreationError(event, e.message) from e

        if role is None:
            raise RoleCreationError(event, "Discord returned no role")
        return role

    async def _create_record(
        self, event: ScheduledEvent, guild: Guild, role: Role
    ) -> None:
        """Persist the event → role link.

        On failure the just-created role is deleted again, but only when the
        database confirms it is not the linked role. A write that raised may
        still have committed, so the record is read back first.
        """
        try:
            affected = await self.store.create(event.id, role.id, guild.id)
        except Exception as e:
            try:
                record = await self.store.find(event.id)
            except Exception:
                logger.exception(
                    f"Failed to re-read record of scheduled event "
                    f"{describe_event(event.name, event.id)}. Role "
                    f"{role.name}[{role.id}] may be unlinked; keeping it."
                )
                raise PersistenceError(event, role.id) from e

            if record is not None and record.role_id == role.id:
                logger.warning(
                    f"Record write for scheduled event "
                    f"{describe_event(event.name, event.id)} raised after "
                    f"committing; role {role.id} is linked."
                )
                return

            await self._discard_orphan_role(event, guild, role)
            raise PersistenceError(event, role.id) from e

        if affected > 0:
            return

        await self._discard_orphan_role(event, guild, role)
        raise PersistenceError(event, role.id)

    async def _discard_orphan_role(
        self, event: ScheduledEvent, guild: Guild, role: Role
    ) -> None:
        try:
            await self.gateway.delete_role(
                guild.id,
                role.id,
                reason=f"Unlinked role for the scheduled event {event.name}.",
            )
        except Exception as e:
            logger.error(
                f"Failed to delete unlinked role {role.name}[{role.id}] of "
                f"scheduled event {describe_event(event.name, event.id)}; "
                f"remove it manually: {e}"
            )
            return
        logger.warning(
            f"Deleted unlinked role {role.name}[{role.id}] of scheduled event "
            f"{describe_event(event.name, event.id)}."
        )
