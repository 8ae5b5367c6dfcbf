"""Role assignment queue.

Collects "grant this event's role to this user" intents and grants them
from one background worker task. Producers never wait on the worker:
``queue_assignment`` and ``process_queues`` both return immediately.

The worker stays idle until the first ``process_queues()`` call, which is
the signal that event records exist and assignments can be granted.
Intents whose event record is still missing are held back and put back
on the queue by the next ``process_queues()``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from event_roles.sync.gateway import DiscordGateway
from event_roles.sync.logger import describe_event, logger
from event_roles.sync.models import ScheduledEvent, User
from event_roles.sync.store import ScheduledEventStore


@dataclass
class RoleAssignment:
    """A subscriber of ``event`` who does not hold its role yet."""

    event: ScheduledEvent
    user: User


class RoleAssignmentQueue:
    """Bounded in-process queue of role assignments with one worker."""

    def __init__(
        self,
        gateway: DiscordGateway,
        store: ScheduledEventStore,
        maxsize: int = 1000,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self._queue: asyncio.Queue[RoleAssignment] = asyncio.Queue(maxsize)
        self._ready = asyncio.Event()
        self._held: list[RoleAssignment] = []
        self._worker: asyncio.Task | None = None
        # Stats
        self.granted = 0
        self.failed = 0
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def held(self) -> int:
        return len(self._held)

    # ------------------------------------------------------
    # Public API
    # ------------------------------------------------------

    def queue_assignment(self, event: ScheduledEvent, user: User) -> bool:
        """Enqueue an assignment without waiting.

        Returns:
            False if the buffer was full and the assignment was dropped.
        """
        return self._put(RoleAssignment(event=event, user=user))

    def process_queues(self) -> None:
        """Signal that assignments may be granted now.

        Re-queues held assignments and starts the worker if it is not
        running. Must be called from inside the event loop.
        """
        held, self._held = self._held, []
        for assignment in held:
            self._put(assignment)

        self._ready.set()
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(
                self._run_worker(), name="role-assignment-worker"
            )
            logger.debug("Started role assignment worker")

    async def join(self) -> None:
        """Wait until every queued assignment has been handled.

        Returns immediately if the queue was never signalled ready.
        """
        if not self._ready.is_set() or self._worker is None:
            return
        await self._queue.join()

    async def shutdown(self) -> None:
        """Cancel the worker task."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            await asyncio.gather(self._worker, return_exceptions=True)
        self._worker = None
        if self.pending or self.held:
            logger.warning(
                f"Role assignment queue stopped with {self.pending} pending and "
                f"{self.held} held assignment(s); the next startup pass will "
                "pick them up."
            )

    # -------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------

    def _put(self, assignment: RoleAssignment) -> bool:
        try:
            self._queue.put_nowait(assignment)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                f"Role assignment queue is full. Dropped assignment of "
                f"{describe_event(assignment.event.name, assignment.event.id)} "
                f"to user {assignment.user.id}."
            )
            return False
        return True

    async def _run_worker(self) -> None:
        await self._ready.wait()
        while True:
            assignment = await self._queue.get()
            try:
                await self._grant(assignment)
            except asyncio.CancelledError:
                raise
            except Exception:
                self.failed += 1
                logger.exception(
                    f"Failed to assign role for scheduled event "
                    f"{describe_event(assignment.event.name, assignment.event.id)} "
                    f"to user {assignment.user.id}."
                )
            finally:
                self._queue.task_done()

    async def _grant(self, assignment: RoleAssignment) -> None:
        event = assignment.event
        role_id = event.custom_role_id
        if role_id is None:
            record = await self.store.find(event.id)
            role_id = record.role_id if record else None
        if role_id is None:
            logger.debug(
                f"No role yet for scheduled event "
                f"{describe_event(event.name, event.id)}; holding assignment."
            )
            self._held.append(assignment)
            return

        guild_id = event.guild.id if event.guild else event.guild_id
        if guild_id is None:
            raise ValueError("scheduled event has no guild")

        await self.gateway.add_member_role(
            guild_id,
            assignment.user.id,
            role_id,
            reason=f"Subscribed to the scheduled event {event.name}.",
        )
        self.granted += 1
        logger.info(
            f"Assigned role {role_id} to {assignment.user.display_name} "
            f"for scheduled event {describe_event(event.name, event.id)}."
        )
