"""Main orchestration for the scheduled event role pipeline.

Wires the Discord client, the record store, the assignment queue and the
service together, then runs the startup reconciliation for one guild.
"""

from __future__ import annotations

from dataclasses import asdict

from event_roles.config.settings import AppSettings, load_config
from event_roles.core import BaseOrchestrator
from event_roles.db.engine import dispose_engines
from event_roles.sync.assignment_queue import RoleAssignmentQueue
from event_roles.sync.client import DiscordClient
from event_roles.sync.gateway import DiscordGateway
from event_roles.sync.logger import logger
from event_roles.sync.reconcile import ReconcileResult, reconcile_guild
from event_roles.sync.service import ScheduledEventService
from event_roles.sync.store import ScheduledEventStore


class ReconcileOrchestrator(BaseOrchestrator):
    """Runs the startup reconciliation and drains the assignment queue."""

    def __init__(self, settings: AppSettings) -> None:
        super().__init__(settings.database_url)
        self.settings = settings
        # Stats
        self.result = ReconcileResult()
        self.roles_granted = 0

    async def _run_pipeline(
        self,
        guild_id: int | None = None,
        assign: bool = True,
    ) -> None:
        """Execute the reconciliation pass."""
        target_guild_id = guild_id or self.settings.guild_id
        if target_guild_id is None:
            raise ValueError("No guild configured. Set GUILD or pass --guild-id.")

        async with DiscordClient(
            token=self.settings.discord_token,
            user_agent=self.settings.user_agent,
        ) as client:
            gateway = DiscordGateway(client)
            store = ScheduledEventStore(self.async_session)
            queue = RoleAssignmentQueue(
                gateway, store, maxsize=self.settings.assignment_queue_size
            )
            service = ScheduledEventService(gateway, store, queue)

            try:
                self.result = await reconcile_guild(
                    gateway, service, queue, target_guild_id, assign=assign
                )
                if assign:
                    queue.process_queues()
                    await queue.join()
            finally:
                await queue.shutdown()
                self.roles_granted = queue.granted

    def _log_summary(self, elapsed: float) -> None:
        """Log the final reconciliation summary."""
        logger.summary(
            **asdict(self.result),
            roles_granted=self.roles_granted,
            elapsed=elapsed,
        )


async def run_reconcile(
    config_path: str = "config.json",
    guild_id: int | None = None,
    assign: bool = True,
) -> None:
    """Entry point for running the reconciliation pipeline."""
    settings = load_config(config_path)
    orchestrator = ReconcileOrchestrator(settings)
    try:
        await orchestrator.run(guild_id=guild_id, assign=assign)
    finally:
        await dispose_engines()
