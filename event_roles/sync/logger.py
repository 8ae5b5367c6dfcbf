"""Rich-based logging utilities for the event role pipeline.

Color-coded console output for event resolution, reconciliation and the
role assignment queue.
"""

from __future__ import annotations

from typing import Any

from rich.markup import escape

from event_roles.utils.pipeline_logger import BasePipelineLogger


def describe_event(name: str, event_id: int) -> str:
    """Render an event as ``name[id]`` for log lines."""
    return f"{name}[{event_id}]"


class ReconcileLogger(BasePipelineLogger):
    """Logger for scheduled event role operations."""

    def __init__(self) -> None:
        super().__init__(__name__)

    # -------------------------------------------------------------------------
    # Rate Limiting & Retries
    # -------------------------------------------------------------------------

    def rate_limit(self, retry_after: float) -> None:
        """Log a rate limit warning with retry time."""
        self._logger.warning(f"Rate limited. Waiting {retry_after:.1f}s...")

    def retry(
        self, attempt: int, max_attempts: int, wait_time: float, reason: str = ""
    ) -> None:
        """Log a retry attempt with optional reason."""
        msg = f"Retry {attempt}/{max_attempts} in {wait_time:.1f}s"
        if reason:
            msg += f" ({reason})"
        self._logger.warning(msg)

    # -------------------------------------------------------------------------
    # Guild Processing
    # -------------------------------------------------------------------------

    def guild_start(self, guild_id: int, guild_name: str) -> None:
        """Log the start of guild reconciliation."""
        self.console.print()
        self.console.rule(
            f"[bold cyan]{escape(guild_name)}[/bold cyan]", style="cyan"
        )
        self.console.print(f"[dim]Guild ID: {guild_id}[/dim]")

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(
        self,
        events_seen: int = 0,
        events_resolved: int = 0,
        events_failed: int = 0,
        subscribers_checked: int = 0,
        members_skipped: int = 0,
        assignments_queued: int = 0,
        roles_granted: int = 0,
        elapsed: float = 0.0,
        **kwargs: Any,
    ) -> None:
        """Print final reconciliation summary."""
        self.print_summary(
            "Reconciliation",
            elapsed=elapsed,
            stats={
                "Scheduled events": events_seen,
                "Events resolved": events_resolved,
                "Events failed": events_failed,
                "Subscribers checked": subscribers_checked,
                "Members skipped": members_skipped,
                "Assignments queued": assignments_queued,
                "Roles granted": roles_granted,
            },
            style="cyan",
        )


# Global logger instance
logger = ReconcileLogger()
