"""Unit tests for event_roles.sync.run and the CLI."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from event_roles.config.settings import AppSettings
from event_roles.sync.__main__ import build_parser, main
from event_roles.sync.reconcile import ReconcileResult
from event_roles.sync.run import ReconcileOrchestrator, run_reconcile


def _make_settings(**overrides) -> AppSettings:
    values = {
        "guild": "100",
        "discord_token": "token",
        "database_url": "postgresql+asyncpg://test/db",
    }
    values.update(overrides)
    return AppSettings(**values)


def _make_orchestrator(settings: AppSettings | None = None) -> ReconcileOrchestrator:
    orch = ReconcileOrchestrator.__new__(ReconcileOrchestrator)
    orch.settings = settings or _make_settings()
    orch.result = ReconcileResult()
    orch.roles_granted = 0
    orch.async_session = MagicMock()
    return orch


def _patch_client(mock_client_cls: MagicMock) -> None:
    mock_client_cls.return_value.__aenter__ = AsyncMock(return_value=AsyncMock())
    mock_client_cls.return_value.__aexit__ = AsyncMock(return_value=False)


# ---------------------------------------------------------------------------
# TestRunPipeline
# ---------------------------------------------------------------------------


class TestRunPipeline:
    """Tests for ReconcileOrchestrator._run_pipeline."""

    @pytest.mark.asyncio
    @patch("event_roles.sync.run.RoleAssignmentQueue")
    @patch("event_roles.sync.run.reconcile_guild", new_callable=AsyncMock)
    @patch("event_roles.sync.run.DiscordClient")
    async def test_reconciles_configured_guild_and_drains(
        self, mock_client_cls, mock_reconcile, mock_queue_cls
    ):
        _patch_client(mock_client_cls)
        queue = mock_queue_cls.return_value
        queue.join = AsyncMock()
        queue.shutdown = AsyncMock()
        queue.granted = 4
        mock_reconcile.return_value = ReconcileResult(events_seen=2)
        orch = _make_orchestrator()

        await orch._run_pipeline()

        assert mock_reconcile.call_args[0][3] == 100
        assert mock_reconcile.call_args.kwargs["assign"] is True
        queue.process_queues.assert_called_once_with()
        queue.join.assert_awaited_once()
        queue.shutdown.assert_awaited_once()
        assert orch.result.events_seen == 2
        assert orch.roles_granted == 4

    @pytest.mark.asyncio
    @patch("event_roles.sync.run.RoleAssignmentQueue")
    @patch("event_roles.sync.run.reconcile_guild", new_callable=AsyncMock)
    @patch("event_roles.sync.run.DiscordClient")
    async def test_guild_id_argument_wins(
        self, mock_client_cls, mock_reconcile, mock_queue_cls
    ):
        _patch_client(mock_client_cls)
        mock_queue_cls.return_value.join = AsyncMock()
        mock_queue_cls.return_value.shutdown = AsyncMock()
        mock_reconcile.return_value = ReconcileResult()

        await _make_orchestrator()._run_pipeline(guild_id=200)

        assert mock_reconcile.call_args[0][3] == 200

    @pytest.mark.asyncio
    @patch("event_roles.sync.run.RoleAssignmentQueue")
    @patch("event_roles.sync.run.reconcile_guild", new_callable=AsyncMock)
    @patch("event_roles.sync.run.DiscordClient")
    async def test_no_assign_skips_drain(
        self, mock_client_cls, mock_reconcile, mock_queue_cls
    ):
        _patch_client(mock_client_cls)
        queue = mock_queue_cls.return_value
        queue.join = AsyncMock()
        queue.shutdown = AsyncMock()
        mock_reconcile.return_value = ReconcileResult()

        await _make_orchestrator()._run_pipeline(assign=False)

        queue.process_queues.assert_not_called()
        queue.join.assert_not_awaited()
        queue.shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("event_roles.sync.run.RoleAssignmentQueue")
    @patch("event_roles.sync.run.reconcile_guild", new_callable=AsyncMock)
    @patch("event_roles.sync.run.DiscordClient")
    async def test_queue_shut_down_on_error(
        self, mock_client_cls, mock_reconcile, mock_queue_cls
    ):
        _patch_client(mock_client_cls)
        queue = mock_queue_cls.return_value
        queue.shutdown = AsyncMock()
        mock_reconcile.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await _make_orchestrator()._run_pipeline()

        queue.shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_guild_raises(self):
        orch = _make_orchestrator(_make_settings(guild=""))

        with pytest.raises(ValueError, match="No guild configured"):
            await orch._run_pipeline()


class TestLogSummary:
    """Tests for ReconcileOrchestrator._log_summary."""

    @patch("event_roles.sync.run.logger")
    def test_passes_result_fields(self, mock_logger):
        orch = _make_orchestrator()
        orch.result = ReconcileResult(events_seen=3, assignments_queued=5)
        orch.roles_granted = 5

        orch._log_summary(1.5)

        kwargs = mock_logger.summary.call_args.kwargs
        assert kwargs["events_seen"] == 3
        assert kwargs["assignments_queued"] == 5
        assert kwargs["roles_granted"] == 5
        assert kwargs["elapsed"] == 1.5


# ---------------------------------------------------------------------------
# TestRunReconcile
# ---------------------------------------------------------------------------


class TestRunReconcile:
    """Tests for run_reconcile entry point."""

    @pytest.mark.asyncio
    @patch("event_roles.sync.run.dispose_engines", new_callable=AsyncMock)
    @patch("event_roles.sync.run.ReconcileOrchestrator")
    @patch("event_roles.sync.run.load_config")
    async def test_runs_and_disposes(self, mock_load, mock_orch_cls, mock_dispose):
        mock_orch_cls.return_value.run = AsyncMock()

        await run_reconcile("cfg.json", guild_id=5, assign=False)

        mock_load.assert_called_once_with("cfg.json")
        mock_orch_cls.return_value.run.assert_awaited_once_with(
            guild_id=5, assign=False
        )
        mock_dispose.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("event_roles.sync.run.dispose_engines", new_callable=AsyncMock)
    @patch("event_roles.sync.run.ReconcileOrchestrator")
    @patch("event_roles.sync.run.load_config")
    async def test_disposes_on_error(self, _load, mock_orch_cls, mock_dispose):
        mock_orch_cls.return_value.run = AsyncMock(side_effect=RuntimeError("x"))

        with pytest.raises(RuntimeError):
            await run_reconcile()

        mock_dispose.assert_awaited_once()


# ---------------------------------------------------------------------------
# TestCli
# ---------------------------------------------------------------------------


class TestCli:
    """Tests for the command line entry point."""

    def test_parser_defaults(self):
        args = build_parser().parse_args([])

        assert args.config == "config.json"
        assert args.guild_id is None
        assert args.no_assign is False

    def test_parser_flags(self):
        args = build_parser().parse_args(["--guild-id", "42", "--no-assign", "-v"])

        assert args.guild_id == 42
        assert args.no_assign is True
        assert args.verbose is True

    @patch("event_roles.sync.__main__.run_reconcile", new_callable=MagicMock)
    @patch("event_roles.sync.__main__.asyncio.run")
    @patch("event_roles.sync.__main__.setup_logging")
    def test_main_runs_pipeline(self, mock_setup, mock_run, mock_reconcile):
        main(["--guild-id", "42", "--no-assign"])

        mock_setup.assert_called_once()
        mock_reconcile.assert_called_once_with(
            config_path="config.json", guild_id=42, assign=False
        )
        mock_run.assert_called_once_with(mock_reconcile.return_value)

    @patch("event_roles.sync.__main__.run_reconcile", new_callable=MagicMock)
    @patch("event_roles.sync.__main__.asyncio.run", side_effect=KeyboardInterrupt)
    @patch("event_roles.sync.__main__.setup_logging")
    def test_main_interrupt_exits_nonzero(self, _setup, _run, _reconcile):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
