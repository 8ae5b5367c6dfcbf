"""CLI entry point for event_roles.sync.

Usage:
    python -m event_roles.sync                    # Reconcile the configured guild
    python -m event_roles.sync --guild-id 123     # Reconcile a specific guild
    python -m event_roles.sync --no-assign        # Report missing roles only
    python -m event_roles.sync --verbose          # Show more details
    python -m event_roles.sync --debug            # Show debug info
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from event_roles.sync.logger import logger
from event_roles.sync.run import run_reconcile
from event_roles.utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scheduled Event Role Reconciliation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  GUILD=123456789 python -m event_roles.sync
      Create missing event roles and grant them to subscribers

  python -m event_roles.sync --guild-id 123456789
      Reconcile a guild other than the configured one

  python -m event_roles.sync --no-assign
      Create missing event roles, but only report missing assignments

  python -m event_roles.sync --debug
      Enable debug logging including third-party libraries
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to config.json (default: config.json)",
    )
    parser.add_argument(
        "--guild-id",
        type=int,
        help="Reconcile this guild instead of the configured GUILD",
    )
    parser.add_argument(
        "--no-assign",
        action="store_true",
        help="Log missing role assignments instead of granting them",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with third-party library logs",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Optional file to write logs to",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.debug:
        log_level = logging.DEBUG
        debug_third_party = True
    elif args.verbose:
        log_level = logging.DEBUG
        debug_third_party = False
    else:
        log_level = logging.INFO
        debug_third_party = False

    setup_logging(
        level=log_level,
        log_file=args.log_file,
        debug_third_party=debug_third_party,
    )

    logger.info("Starting scheduled event role reconciliation")

    try:
        asyncio.run(
            run_reconcile(
                config_path=args.config,
                guild_id=args.guild_id,
                assign=not args.no_assign,
            )
        )
        logger.success("Reconciliation complete!")
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == "__main__":
    main()
