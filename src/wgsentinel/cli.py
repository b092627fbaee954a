"""Command-line entry point: one locked reconciliation cycle per invocation.

Intended to be scheduled externally (cron, systemd timer)::

    * * * * * wg-sentinel >> /proc/1/fd/1 2>&1

Exit status is 0 on success (including "no changes") and 1 on any setup
failure: bad configuration, a concurrent run holding the lock, an
unreachable backend or an unreadable state file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from wgsentinel import __version__
from wgsentinel._lock import run_lock
from wgsentinel.config import SentinelConfig
from wgsentinel.exceptions import (
    SentinelConfigError,
    SentinelLockError,
    SentinelPersistenceError,
    SentinelSetupError,
)
from wgsentinel.notify import LogNotifier
from wgsentinel.sentinel import CycleReport, Sentinel

_logger = logging.getLogger("wgsentinel")

EXIT_OK = 0
EXIT_SETUP_FAILURE = 1


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="wg-sentinel",
        description="Notify WireGuard peer connects/disconnects (single run, schedule externally).",
    )
    parser.add_argument("--container", help="WireGuard container name (env: WG_CONTAINER_NAME)")
    parser.add_argument("--threshold", type=int, help="Seconds without handshake before a peer is offline")
    parser.add_argument("--state-file", type=Path, help="Ledger location (env: STATE_FILE)")
    parser.add_argument("--lock-file", type=Path, help="Lock file location (env: LOCK_FILE)")
    parser.add_argument("--dry-run", action="store_true", help="Log notifications instead of sending them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S %Z",
    )


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    mapping = {
        "container_name": args.container,
        "timeout_threshold": args.threshold,
        "state_file": args.state_file,
        "lock_file": args.lock_file,
    }
    return {key: value for key, value in mapping.items() if value is not None}


async def _run(config: SentinelConfig, *, dry_run: bool) -> CycleReport:
    notifier = LogNotifier("Dry run") if dry_run else None
    async with Sentinel(config, notifier=notifier) as sentinel:
        return await sentinel.run_cycle()


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = SentinelConfig.from_env(**_overrides(args))
    except SentinelConfigError as exc:
        _logger.error("Invalid configuration: %s", exc)
        return EXIT_SETUP_FAILURE
    _logger.debug("Effective configuration: %s", config.redacted())

    try:
        with run_lock(config.lock_file):
            _logger.info("Script started.")
            report = asyncio.run(_run(config, dry_run=args.dry_run))
    except SentinelLockError as exc:
        _logger.error("Script is already running or lock file is stale (%s). Exiting.", exc)
        return EXIT_SETUP_FAILURE
    except (SentinelSetupError, SentinelPersistenceError) as exc:
        _logger.error("%s. Exiting.", exc)
        return EXIT_SETUP_FAILURE

    _logger.info(
        "Script finished: %d transitions, %d notified, %d failed, state %s.",
        len(report.events),
        report.delivered,
        report.failed,
        "saved" if report.saved else "NOT saved",
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
