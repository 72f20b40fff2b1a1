from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from datetime import timedelta
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from staffsync.app import check_store, sync_employees
from staffsync.config import ConfigurationError, configure_logging, get_sync_config
from staffsync.domain.errors import ReconciliationAbortedError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from staffsync.config import SyncConfig

log = logging.getLogger(__name__)

EXIT_FATAL = 1
EXIT_USAGE = 2


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Synchronise the SharePoint employee list with the directory"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-record decisions and HTTP details",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Reconcile directory users into the employee list")
    sync.add_argument(
        "--date-offset-hours",
        type=float,
        help="Hours added to every normalized date (defaults to config, normally 3)",
    )

    subparsers.add_parser("check", help="Verify the configured site and lists exist")

    return parser.parse_args(list(argv))


def _sync_config(args: argparse.Namespace) -> SyncConfig:
    config = get_sync_config()
    if args.date_offset_hours is not None:
        config = replace(config, date_offset=timedelta(hours=args.date_offset_hours))
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)

    try:
        if parsed_args.command == "sync":
            sync_employees(sync_config=_sync_config(parsed_args))
        elif parsed_args.command == "check":
            check_store()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_USAGE)
    except ReconciliationAbortedError as exc:
        log.error("Sync aborted: %s", exc)  # noqa: TRY400
        sys.exit(EXIT_FATAL)
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(EXIT_FATAL)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
