from __future__ import annotations

import argparse
import logging
import sys
from enum import IntEnum
from signal import SIGINT, signal
from typing import TYPE_CHECKING

import httpx
from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from clantrack.app import list_active_members, run_tracking_cycle
from clantrack.config import ConfigurationError, configure_logging
from clantrack.domain.errors import (
    FetchError,
    NotifierAuthorizationError,
    NotifierError,
    PersistenceError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


class ExitCode(IntEnum):
    SUCCESS = 0
    CONFIGURATION = 1
    PERSISTENCE = 2
    NETWORK = 3
    AUTHORIZATION = 4
    TIMEOUT = 5
    UNEXPECTED = 99


_OPERATOR_HINTS: dict[ExitCode, str] = {
    ExitCode.CONFIGURATION: (
        "Configuration error. Check the environment variables (or .env file) "
        "against .env.example."
    ),
    ExitCode.PERSISTENCE: (
        "Database error. Check DATABASE_URI, file permissions and free disk space."
    ),
    ExitCode.NETWORK: (
        "Network error. Check the squadron URL and internet connectivity, "
        "or point CLAN_SNAPSHOT_FILE at a saved copy of the page."
    ),
    ExitCode.AUTHORIZATION: (
        "Discord rejected the bot. Check DISCORD_TOKEN and that the bot may manage "
        "the role and post in the channel."
    ),
    ExitCode.TIMEOUT: "Operation timed out. Try again later or raise CLAN_RETRY_ATTEMPTS.",
    ExitCode.UNEXPECTED: "Unexpected error. See the log output above for details.",
}


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map a failure escaping a command to the process exit code."""

    if isinstance(exc, ConfigurationError):
        return ExitCode.CONFIGURATION
    if isinstance(exc, PersistenceError | SQLAlchemyError):
        return ExitCode.PERSISTENCE
    if isinstance(exc, NotifierAuthorizationError):
        return ExitCode.AUTHORIZATION
    if isinstance(exc, TimeoutError | httpx.TimeoutException):
        return ExitCode.TIMEOUT
    if isinstance(exc, FetchError | NotifierError | httpx.HTTPError):
        return ExitCode.NETWORK
    return ExitCode.UNEXPECTED


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track War Thunder squadron ratings")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("run", help="Run one tracking cycle (default)")
    subparsers.add_parser("members", help="List active members with their latest rating")
    namespace = parser.parse_args(list(argv))
    if namespace.command is None:
        namespace.command = "run"
    return namespace


def _run() -> None:
    summary = run_tracking_cycle()
    log.info(
        "Cycle %s complete: %s observed, %s changed, %s joined, %s departed",
        summary.execution_id,
        summary.observed,
        summary.changed,
        summary.joined,
        summary.departed,
    )


def _list_members() -> None:
    members = list_active_members()
    if not members:
        print("No active members tracked yet.")  # noqa: T201
        return
    width = max(len(member.username) for member in members)
    for member in members:
        latest = member.latest_rating
        rating = "-" if latest is None else str(latest.rating)
        print(f"{member.username:<{width}}  {rating:>6}")  # noqa: T201


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.debug else logging.INFO)

    try:
        if parsed_args.command == "members":
            _list_members()
        else:
            _run()
    except Exception as exc:
        code = exit_code_for(exc)
        log.exception("Fatal error during %s", parsed_args.command)
        print(f"Error: {exc}", file=sys.stderr)  # noqa: T201
        print(_OPERATOR_HINTS[code], file=sys.stderr)  # noqa: T201
        sys.exit(code)
    sys.exit(ExitCode.SUCCESS)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(ExitCode.SUCCESS)


def entrypoint() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    entrypoint()
