"""Command-line parsing helpers."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path


LEVEL_CHOICES = ["debug", "verbose", "error", "panic"]


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to a CNI netconf JSON file")
    parser.add_argument("--log-level", help="Override the netconf logLevel")
    parser.add_argument("--log-file", help="Override the netconf logFile")
    parser.add_argument(
        "--no-stderr",
        action="store_true",
        help="Disable the stderr sink (overrides logToStderr)",
    )


@dataclass
class LogCommandOptions:
    """Parsed CLI options used by the log command."""

    config_path: Path | None
    log_level: str | None
    log_file: str | None
    no_stderr: bool
    level: str
    message: str


@dataclass
class InspectOptions:
    """Parsed CLI options used by the inspect command."""

    config_path: Path | None
    log_level: str | None
    log_file: str | None
    no_stderr: bool


def _parse_log_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the log command.

    Args:
        argv: Optional argument list.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(description="Write a message through the CNI plugin logger.")
    _add_common_args(parser)
    parser.add_argument(
        "--level",
        default="verbose",
        choices=LEVEL_CHOICES,
        help="Severity of the message (default: verbose)",
    )
    parser.add_argument("message", nargs="+", help="Message text")
    return parser.parse_args(argv)


def _parse_inspect_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show the effective logger settings.")
    _add_common_args(parser)
    return parser.parse_args(argv)


def resolve_config_path(args: argparse.Namespace) -> Path | None:
    """Resolve the config path from CLI arguments.

    Args:
        args: Parsed argparse namespace.

    Returns:
        Resolved config path.
    """
    if args.config:
        return Path(args.config).expanduser().resolve()
    return None


def get_log_options(argv: list[str] | None = None) -> LogCommandOptions:
    args = _parse_log_args(argv)
    return LogCommandOptions(
        config_path=resolve_config_path(args),
        log_level=args.log_level,
        log_file=args.log_file,
        no_stderr=bool(args.no_stderr),
        level=args.level,
        message=" ".join(args.message),
    )


def get_inspect_options(argv: list[str] | None = None) -> InspectOptions:
    args = _parse_inspect_args(argv)
    return InspectOptions(
        config_path=resolve_config_path(args),
        log_level=args.log_level,
        log_file=args.log_file,
        no_stderr=bool(args.no_stderr),
    )


def parse_cli(argv: list[str] | None = None) -> tuple[str, LogCommandOptions | InspectOptions]:
    """Parse command-line arguments and return the command name and options."""
    if argv is None:
        import sys

        args = sys.argv[1:]
    else:
        args = argv
    if args and args[0] == "inspect":
        return "inspect", get_inspect_options(args[1:])
    if args and args[0] == "log":
        return "log", get_log_options(args[1:])
    return "log", get_log_options(args)
