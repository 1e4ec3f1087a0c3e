#!/usr/bin/env python3
"""CLI entrypoint for the CNI plugin logger."""

from __future__ import annotations

from typing import cast

from cli import InspectOptions, LogCommandOptions, parse_cli
from config import LoggingConfig, load_config
from config.apply import apply_config
from logger import LevelLogger, get_logger


def _apply_overrides(cfg: LoggingConfig, options: LogCommandOptions | InspectOptions) -> None:
    if options.log_level:
        cfg.log_level = options.log_level
    if options.log_file:
        cfg.log_file = options.log_file
    if options.no_stderr:
        cfg.log_to_stderr = False


def _emit(log: LevelLogger, level: str, message: str) -> None:
    if level == "debug":
        log.debugf(message)
    elif level == "error":
        log.errorf(message)
    elif level == "panic":
        log.panicf(message)
    else:
        log.verbosef(message)


def _print_settings(log: LevelLogger) -> None:
    rotation = log.rotation
    print(f"level:       {log.get_logging_level()}")
    print(f"stderr:      {log.stderr_enabled}")
    print(f"log file:    {rotation.filename or '-'}")
    print(f"max age:     {rotation.max_age}")
    print(f"max size:    {rotation.max_size}")
    print(f"max backups: {rotation.max_backups}")
    print(f"compress:    {rotation.compress}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint.

    Returns:
        Process exit code.
    """
    command, options = parse_cli(argv)
    if options.config_path:
        if not options.config_path.exists():
            print(f"Config path not found: {options.config_path}")
            return 2
        if options.config_path.is_dir():
            print(f"Config path must be a file: {options.config_path}")
            return 2

    cfg = load_config(options.config_path)
    _apply_overrides(cfg, options)
    log = apply_config(cfg, get_logger())
    if command == "inspect":
        _print_settings(log)
        return 0
    log_options = cast(LogCommandOptions, options)
    _emit(log, log_options.level, log_options.message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
