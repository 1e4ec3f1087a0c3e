"""Configuration loading and normalization."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from config.models import LoggingConfig, LogOptions


def _as_optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_optional_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    return None


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def log_options_from_dict(raw: Dict[str, Any]) -> LogOptions:
    """Build LogOptions from the ``logOptions`` object of a netconf."""
    return LogOptions(
        max_age=_as_optional_int(raw.get("maxAge")),
        max_size=_as_optional_int(raw.get("maxSize")),
        max_backups=_as_optional_int(raw.get("maxBackups")),
        compress=_as_optional_bool(raw.get("compress")),
    )


def config_from_dict(raw: Dict[str, Any]) -> LoggingConfig:
    """Build a LoggingConfig instance from a raw netconf dictionary."""
    options_raw = raw.get("logOptions")
    log_options = log_options_from_dict(options_raw) if isinstance(options_raw, dict) else None
    return LoggingConfig(
        log_level=_as_str(raw.get("logLevel")),
        log_file=_as_str(raw.get("logFile")),
        log_to_stderr=_as_optional_bool(raw.get("logToStderr")),
        log_options=log_options,
    )


def load_config(path: Path | None) -> LoggingConfig:
    """Load a netconf JSON file into a LoggingConfig instance.

    Args:
        path: Netconf file, or None for an empty configuration.

    Returns:
        Parsed logging configuration.
    """
    if path is None:
        return LoggingConfig()
    return config_from_dict(_load_json(path))
