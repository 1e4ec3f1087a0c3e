"""Configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LogOptions:
    """Sparse rotation overrides; ``None`` fields fall back to defaults."""

    max_age: int | None = None
    max_size: int | None = None
    max_backups: int | None = None
    compress: bool | None = None


@dataclass
class LoggingConfig:
    """Logging settings carried by a CNI network configuration."""

    log_level: str = ""
    log_file: str = ""
    log_to_stderr: bool | None = None
    log_options: LogOptions | None = None
