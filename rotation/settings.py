"""Rotation policy for the log file sink."""

from __future__ import annotations

from dataclasses import dataclass


DEFAULT_MAX_AGE = 5
DEFAULT_MAX_BACKUPS = 5
DEFAULT_MAX_SIZE = 100
DEFAULT_COMPRESS = True


@dataclass(frozen=True)
class RotationSettings:
    """Target file and rotation policy of a RotatingWriter.

    Zero values mean "no limit" for max_age and max_backups and "100 MB"
    for max_size.
    """

    filename: str = ""
    max_age: int = 0
    max_size: int = 0
    max_backups: int = 0
    compress: bool = False
    local_time: bool = False
