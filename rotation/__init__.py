"""Rotation package facade."""

from rotation.settings import (
    DEFAULT_COMPRESS,
    DEFAULT_MAX_AGE,
    DEFAULT_MAX_BACKUPS,
    DEFAULT_MAX_SIZE,
    RotationSettings,
)
from rotation.writer import RotatingWriter, default_log_path

__all__ = [
    "DEFAULT_COMPRESS",
    "DEFAULT_MAX_AGE",
    "DEFAULT_MAX_BACKUPS",
    "DEFAULT_MAX_SIZE",
    "RotatingWriter",
    "RotationSettings",
    "default_log_path",
]
