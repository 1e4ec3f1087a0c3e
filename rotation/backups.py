"""Backup naming, compression and retention used by the rotator hook."""

from __future__ import annotations

import gzip
import os
import shutil
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path


BACKUP_TIME_FORMAT = "%Y-%m-%dT%H-%M-%S"
COMPRESS_SUFFIX = ".gz"


@dataclass
class Backup:
    """A rotated log file found on disk."""

    path: Path
    timestamp: datetime


def current_time(local_time: bool) -> datetime:
    """Return a naive datetime in local time or UTC."""
    if local_time:
        return datetime.now()
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _format_timestamp(now: datetime) -> str:
    return f"{now.strftime(BACKUP_TIME_FORMAT)}.{now.microsecond // 1000:03d}"


def _parse_timestamp(value: str) -> datetime | None:
    stamp, _, millis = value.rpartition(".")
    if not stamp or len(millis) != 3 or not millis.isdigit():
        return None
    try:
        parsed = datetime.strptime(stamp, BACKUP_TIME_FORMAT)
    except ValueError:
        return None
    return parsed.replace(microsecond=int(millis) * 1000)


def backup_path(log_path: Path, now: datetime) -> Path:
    """Build the backup path for a log file rotated at ``now``.

    Args:
        log_path: Active log file path.
        now: Rotation time, already in the wanted timezone.

    Returns:
        ``<dir>/<stem>-<timestamp><suffix>``.
    """
    return log_path.with_name(f"{log_path.stem}-{_format_timestamp(now)}{log_path.suffix}")


def unique_backup_path(log_path: Path, now: datetime) -> Path:
    """Return the first free backup path at or after ``now``.

    Rollovers within the same millisecond get successive timestamps.
    """
    stamp = now
    while True:
        candidate = backup_path(log_path, stamp)
        compressed = candidate.with_name(candidate.name + COMPRESS_SUFFIX)
        if not candidate.exists() and not compressed.exists():
            return candidate
        stamp += timedelta(milliseconds=1)


def list_backups(log_path: Path) -> list[Backup]:
    """Return the backups of ``log_path``, newest first."""
    directory = log_path.parent
    if not directory.is_dir():
        return []
    prefix = f"{log_path.stem}-"
    suffix = log_path.suffix
    backups: list[Backup] = []
    for entry in directory.iterdir():
        if not entry.is_file() or entry == log_path:
            continue
        name = entry.name
        if name.endswith(COMPRESS_SUFFIX):
            name = name[: -len(COMPRESS_SUFFIX)]
        if not name.startswith(prefix) or not name.endswith(suffix):
            continue
        stamp = name[len(prefix) : len(name) - len(suffix)] if suffix else name[len(prefix) :]
        parsed = _parse_timestamp(stamp)
        if parsed is None:
            continue
        backups.append(Backup(entry, parsed))
    backups.sort(key=lambda backup: backup.timestamp, reverse=True)
    return backups


def compress_file(path: Path) -> Path:
    """Gzip ``path`` next to itself and remove the original."""
    target = path.with_name(path.name + COMPRESS_SUFFIX)
    with path.open("rb") as src, gzip.open(target, "wb") as dst:
        shutil.copyfileobj(src, dst)
    mode = path.stat().st_mode
    os.chmod(target, mode & 0o777)
    path.unlink()
    return target


def cleanup_backups(
    log_path: Path,
    max_backups: int,
    max_age: int,
    compress: bool,
    now: datetime,
) -> None:
    """Compress and prune backups of ``log_path``.

    Args:
        log_path: Active log file path.
        max_backups: Backups to keep, 0 keeps all.
        max_age: Age limit in days, 0 disables it.
        compress: Gzip backups that are not compressed yet.
        now: Reference time in the same timezone as the backup names.
    """
    backups = list_backups(log_path)
    remove: list[Backup] = []
    if max_backups > 0 and len(backups) > max_backups:
        remove.extend(backups[max_backups:])
        backups = backups[:max_backups]
    if max_age > 0:
        cutoff = now - timedelta(days=max_age)
        expired = [backup for backup in backups if backup.timestamp < cutoff]
        remove.extend(expired)
        backups = [backup for backup in backups if backup.timestamp >= cutoff]
    for backup in remove:
        backup.path.unlink(missing_ok=True)
    if not compress:
        return
    for backup in backups:
        if backup.path.name.endswith(COMPRESS_SUFFIX):
            continue
        compress_file(backup.path)
