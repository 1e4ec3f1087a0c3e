"""Size-rotated log file writer backed by ``RotatingFileHandler``."""

from __future__ import annotations

import logging
import os
import sys
import tempfile
import threading
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rotation.backups import cleanup_backups, current_time, unique_backup_path
from rotation.settings import DEFAULT_MAX_SIZE, RotationSettings


MEGABYTE = 1024 * 1024
DIR_MODE = 0o755


def default_log_path() -> Path:
    """Log file used when rotation is configured without a filename."""
    program = Path(sys.argv[0]).stem if sys.argv and sys.argv[0] else "multus"
    return Path(tempfile.gettempdir()) / f"{program}-rotating.log"


class _LogFileHandler(RotatingFileHandler):
    """RotatingFileHandler that lets I/O errors reach the caller."""

    def handleError(self, record: logging.LogRecord) -> None:
        exc = sys.exc_info()[1]
        if exc is not None:
            raise exc


class RotatingWriter:
    """Append-only file that rolls over to timestamped backups by size."""

    def __init__(self, settings: RotationSettings) -> None:
        self._settings = settings
        self._handler: _LogFileHandler | None = None
        self._rotation_time: datetime | None = None
        self._cleanup_pending = False
        self._lock = threading.Lock()

    @property
    def settings(self) -> RotationSettings:
        return self._settings

    @property
    def path(self) -> Path:
        if self._settings.filename:
            return Path(self._settings.filename)
        return default_log_path()

    def _max_bytes(self) -> int:
        if self._settings.max_size > 0:
            return self._settings.max_size * MEGABYTE
        return DEFAULT_MAX_SIZE * MEGABYTE

    def _backup_name(self, _default_name: str) -> str:
        now = self._rotation_time or current_time(self._settings.local_time)
        return str(unique_backup_path(self.path, now))

    def _move_to_backup(self, source: str, dest: str) -> None:
        if os.path.exists(source):
            os.replace(source, dest)
            self._cleanup_pending = True

    def _get_handler(self) -> _LogFileHandler:
        if self._handler is None:
            self.path.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            # backupCount=1 makes the handler hand every rollover to the rotator.
            handler = _LogFileHandler(
                self.path,
                maxBytes=self._max_bytes(),
                backupCount=1,
                encoding="utf-8",
                delay=True,
            )
            handler.terminator = ""
            handler.namer = self._backup_name
            handler.rotator = self._move_to_backup
            self._handler = handler
        return self._handler

    def _run_cleanup(self) -> None:
        if not self._cleanup_pending:
            return
        self._cleanup_pending = False
        cleanup_backups(
            self.path,
            max_backups=self._settings.max_backups,
            max_age=self._settings.max_age,
            compress=self._settings.compress,
            now=current_time(self._settings.local_time),
        )

    def write(self, data: str) -> int:
        """Append ``data`` to the log file, rolling over first when it would overflow.

        Backup compression and pruning run after the data is written, so a
        failure there never loses the line.

        Args:
            data: Text to write, including its trailing newline.

        Returns:
            Number of characters written.
        """
        with self._lock:
            record = logging.makeLogRecord({"msg": data, "levelno": logging.INFO, "levelname": "INFO"})
            self._get_handler().handle(record)
            self._run_cleanup()
            return len(data)

    def rotate(self, now: datetime | None = None) -> None:
        """Force a rollover to a new file.

        Args:
            now: Optional rotation time override for deterministic tests.
        """
        with self._lock:
            handler = self._get_handler()
            self._rotation_time = now
            try:
                handler.doRollover()
            finally:
                self._rotation_time = None
            self._run_cleanup()

    def close(self) -> None:
        """Close the current file; the next write reopens it."""
        with self._lock:
            if self._handler is None:
                return
            handler, self._handler = self._handler, None
            handler.close()
