"""Leveled logger writing to stderr and a rotating log file."""

from __future__ import annotations

import sys
import threading
from datetime import datetime, timedelta
from enum import IntEnum
from typing import TextIO

from config.models import LogOptions
from rotation import (
    DEFAULT_COMPRESS,
    DEFAULT_MAX_AGE,
    DEFAULT_MAX_BACKUPS,
    DEFAULT_MAX_SIZE,
    RotatingWriter,
    RotationSettings,
)


STACK_TRACE_BEGIN = "========= Stack trace output ========"
STACK_TRACE_END = "========= Stack trace output end ========"
PANIC_MARKER = "Multus Panic"


class Level(IntEnum):
    """Message severity; lower values are more urgent."""

    PANIC = 0
    ERROR = 1
    VERBOSE = 2
    DEBUG = 3
    MAX = 4
    UNKNOWN = 5

    def __str__(self) -> str:
        return _LEVEL_NAMES.get(self, "unknown")

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


_LEVEL_NAMES = {
    Level.PANIC: "panic",
    Level.ERROR: "error",
    Level.VERBOSE: "verbose",
    Level.DEBUG: "debug",
}
_LEVELS_BY_NAME = {name: level for level, name in _LEVEL_NAMES.items()}


class LoggedError(Exception):
    """Error carrying a message that was already logged at error level."""


def parse_level(name: str) -> Level:
    """Map a level name to a Level, case-insensitively.

    Unknown names are reported on stderr and map to ``Level.UNKNOWN``.
    """
    level = _LEVELS_BY_NAME.get(name.lower())
    if level is None:
        print(f"multus logging: cannot set logging level to {name}", file=sys.stderr)
        return Level.UNKNOWN
    return level


def format_timestamp(now: datetime | None = None) -> str:
    """Render ``now`` (default: current local time) as an RFC3339 timestamp."""
    moment = (now or datetime.now()).astimezone()
    if moment.utcoffset() == timedelta(0):
        return moment.strftime("%Y-%m-%dT%H:%M:%SZ")
    return moment.isoformat(timespec="seconds")


def _format_message(fmt: str, args: tuple) -> str:
    if not args:
        return fmt
    try:
        return fmt % args
    except (TypeError, ValueError, KeyError):
        return f"{fmt} %!(BADFORMAT {args!r})"


class LevelLogger:
    """Threshold-filtered logger with a stderr sink and an optional file sink."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._level = Level.PANIC
        self._stderr_enabled = True
        self._stream = stream
        self._rotation = RotationSettings()
        self._writer: RotatingWriter | None = None
        self._lock = threading.RLock()

    def set_stream(self, stream: TextIO | None) -> None:
        """Redirect the stderr sink; ``None`` restores ``sys.stderr``."""
        with self._lock:
            self._stream = stream

    @property
    def level(self) -> Level:
        return self._level

    @property
    def stderr_enabled(self) -> bool:
        return self._stderr_enabled

    @property
    def rotation(self) -> RotationSettings:
        return self._rotation

    @property
    def writer(self) -> RotatingWriter | None:
        return self._writer

    def get_logging_level(self) -> Level:
        return self._level

    def set_log_level(self, name: str) -> None:
        level = parse_level(name)
        if level < Level.MAX:
            with self._lock:
                self._level = level

    def set_log_stderr(self, enabled: bool) -> None:
        with self._lock:
            self._stderr_enabled = enabled

    def set_log_file(self, filename: str) -> None:
        """Point the file sink at ``filename``, keeping the rotation policy.

        An empty filename leaves the current sink untouched.
        """
        if filename == "":
            return
        with self._lock:
            current = self._rotation
            self._replace_sink(
                RotationSettings(
                    filename=filename,
                    max_age=current.max_age,
                    max_size=current.max_size,
                    max_backups=current.max_backups,
                    compress=current.compress,
                    local_time=current.local_time,
                )
            )

    def set_log_options(self, options: LogOptions | None) -> None:
        """Reset the rotation policy to defaults, then apply the given fields.

        Only the filename and local-time flag survive from the current
        policy; unset option fields take the fixed defaults. A file sink
        is always wired; without a filename it writes to
        ``rotation.default_log_path()``.
        """
        max_age = DEFAULT_MAX_AGE
        max_size = DEFAULT_MAX_SIZE
        max_backups = DEFAULT_MAX_BACKUPS
        compress = DEFAULT_COMPRESS
        if options is not None:
            if options.max_age is not None:
                max_age = options.max_age
            if options.max_size is not None:
                max_size = options.max_size
            if options.max_backups is not None:
                max_backups = options.max_backups
            if options.compress is not None:
                compress = options.compress
        with self._lock:
            self._replace_sink(
                RotationSettings(
                    filename=self._rotation.filename,
                    max_age=max_age,
                    max_size=max_size,
                    max_backups=max_backups,
                    compress=compress,
                    local_time=self._rotation.local_time,
                )
            )

    def _replace_sink(self, settings: RotationSettings) -> None:
        with self._lock:
            previous = self._writer
            self._rotation = settings
            self._writer = RotatingWriter(settings)
            if previous is not None:
                try:
                    previous.close()
                except OSError:
                    pass

    def _write(self, sink, line: str) -> None:
        try:
            sink.write(line)
            flush = getattr(sink, "flush", None)
            if flush is not None:
                flush()
        except (OSError, ValueError):
            pass

    def emit(self, level: Level, fmt: str, *args) -> None:
        """Write one formatted line to every enabled sink if ``level`` passes."""
        if level > self._level:
            return
        line = f"{format_timestamp()} [{level}] {_format_message(fmt, args)}\n"
        # Sinks are written under the lock so a setter never closes a writer mid-line.
        with self._lock:
            if level > self._level:
                return
            if self._stderr_enabled:
                self._write(self._stream or sys.stderr, line)
            if self._writer is not None:
                self._write(self._writer, line)

    def debugf(self, fmt: str, *args) -> None:
        self.emit(Level.DEBUG, fmt, *args)

    def verbosef(self, fmt: str, *args) -> None:
        self.emit(Level.VERBOSE, fmt, *args)

    def errorf(self, fmt: str, *args) -> LoggedError:
        """Log at error level and return an error with the same message.

        Returns:
            A LoggedError for the caller to raise or propagate.
        """
        self.emit(Level.ERROR, fmt, *args)
        return LoggedError(_format_message(fmt, args))

    def panicf(self, fmt: str, *args) -> None:
        """Log ``fmt`` at panic level followed by the stack trace banner."""
        self.emit(Level.PANIC, fmt, *args)
        self.emit(Level.PANIC, STACK_TRACE_BEGIN)
        self.emit(Level.PANIC, PANIC_MARKER)
        self.emit(Level.PANIC, STACK_TRACE_END)


_LOGGER = LevelLogger()


def get_logger() -> LevelLogger:
    """Return the shared logger instance."""
    return _LOGGER


def debugf(fmt: str, *args) -> None:
    _LOGGER.debugf(fmt, *args)


def verbosef(fmt: str, *args) -> None:
    _LOGGER.verbosef(fmt, *args)


def errorf(fmt: str, *args) -> LoggedError:
    return _LOGGER.errorf(fmt, *args)


def panicf(fmt: str, *args) -> None:
    _LOGGER.panicf(fmt, *args)


def get_logging_level() -> Level:
    return _LOGGER.get_logging_level()


def set_log_level(name: str) -> None:
    _LOGGER.set_log_level(name)


def set_log_stderr(enabled: bool) -> None:
    _LOGGER.set_log_stderr(enabled)


def set_log_file(filename: str) -> None:
    _LOGGER.set_log_file(filename)


def set_log_options(options: LogOptions | None) -> None:
    _LOGGER.set_log_options(options)
