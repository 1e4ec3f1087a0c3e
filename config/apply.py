"""Apply a logging configuration to a logger."""

from __future__ import annotations

from config.models import LoggingConfig
from logger import LevelLogger, get_logger


def apply_config(cfg: LoggingConfig, logger: LevelLogger | None = None) -> LevelLogger:
    """Push the set fields of ``cfg`` into ``logger``.

    Args:
        cfg: Parsed logging configuration.
        logger: Target logger, the shared one when omitted.

    Returns:
        The configured logger.
    """
    target = logger or get_logger()
    if cfg.log_level:
        target.set_log_level(cfg.log_level)
    if cfg.log_file:
        target.set_log_file(cfg.log_file)
    if cfg.log_to_stderr is not None:
        target.set_log_stderr(cfg.log_to_stderr)
    if cfg.log_options is not None:
        target.set_log_options(cfg.log_options)
    return target
