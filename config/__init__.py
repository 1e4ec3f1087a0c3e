"""Config package facade."""

from config.loader import config_from_dict, load_config, log_options_from_dict
from config.models import LoggingConfig, LogOptions

__all__ = [
    "LogOptions",
    "LoggingConfig",
    "config_from_dict",
    "load_config",
    "log_options_from_dict",
]
