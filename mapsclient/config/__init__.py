"""
Configuration and logging helpers for the Maps web services client.
"""

from .config_module import ConfigError, get_config, get_config_float, get_config_int, load_config
from .logger_module import initialize_logger, log_debug, log_error, log_info, log_warning

__all__ = [
    "ConfigError",
    "get_config",
    "get_config_float",
    "get_config_int",
    "load_config",
    "initialize_logger",
    "log_debug",
    "log_info",
    "log_warning",
    "log_error",
]
