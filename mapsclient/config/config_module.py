"""
Environment configuration for the Maps web services client.

Settings are read from process environment variables, optionally seeded
from a .env file. Blank values count as unset, so a line such as
"GOOGLE_MAPS_CHANNEL=" in a .env file leaves the default in place.
"""

import os
import logging
from typing import Callable, Optional, TypeVar
from dotenv import dotenv_values, load_dotenv


ENV_PREFIX = "GOOGLE_MAPS_"

N = TypeVar("N", int, float)


class ConfigError(Exception):
    """Raised when an environment value is present but unusable."""
    pass


def load_config(env_path: str = ".env", override: bool = True) -> bool:
    """
    Seed the process environment from a .env file.

    Args:
        env_path: Path to the .env file (default: ".env")
        override: Whether file values replace variables already set

    Returns:
        True if the file was found and loaded
    """
    logger = logging.getLogger(__name__)

    if not os.path.isfile(env_path):
        logger.warning(f"No .env file at {env_path}, reading the process environment only")
        return False

    maps_keys = sorted(key for key in dotenv_values(env_path) if key.startswith(ENV_PREFIX))
    load_dotenv(env_path, override=override)
    logger.info(f"Loaded {env_path} ({', '.join(maps_keys) or f'no {ENV_PREFIX}* keys'})")
    return True


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Read a string setting.

    Args:
        key: Environment variable name
        default: Returned when the variable is unset or blank

    Returns:
        The stripped value, or default
    """
    value = os.getenv(key)

    if value is None or not value.strip():
        logging.getLogger(__name__).debug(
            f"{key} not set" + (f", using {default!r}" if default is not None else "")
        )
        return default

    return value.strip()


def _get_number(key: str, default: Optional[N], convert: Callable[[str], N], kind: str) -> Optional[N]:
    raw = get_config(key)
    if raw is None:
        return default

    try:
        return convert(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be {kind}, got {raw!r}") from e


def get_config_float(key: str, default: Optional[float] = None) -> Optional[float]:
    """
    Read a numeric setting.

    Raises:
        ConfigError: If the value is set but not a number
    """
    return _get_number(key, default, float, "a number")


def get_config_int(key: str, default: Optional[int] = None) -> Optional[int]:
    """
    Read an integer setting.

    Raises:
        ConfigError: If the value is set but not an integer
    """
    return _get_number(key, default, int, "an integer")
