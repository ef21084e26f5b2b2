"""Type utilities for configuration processing.

This module provides utilities for type conversion and validation in
configuration files.
"""

from .exceptions import ConfigError


def force_list(val) -> list:
    """
    Ensure the value is a list.
    """
    if val is None:
        return []
    return list(val) if isinstance(val, (list, tuple)) else [val]


def force_int(key, value) -> int:
    """
    Convert value to int, raise ConfigError on failure.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"Could not convert value `{value}` for key `{expand_key(key)}` to integer"
        ) from None


def force_float(key, value) -> float:
    """
    Convert value to float, raise ConfigError on failure.
    """
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(
            f"Could not convert value `{value}` for key `{expand_key(key)}` to decimal"
        ) from None


def force_optional_float(key, value):
    """
    Like `force_float`, but passes `None` through.
    """
    if value is None:
        return None
    return force_float(key, value)


def expand_key(key) -> str:
    """
    Expand config key for display.
    """
    return str(key).replace("_", " ").lower()
