"""
Environment variable helpers used by config.py.
"""
import os
from typing import Optional


def get_env_str(
    name: str,
    default: Optional[str] = None,
    required: bool = False,
    strip: bool = True
) -> Optional[str]:
    """
    Read a string setting from the environment.

    Args:
        name: Environment variable name
        default: Returned when the variable is unset or blank
        required: Raise ValueError instead of falling back
        strip: Strip surrounding whitespace before the blank check

    Returns:
        The value, or default when unset/blank

    Raises:
        ValueError: If required=True and the value is missing or blank
    """
    value = os.getenv(name)

    if value is None:
        if required:
            raise ValueError(f"Required environment variable '{name}' is not set.")
        return default

    if strip:
        value = value.strip()

    if not value:
        if required:
            raise ValueError(f"Required environment variable '{name}' is empty.")
        return default

    return value


TRUTHY = ("1", "true", "yes", "on")


def coerce_bool(value) -> bool:
    """Strings parse like env flags ("false" is False); anything else uses bool()."""
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return bool(value)


def get_env_bool(name: str, default: bool = False) -> bool:
    """
    Read a boolean flag. "1", "true", "yes", "on" are truthy (case-insensitive);
    anything else set is falsy; unset/blank returns default.
    """
    value = os.getenv(name, "").strip()

    if not value:
        return default

    return coerce_bool(value)


def get_env_int(name: str, default: int, minimum: Optional[int] = None) -> int:
    """
    Read an integer setting. Unparseable or out-of-range values fall back to
    default rather than crashing the import of config.py.
    """
    raw = get_env_str(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def get_env_float(name: str, default: float) -> float:
    raw = get_env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default
