"""
User settings stored in ``user_specs.yaml``.
"""

import os
from dataclasses import dataclass
from typing import Optional

import yaml

import constants as cv
from logging_config import LEVELS, ConfigurationError

USER_SPECS_DATA = cv.USER_SPECS_DATA

DEFAULT_USER_SPECS = {
    "library": cv.DEFAULT_LIBRARY,
    "rescan_interval": None,
    "sort_library": False,
    "show_hidden": True,
    "log_level": "INFO",
    "log_file": cv.LOG_PATH,
}


@dataclass
class PlayerSettings:
    """Resolved settings for one session."""

    library: str
    tick_rate: float = cv.TICK_RATE
    rescan_delay: float = cv.RESCAN_DELAY
    rescan_interval: Optional[float] = None
    sort_library: bool = False
    show_hidden: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = cv.LOG_PATH


def ensure_user_specs(path=USER_SPECS_DATA):
    """Write a default settings file if none exists

    Args:
        path: Settings file location

    Returns:
        bool: True if the file was created
    """
    if os.path.exists(path):
        return False

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as file:
        yaml.safe_dump(DEFAULT_USER_SPECS, file, default_flow_style=False, sort_keys=False)
    return True


def load_user_specs(path=USER_SPECS_DATA):
    try:
        with open(path, "r", encoding="utf-8") as file:
            user_specs = yaml.safe_load(file)
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Malformed settings in {path}: {e}") from e

    if user_specs is None:
        return {}
    if not isinstance(user_specs, dict):
        raise ConfigurationError(f"{path} must contain a mapping of settings")
    return user_specs


def get_music_library_path(path=USER_SPECS_DATA):
    user_specs = load_user_specs(path)
    library = user_specs.get("library") or cv.DEFAULT_LIBRARY
    return os.path.expanduser(str(library))


def _duration(key, value, allow_none=False):
    """Validate a duration setting in seconds."""
    if value is None and allow_none:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{key} must be a number of seconds, got: {value!r}")
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got: {value}")
    return float(value)


def load_settings(path=USER_SPECS_DATA, overrides=None):
    """Load settings from *path* and apply command line overrides

    Args:
        path: Settings file location; a missing file means all defaults
        overrides: Optional dict of values that win over the file

    Returns:
        PlayerSettings: Validated settings

    Raises:
        ConfigurationError: If the file is unreadable or a value is invalid
    """
    user_specs = load_user_specs(path) if os.path.exists(path) else {}
    merged = {**DEFAULT_USER_SPECS, **user_specs}
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    log_level = str(merged.get("log_level") or "INFO").upper()
    if log_level not in LEVELS:
        raise ConfigurationError(f"Invalid log level: {merged.get('log_level')}")

    log_file = merged.get("log_file")
    library = merged.get("library") or cv.DEFAULT_LIBRARY

    return PlayerSettings(
        library=os.path.expanduser(str(library)),
        tick_rate=_duration("tick_rate", merged.get("tick_rate", cv.TICK_RATE)),
        rescan_delay=_duration("rescan_delay", merged.get("rescan_delay", cv.RESCAN_DELAY)),
        rescan_interval=_duration(
            "rescan_interval", merged.get("rescan_interval"), allow_none=True
        ),
        sort_library=bool(merged.get("sort_library")),
        show_hidden=bool(merged.get("show_hidden", True)),
        log_level=log_level,
        log_file=os.path.expanduser(str(log_file)) if log_file else None,
    )
