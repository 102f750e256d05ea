"""Configuration loader for FocusDay.

Handles loading, saving, and default creation of config.json.
Resolves platform-appropriate data directories:
  - macOS:   ~/Library/Application Support/FocusDay
  - Windows: %APPDATA%/FocusDay
  - Other:   ~/.focusday
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from focusday.core.models import Durations

logger = logging.getLogger(__name__)


def get_data_directory() -> Path:
    """Return the platform-appropriate data directory for FocusDay."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    else:
        base = Path.home()
        return base / ".focusday"
    return base / "FocusDay"


def get_default_config() -> dict[str, Any]:
    """Return the default configuration dictionary."""
    data_dir = get_data_directory()
    return {
        "timer": {
            "focus_minutes": 25,
            "short_break_minutes": 5,
            "long_break_minutes": 30,
            "auto_progress_delay_seconds": 1,
            "cascade_completions": False,
        },
        "dashboard": {
            "host": "127.0.0.1",
            "port": 5566,
        },
        "database_path": str(data_dir / "focusday.db"),
        "log_level": "INFO",
    }


def get_default_config_path() -> Path:
    """Return the default path for config.json."""
    return get_data_directory() / "config.json"


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """Load configuration from a JSON file.

    If *path* is ``None``, the platform default location is used.
    When the file does not exist, a default configuration is created,
    written to disk, and returned.  If the file exists but is invalid
    JSON, the error is logged and defaults are returned.
    """
    config_path = Path(path) if path is not None else get_default_config_path()

    if not config_path.exists():
        logger.info("Config file not found at %s, creating defaults.", config_path)
        defaults = get_default_config()
        save_config(defaults, config_path)
        return defaults

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError("Top-level JSON value must be an object")
        return data
    except (json.JSONDecodeError, ValueError, OSError) as exc:
        logger.error("Failed to load config from %s: %s, using defaults.", config_path, exc)
        return get_default_config()


def save_config(config: dict[str, Any], path: str | Path | None = None) -> None:
    """Write *config* to a JSON file.

    If *path* is ``None``, the platform default location is used.
    Parent directories are created automatically.
    """
    config_path = Path(path) if path is not None else get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)
        fh.write("\n")


def timer_settings(config: dict[str, Any]) -> dict[str, Any]:
    """Return the ``timer`` section merged over its defaults."""
    merged = dict(get_default_config()["timer"])
    section = config.get("timer")
    if isinstance(section, dict):
        merged.update(section)
    return merged


def durations_from_config(config: dict[str, Any]) -> Durations:
    """Build interval durations from the ``timer`` section of *config*.

    Missing or non-positive values fall back to the defaults.
    """
    defaults = get_default_config()["timer"]
    timer = timer_settings(config)

    def _seconds(key: str) -> int:
        value = timer.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            logger.warning("Invalid %s %r in config, using %s", key, value, defaults[key])
            value = defaults[key]
        return int(value * 60)

    return Durations(
        focus_seconds=_seconds("focus_minutes"),
        short_break_seconds=_seconds("short_break_minutes"),
        long_break_seconds=_seconds("long_break_minutes"),
    )
