"""
PortWatch Configuration
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

# Environment variable overriding the data directory
ENV_HOME = "PORTWATCH_HOME"

# Files inside the data directory
STATE_FILENAME = "state.json"
SETTINGS_FILENAME = "settings.yaml"

# Seconds between two background scans
SCAN_INTERVAL_SECONDS = 5.0
MIN_SCAN_INTERVAL_SECONDS = 0.5

# Seconds to wait for a signalled process to exit
KILL_WAIT_SECONDS = 2.0

# Window settings
WINDOW_TITLE = "PortWatch"
WINDOW_MIN_WIDTH = 1000
WINDOW_MIN_HEIGHT = 600

# Process type badge colors, keyed by ProcessType label
TYPE_COLORS = {
    "Web Server": "#4fc1ff",
    "Database": "#c586c0",
    "Development": "#ce9178",
    "System": "#969696",
    "Other": "#d4d4d4",
}

FAVORITE_COLOR = "#dcdcaa"
WATCH_COLOR = "#4fc1ff"
ACTIVE_COLOR = "#89d185"
INACTIVE_COLOR = "#6a6a6a"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def data_dir() -> Path:
    """Directory holding state, settings and logs."""
    override = os.getenv(ENV_HOME)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".portwatch"


@dataclass
class Settings:
    """User settings read from settings.yaml."""
    scan_interval: float = SCAN_INTERVAL_SECONDS
    notifications: bool = True
    log_level: str = "DEBUG"

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def _coerce(name: str, value):
    """Validate one settings value, raising ValueError when unusable."""
    if name == "scan_interval":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        return max(float(value), MIN_SCAN_INTERVAL_SECONDS)
    if name == "notifications":
        if not isinstance(value, bool):
            raise ValueError("must be true or false")
        return value
    if name == "log_level":
        level = str(value).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return level
    raise ValueError("unknown setting")


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from YAML, falling back to defaults.

    Args:
        path: Settings file, defaults to <data dir>/settings.yaml

    Returns:
        Settings with every invalid or missing value replaced by its default.
    """
    path = path or (data_dir() / SETTINGS_FILENAME)
    settings = Settings()
    if not path.exists():
        logger.debug(f"No settings file at {path}, using defaults")
        return settings

    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read settings from {path}: {e}")
        return settings

    if payload is None:
        return settings
    if not isinstance(payload, dict):
        logger.warning(f"Ignoring settings file {path}: expected a mapping")
        return settings

    known = {f.name for f in fields(Settings)}
    for key, value in payload.items():
        if key not in known:
            logger.debug(f"Ignoring unknown setting '{key}'")
            continue
        try:
            setattr(settings, key, _coerce(key, value))
        except ValueError as e:
            logger.warning(f"Invalid value for '{key}' ({value!r}): {e}")

    return settings


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Write settings as YAML. Returns the path written."""
    path = path or (data_dir() / SETTINGS_FILENAME)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {f.name: getattr(settings, f.name) for f in fields(Settings)}
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(payload, f, default_flow_style=False, sort_keys=False)
    return path
