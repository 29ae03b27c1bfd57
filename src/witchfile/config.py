"""Configuration directory and config file management for witchfile."""

from __future__ import annotations

import copy
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore

import tomli_w

logger = logging.getLogger(__name__)

APP_NAME = "witchfile"
CONFIG_DIR_ENV = "WITCHFILE_CONFIG_DIR"
CONFIG_FILE_NAME = "config.toml"

# Default configuration
DEFAULT_CONFIG = {
    "inspection": {
        # Bytes read when guessing the encoding, 0 reads the whole file
        "text_probe_limit": 0,
    },
    "bulk": {
        "sort_entries": True,
        "workers": 1,
    },
    "logging": {
        "level": "info",
    },
    "colors": {
        "label": "dim",
        "name": "bold",
        "kind": "rgb(180,190,130)",
        "extension": "rgb(226,120,120)",
        "size_value": "rgb(102,255,179)",
        "size_unit": "rgb(50,170,130)",
        "time": "rgb(226,164,120)",
        "yes": "rgb(137,184,194) dim",
        "no": "dim",
        "readonly": "rgb(250,0,104) dim",
        "placeholder": "dim",
        "categories": {
            "executable": "bold rgb(226,120,120)",
            "special": "rgb(226,164,120)",
            "programming": "rgb(180,190,130)",
            "office": "rgb(226,120,120)",
            "media": "rgb(173,160,211)",
            "archive": "rgb(137,184,194)",
            "other": "rgb(107,112,137)",
        },
    },
}


class ConfigDirUnavailableError(Exception):
    """Raised when the per-user configuration directory cannot be used."""


def get_config_dir() -> Path:
    """Return the per-user configuration directory (not created)."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    else:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / APP_NAME


def ensure_config_dir(config_dir: Optional[Path] = None) -> Path:
    """Create the configuration directory if needed and return it."""
    config_dir = config_dir or get_config_dir()
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise ConfigDirUnavailableError(f"{config_dir}: {err}") from err
    if not config_dir.is_dir():
        raise ConfigDirUnavailableError(f"{config_dir} is not a directory")
    return config_dir


def config_file_path(config_dir: Optional[Path] = None) -> Path:
    return (config_dir or get_config_dir()) / CONFIG_FILE_NAME


def load_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from file or return defaults."""
    config_file = config_file or config_file_path()
    if not config_file.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(config_file, "rb") as f:
            config = tomllib.load(f)
        # Merge with defaults to ensure all keys exist
        return _merge_config(DEFAULT_CONFIG, config)
    except (OSError, tomllib.TOMLDecodeError) as err:
        logger.warning("Ignoring unreadable config file %s: %s", config_file, err)
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], config_file: Optional[Path] = None) -> None:
    """Save configuration to file."""
    config_file = config_file or config_file_path()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "wb") as f:
            tomli_w.dump(config, f)
    except OSError as err:
        # A missing config file only means defaults are used next time
        logger.warning("Failed to save configuration to %s: %s", config_file, err)


def create_default_config(config_file: Optional[Path] = None) -> None:
    """Create default configuration file if it doesn't exist."""
    config_file = config_file or config_file_path()
    if config_file.exists():
        return

    save_config(DEFAULT_CONFIG, config_file)


def _merge_config(default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
    """Merge user config with defaults, preserving user values."""
    result = copy.deepcopy(default)
    for key, value in user.items():
        if key in result and isinstance(result[key], dict):
            if isinstance(value, dict):
                result[key] = _merge_config(result[key], value)
            else:
                logger.warning("Ignoring config entry '%s': expected a table, got %r", key, value)
        else:
            result[key] = value
    return result


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name, {})
    return section if isinstance(section, dict) else {}


def get_text_probe_limit(config: Dict[str, Any]) -> int:
    value = _section(config, "inspection").get("text_probe_limit", 0)
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def get_bulk_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``sort_entries`` and ``workers`` for directory listings."""
    bulk = _section(config, "bulk")
    try:
        workers = max(int(bulk.get("workers", 1)), 1)
    except (TypeError, ValueError):
        workers = 1
    sort_entries = bulk.get("sort_entries", True)
    if not isinstance(sort_entries, bool):
        sort_entries = True
    return {
        "sort_entries": sort_entries,
        "workers": workers,
    }


def get_log_level(config: Dict[str, Any]) -> str:
    return str(_section(config, "logging").get("level", "info")).upper()


__all__ = [
    "CONFIG_DIR_ENV",
    "DEFAULT_CONFIG",
    "ConfigDirUnavailableError",
    "get_config_dir",
    "ensure_config_dir",
    "config_file_path",
    "load_config",
    "save_config",
    "create_default_config",
    "get_text_probe_limit",
    "get_bulk_settings",
    "get_log_level",
]
