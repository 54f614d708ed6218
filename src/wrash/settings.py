"""User settings with JSON persistence.

Precedence, lowest first: built-in defaults, the settings file, CLI
overrides. The file lives at ``$XDG_CONFIG_HOME/wrash/settings.json``
unless ``WRASH_CONFIG_DIR`` names another directory.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from wrash.completion import DEFAULT_COLUMN_PADDING

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "wrash"
SETTINGS_FILE_NAME = "settings.json"


def _settings_defaults() -> dict[str, Any]:
    """Default settings values."""
    return {
        "historyFile": None,
        "autosaveHistory": True,
        "completionPadding": DEFAULT_COLUMN_PADDING,
        "keybindings": {},
    }


# --- Deep merge ---


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base settings.

    Nested dicts are merged key by key; any other override value replaces
    the base value. ``None`` overrides are ignored.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


# --- Settings ---


@dataclass
class Settings:
    """Resolved settings for one shell run."""

    history_file: str | None = None
    autosave_history: bool = True
    completion_padding: int = DEFAULT_COLUMN_PADDING
    keybindings: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from camelCase keys, skipping ill-typed values."""
        merged = deep_merge_settings(_settings_defaults(), data)
        settings = cls()

        if isinstance(merged["historyFile"], str):
            settings.history_file = merged["historyFile"]
        elif merged["historyFile"] is not None:
            logger.warning("Ignoring setting historyFile: expected a string")

        if isinstance(merged["autosaveHistory"], bool):
            settings.autosave_history = merged["autosaveHistory"]
        else:
            logger.warning("Ignoring setting autosaveHistory: expected a boolean")

        padding = merged["completionPadding"]
        if isinstance(padding, int) and not isinstance(padding, bool) and padding >= 0:
            settings.completion_padding = padding
        else:
            logger.warning("Ignoring setting completionPadding: expected a non-negative integer")

        if isinstance(merged["keybindings"], dict):
            settings.keybindings = merged["keybindings"]
        else:
            logger.warning("Ignoring setting keybindings: expected an object")

        return settings


def get_config_dir() -> Path:
    """Directory holding the settings file."""
    override = os.environ.get("WRASH_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    config_home = os.environ.get("XDG_CONFIG_HOME", "")
    if config_home and os.path.isabs(config_home):
        return Path(config_home) / CONFIG_DIR_NAME
    return Path(os.path.expanduser("~")) / ".config" / CONFIG_DIR_NAME


def get_settings_path() -> Path:
    return get_config_dir() / SETTINGS_FILE_NAME


def _load_from_file(path: Path) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not path.exists():
        return {}, None
    try:
        content = path.read_text(encoding="utf-8")
        settings = json.loads(content)
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(settings, dict):
        return {}, ValueError("settings file must hold a JSON object")
    return settings, None


def load_settings(
    path: str | os.PathLike[str] | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from *path* (default location if omitted).

    A missing file yields the defaults; an unreadable or malformed one is
    logged and also yields the defaults.
    """
    settings_path = Path(path) if path is not None else get_settings_path()
    data, error = _load_from_file(settings_path)
    if error is not None:
        logger.warning("Could not load settings from %s: %s", settings_path, error)
    else:
        logger.debug("Loaded settings from %s", settings_path)

    return Settings.from_dict(deep_merge_settings(data, overrides or {}))
