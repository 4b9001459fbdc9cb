"""
Configuration loader — reads config.yml into the Settings model.

The config file is optional. Lookup order:

    --config flag  >  JSWITCH_CONFIG env var  >  <user config dir>/config.yml

When none of those exist the defaults apply. A file that exists but
can't be parsed or validated is an error, never silently ignored.
"""

from __future__ import annotations

import logging
import os
import platform
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from jswitch.core.errors import JswitchError
from jswitch.core.models.settings import Settings

logger = logging.getLogger(__name__)

# Default config filename inside the user config directory
CONFIG_FILE = "config.yml"
CONFIG_ENV_VAR = "JSWITCH_CONFIG"
APP_DIR_NAME = "jswitch"


class ConfigError(JswitchError):
    """Raised when the configuration file is invalid or unreadable."""

    kind = "config"


def user_config_dir() -> Path:
    """Per-user directory holding config.yml and catalogue.json."""
    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA") or str(Path.home())
        return Path(base) / APP_DIR_NAME
    # Linux / macOS: XDG fallback
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APP_DIR_NAME


def find_config_file(explicit: Path | None = None) -> Path | None:
    """Locate the config file to use.

    Args:
        explicit: Path given on the command line. Returned as-is,
            even if missing, so the loader can report it.

    Returns:
        Path to the config file, or None when defaults should apply.
    """
    if explicit is not None:
        return explicit

    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()

    candidate = user_config_dir() / CONFIG_FILE
    if candidate.is_file():
        return candidate

    return None


def read_config_data(path: Path) -> dict[str, Any]:
    """Read and parse a config file into a plain mapping.

    The YAML may wrap everything under a ``jswitch`` key or be flat.

    Raises:
        ConfigError: If the file is missing, unreadable or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    if isinstance(data.get("jswitch"), dict):
        data = data["jswitch"]

    return data


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit path to config.yml. If None, searches the
            usual locations and falls back to defaults.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If a config file was found but is invalid.
    """
    path = find_config_file(path)

    if path is None:
        logger.debug("No %s found, using defaults", CONFIG_FILE)
        return Settings()

    logger.debug("Loading settings from %s", path)
    data = read_config_data(path)

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded settings from %s (variable=%s, store=%s)", path, settings.variable, settings.store)
    return settings


def unknown_keys(data: dict[str, Any]) -> list[str]:
    """Top-level keys that Settings doesn't know about."""
    return sorted(set(data) - set(Settings.model_fields))
