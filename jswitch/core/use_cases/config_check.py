"""
Config check use case — validate config.yml and report issues.
"""

from __future__ import annotations

import platform
import re
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from jswitch.adapters.registry import resolve_store_kind
from jswitch.core.config.loader import ConfigError, find_config_file, read_config_data, unknown_keys
from jswitch.core.models.settings import Settings
from jswitch.core.persistence.catalogue_file import load_catalogue, resolve_catalogue_path
from jswitch.core.services.validator import PathValidator


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    settings: Settings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "variable": self.settings.variable if self.settings else None,
            "store": self.settings.store if self.settings else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate settings and report issues.

    A missing config file is fine (defaults apply); the defaults are
    still checked against this machine.

    Args:
        config_path: Optional explicit path to config.yml.

    Returns:
        ConfigCheckResult with validation status and any issues.
    """
    result = ConfigCheckResult()

    # Find and parse
    config_path = find_config_file(config_path)
    result.config_path = config_path

    data: dict = {}
    if config_path is not None:
        try:
            data = read_config_data(config_path)
        except ConfigError as e:
            result.errors.append(str(e))
            return result
    else:
        result.warnings.append("No config file found, using defaults.")

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"]) or "<root>"
            result.errors.append(f"{loc}: {err['msg']}")
        return result
    result.settings = settings

    # Semantic checks
    for key in unknown_keys(data):
        result.warnings.append(f"Unknown key '{key}' is ignored.")

    try:
        pattern = re.compile(settings.version_pattern)
    except re.error as e:
        result.errors.append(f"version_pattern is not a valid regex: {e}")
    else:
        if pattern.groups < 1:
            result.errors.append("version_pattern needs a capture group for the version.")

    if settings.probe_timeout <= 0:
        result.errors.append(f"probe_timeout must be positive, got {settings.probe_timeout}")

    if not settings.variable.strip():
        result.errors.append("variable must not be empty.")

    if not [t for t in settings.runtime_tokens if t.strip()]:
        result.warnings.append(
            "runtime_tokens is empty: stale runtime entries will not be removed from the search path."
        )

    kind = resolve_store_kind(settings.store)
    if kind == "registry" and platform.system() != "Windows":
        result.errors.append("store 'registry' is only available on Windows.")
    if kind == "file" and not Path(settings.environment_file).expanduser().is_file():
        result.warnings.append(f"Environment file does not exist yet: {settings.environment_file}")
    if kind == "memory":
        result.warnings.append("store 'memory' keeps every switch in-process only.")

    for root in settings.extra_search_roots:
        if not Path(root).expanduser().is_dir():
            result.warnings.append(f"Extra search root does not exist: {root}")

    # Catalogue entries that no longer point at an installation
    validator = PathValidator.from_settings(settings)
    catalogue = load_catalogue(resolve_catalogue_path(settings))
    for record in catalogue.installations:
        if not validator.is_valid_installation(record.path):
            result.warnings.append(f"Catalogue entry '{record.name}' is not a valid installation: {record.path}")

    # Result
    result.valid = len(result.errors) == 0
    return result
