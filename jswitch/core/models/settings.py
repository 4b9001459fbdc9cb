"""
Settings model — what jswitch binds and where it looks.

Loaded from the optional config.yml by ``jswitch.core.config.loader``.
Every field has a working default, so a machine with no config file
behaves like a stock Java setup.
"""

from __future__ import annotations

import platform
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_VERSION_PATTERN = r'version "(.+?)"'


def default_executable() -> str:
    """Name of the runtime binary under ``<home>/bin`` on this OS."""
    return "java.exe" if platform.system() == "Windows" else "java"


class Settings(BaseModel):
    """Runtime binding settings."""

    # ── Binding ──────────────────────────────────────────────────
    variable: str = "JAVA_HOME"
    runtime_tokens: list[str] = Field(default_factory=lambda: ["java", "jdk", "jre"])

    # ── Probe ────────────────────────────────────────────────────
    executable: str = Field(default_factory=default_executable)
    version_flag: str = "-version"
    version_pattern: str = DEFAULT_VERSION_PATTERN
    probe_timeout: float = 10.0  # seconds

    # ── Environment store ────────────────────────────────────────
    store: Literal["auto", "registry", "file", "memory"] = "auto"
    environment_file: str = "/etc/environment"

    # ── Catalogue & discovery ────────────────────────────────────
    catalogue_path: str | None = None  # None = user config dir
    extra_search_roots: list[str] = Field(default_factory=list)
