"""
Shared test fixtures and configuration.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from jswitch.adapters.mock import MemoryEnvironmentStore
from jswitch.core.engine.orchestrator import SwitchOrchestrator
from jswitch.core.models.settings import default_executable
from jswitch.core.services.discovery import InstallationDiscovery
from jswitch.core.services.environment import EnvironmentBinding
from jswitch.core.services.validator import PathValidator

BASE_PATH = ["/usr/local/bin", "/usr/bin", "/bin"]


def write_fake_java(home: Path, version: str | None = "17.0.9", stream: str = "stderr") -> Path:
    """Create ``home/bin/java`` that prints a java-style version banner.

    ``version=None`` writes a binary that prints nothing.
    """
    bin_dir = home / "bin"
    bin_dir.mkdir(parents=True, exist_ok=True)
    binary = bin_dir / default_executable()

    redirect = " >&2" if stream == "stderr" else ""
    lines = ["#!/bin/sh"]
    if version is not None:
        lines.append(f"echo 'openjdk version \"{version}\" 2023-10-17'{redirect}")
        lines.append(f"echo 'OpenJDK Runtime Environment (build {version}+9)'{redirect}")
    binary.write_text("\n".join(lines) + "\n")
    binary.chmod(0o755)
    return binary


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep the real machine's config and JAVA_HOME out of every test.

    set + del so monkeypatch restores whatever a switch writes to os.environ.
    """
    for name in ("JAVA_HOME", "JSWITCH_CONFIG", "JSWITCH_LOG_LEVEL", "JSWITCH_LOG_FILE"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))


@pytest.fixture
def make_jdk(tmp_path: Path) -> Callable[..., Path]:
    """Factory: ``make_jdk("temurin-17", version="17.0.9")`` -> installation root."""

    def _make(
        name: str,
        version: str | None = "17.0.9",
        root: Path | None = None,
        stream: str = "stderr",
    ) -> Path:
        home = (root or tmp_path / "jdks") / name
        write_fake_java(home, version=version, stream=stream)
        return home

    return _make


@pytest.fixture
def memory_store() -> MemoryEnvironmentStore:
    return MemoryEnvironmentStore({"PATH": os.pathsep.join(BASE_PATH)})


@pytest.fixture
def validator() -> PathValidator:
    return PathValidator(timeout=5.0)


@pytest.fixture
def catalogue_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "catalogue.json"


@pytest.fixture
def orchestrator(
    memory_store: MemoryEnvironmentStore,
    validator: PathValidator,
    catalogue_path: Path,
) -> SwitchOrchestrator:
    return SwitchOrchestrator(
        binding=EnvironmentBinding(memory_store),
        validator=validator,
        discovery=InstallationDiscovery(validator, roots=[]),
        catalogue_path=catalogue_path,
    )
