"""
Path validator — is this directory a runtime installation, and which version?

Validity is purely structural: the directory exists and holds
``bin/<executable>`` as a regular file. Nothing is executed for that.

The version probe runs ``<home>/bin/java -version`` and pulls the
quoted token out of its diagnostic output. It is metadata only:
every failure (missing binary, start error, timeout, no match) comes
back as ``UNKNOWN_VERSION``.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from jswitch.core.errors import InvalidPathError, ProbeFailure
from jswitch.core.models.settings import DEFAULT_VERSION_PATTERN, Settings, default_executable

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


class PathValidator:
    """Structural validity check and version probe for installations."""

    def __init__(
        self,
        executable: str | None = None,
        version_flag: str = "-version",
        version_pattern: str = DEFAULT_VERSION_PATTERN,
        timeout: float = 10.0,
    ):
        self.executable = executable or default_executable()
        self.version_flag = version_flag
        self.version_pattern = version_pattern
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> PathValidator:
        return cls(
            executable=settings.executable,
            version_flag=settings.version_flag,
            version_pattern=settings.version_pattern,
            timeout=settings.probe_timeout,
        )

    def runtime_binary(self, path: str | Path) -> Path:
        """Where the runtime executable lives inside an installation."""
        return Path(path) / "bin" / self.executable

    def is_valid_installation(self, path: str | Path | None) -> bool:
        """Whether ``path`` is an installation root.

        True iff the directory exists and ``bin/<executable>`` is a
        regular file. Never raises.
        """
        if path is None or not str(path).strip():
            return False
        try:
            return Path(path).is_dir() and self.runtime_binary(path).is_file()
        except OSError as e:
            logger.debug("Cannot inspect %s: %s", path, e)
            return False

    def require_valid(self, path: str) -> None:
        """Raise InvalidPathError unless ``path`` is an installation root."""
        if not self.is_valid_installation(path):
            raise InvalidPathError(path)

    def get_version(self, path: str | Path) -> str:
        """Version string reported by the installation's own binary.

        Returns:
            The quoted version token (e.g. ``"17.0.9"``, ``"1.8.0_462"``),
            or ``UNKNOWN_VERSION`` if it can't be determined.
        """
        binary = self.runtime_binary(path)
        if not binary.is_file():
            logger.debug("No runtime binary at %s", binary)
            return UNKNOWN_VERSION

        try:
            return self._probe(binary)
        except ProbeFailure as e:
            logger.debug("Version probe failed for %s: %s", binary, e)
            return UNKNOWN_VERSION

    def _probe(self, binary: Path) -> str:
        try:
            result = subprocess.run(
                [str(binary), self.version_flag],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeFailure(f"timed out after {self.timeout}s") from e
        except OSError as e:
            raise ProbeFailure(f"could not start: {e}") from e
        except ValueError as e:
            raise ProbeFailure(f"unreadable output: {e}") from e

        # java writes its banner to stderr
        output = result.stderr or result.stdout or ""
        try:
            match = re.search(self.version_pattern, output)
        except re.error as e:
            raise ProbeFailure(f"bad version pattern {self.version_pattern!r}: {e}") from e

        if not match or not match.groups():
            raise ProbeFailure(f"no version in output (exit {result.returncode})")
        return match.group(1)
