"""
Installation discovery — find runtime installations on disk.

Two entry points:

- ``scan_directory(dir)``: the immediate subdirectories of one directory
  that pass the validator.
- ``auto_detect()``: ``scan_directory`` over the vendor install roots
  conventional for this OS, plus any configured extra roots.

Neither one knows about the catalogue. Filtering out paths that are
already known is the orchestrator's job.
"""

from __future__ import annotations

import logging
import os
import platform
from collections.abc import Iterable
from pathlib import Path

from jswitch.core.services.validator import PathValidator

logger = logging.getLogger(__name__)


def default_search_roots() -> list[Path]:
    """Vendor-conventional install roots for the current OS.

    Roots that don't exist are kept here; the scan skips them.
    """
    system = platform.system()
    home = Path.home()

    if system == "Windows":
        program_files = Path(os.environ.get("ProgramFiles", r"C:\Program Files"))
        program_files_x86 = Path(os.environ.get("ProgramFiles(x86)", r"C:\Program Files (x86)"))
        return [
            program_files / "Eclipse Adoptium",
            program_files / "Java",
            program_files_x86 / "Java",
            program_files / "AdoptOpenJDK",
            program_files / "Zulu",
            program_files / "Microsoft",
            program_files / "BellSoft",
            program_files / "Amazon Corretto",
        ]

    if system == "Darwin":
        return [
            Path("/Library/Java/JavaVirtualMachines"),
            home / ".sdkman" / "candidates" / "java",
            home / ".jdks",
        ]

    return [
        Path("/usr/lib/jvm"),
        Path("/usr/java"),
        Path("/opt/java"),
        home / ".sdkman" / "candidates" / "java",
        home / ".jdks",
    ]


class InstallationDiscovery:
    """Filesystem scanner for runtime installations."""

    def __init__(
        self,
        validator: PathValidator,
        roots: Iterable[str | Path] | None = None,
        extra_roots: Iterable[str | Path] = (),
    ):
        self.validator = validator
        base = default_search_roots() if roots is None else [Path(r) for r in roots]
        self.roots: list[Path] = base + [Path(r).expanduser() for r in extra_roots]

    def _candidates(self, child: Path) -> list[Path]:
        # macOS bundles keep the real home under Contents/Home
        return [child, child / "Contents" / "Home"]

    def scan_directory(self, directory: str | Path) -> list[str]:
        """Installations directly under ``directory``.

        Returns:
            Absolute paths, ordered by directory name. Empty when the
            directory is missing or unreadable; entries that can't be
            inspected are skipped.
        """
        root = Path(directory).expanduser()
        try:
            children = sorted(root.iterdir(), key=lambda p: p.name.lower())
        except OSError as e:
            logger.debug("Cannot scan %s: %s", root, e)
            return []

        found: list[str] = []
        for child in children:
            try:
                if not child.is_dir():
                    continue
            except OSError as e:
                logger.debug("Skipping %s: %s", child, e)
                continue

            for candidate in self._candidates(child):
                if self.validator.is_valid_installation(candidate):
                    found.append(os.path.abspath(candidate))
                    break

        logger.debug("Scanned %s: %d installation(s)", root, len(found))
        return found

    def auto_detect(self) -> list[str]:
        """Scan every known root and concatenate the results."""
        found: list[str] = []
        for root in self.roots:
            # missing roots scan as empty
            found.extend(self.scan_directory(root))
        logger.info("Auto-detect found %d installation(s) in %d root(s)", len(found), len(self.roots))
        return found
