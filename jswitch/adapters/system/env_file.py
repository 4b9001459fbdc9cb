"""
Environment file store — /etc/environment on Linux and friends.

pam_env reads ``KEY=value`` lines from this file at login, so it is
the closest POSIX equivalent of a machine-wide environment. Reads are
tolerant (quotes, comments, ``export`` prefixes). Bytes that are not
UTF-8 are carried through unchanged. Writes replace the
key's line in place or append it, keep every other line untouched,
and go through temp file + rename.

There is no broadcast on POSIX: running shells keep their old
environment, new login sessions pick up the file.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from pathlib import Path

from jswitch.adapters.base import EnvironmentStore

logger = logging.getLogger(__name__)

DEFAULT_ENVIRONMENT_FILE = Path("/etc/environment")

_LINE_RE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=(.*)$")


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _format_line(key: str, value: str) -> str:
    if not value or any(ch.isspace() for ch in value) or "#" in value:
        return f'{key}="{value}"'
    return f"{key}={value}"


def parse_environment_lines(lines: list[str]) -> dict[str, str]:
    """Parse ``KEY=value`` lines into a dict. Last assignment wins."""
    result: dict[str, str] = {}
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = _LINE_RE.match(stripped)
        if match:
            result[match.group(1)] = _unquote(match.group(2))
    return result


class PosixEnvironmentFileStore(EnvironmentStore):
    """``KEY=value`` environment file (default /etc/environment)."""

    search_path_key = "PATH"
    separator = ":"

    def __init__(self, path: Path = DEFAULT_ENVIRONMENT_FILE):
        self.path = Path(path)

    @property
    def name(self) -> str:
        return "file"

    def is_available(self) -> bool:
        if self.path.exists():
            return os.access(self.path, os.R_OK)
        return self.path.parent.is_dir()

    def _read_lines(self) -> list[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8", errors="surrogateescape").splitlines()

    def get(self, key: str) -> str | None:
        return parse_environment_lines(self._read_lines()).get(key)

    def set(self, key: str, value: str) -> None:
        lines = self._read_lines()
        new_line = _format_line(key, value)

        replaced = False
        output: list[str] = []
        for line in lines:
            match = _LINE_RE.match(line)
            if match and match.group(1) == key:
                # Collapse repeated assignments into the first one
                if not replaced:
                    output.append(new_line)
                    replaced = True
                continue
            output.append(line)
        if not replaced:
            output.append(new_line)

        self._write_atomic("\n".join(output) + "\n")
        logger.debug("%s: %s updated", self.path, key)

    def _write_atomic(self, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}_",
            suffix=".tmp",
        )
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape") as fh:
                fh.write(content)
            # mkstemp creates 0600; the file must stay readable by every login
            if self.path.exists():
                shutil.copymode(self.path, tmp)
            else:
                tmp.chmod(0o644)
            tmp.replace(self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise

    def broadcast(self) -> None:
        logger.info("%s updated — new login sessions will pick up the change", self.path)
