"""
Installation model — one runtime distribution on disk.

The path is the natural key. Two records whose paths differ only by
case (or a trailing separator) are the same installation.
"""

from __future__ import annotations

from pydantic import BaseModel


def normalize_path(path: str | None) -> str:
    """Comparison key for a filesystem path (case-folded, no trailing separator)."""
    if not path:
        return ""
    stripped = path.strip()
    trimmed = stripped.rstrip("/\\")
    # Keep a bare root ("/" or "C:\") intact
    if not trimmed or trimmed.endswith(":"):
        trimmed = stripped
    return trimmed.casefold()


def same_path(a: str | None, b: str | None) -> bool:
    """Case-insensitive path equality. Empty never matches."""
    key = normalize_path(a)
    return bool(key) and key == normalize_path(b)


class Installation(BaseModel):
    """A known runtime installation.

    ``active`` is a cached flag. It is recomputed from the observed
    environment (see Catalogue.recompute_active) and is never the
    source of truth on its own.
    """

    name: str
    path: str
    version: str = ""
    active: bool = False

    @property
    def display_text(self) -> str:
        """Label shown in listings, e.g. ``temurin-17 (17.0.9)``."""
        return f"{self.name} ({self.version})"

    def matches(self, path: str | None) -> bool:
        """Whether this record is the installation at ``path``."""
        return same_path(self.path, path)
