"""
Catalogue — the root persisted document.

Holds every known installation. It's serialized to catalogue.json
and loaded once per process; the orchestrator owns the single
in-memory instance and writes it back after every mutation.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from jswitch.core.models.installation import Installation, same_path


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


def _looks_like_path(key: str) -> bool:
    return key.startswith(("~", ".")) or any(sep in key for sep in ("/", "\\"))


class Catalogue(BaseModel):
    """Known runtime installations, in insertion order.

    Paths are unique under case-insensitive comparison. At most one
    record is active after ``recompute_active``.
    """

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = 1

    # ── Timestamps ───────────────────────────────────────────────
    created_at: str = Field(default_factory=_now_iso)
    updated_at: str = Field(default_factory=_now_iso)

    # ── Records ──────────────────────────────────────────────────
    installations: list[Installation] = Field(default_factory=list)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = _now_iso()

    # ── Lookups ──────────────────────────────────────────────────

    def find(self, path: str | None) -> Installation | None:
        """Look up a record by path (case-insensitive)."""
        for record in self.installations:
            if record.matches(path):
                return record
        return None

    def find_by_name(self, name: str) -> list[Installation]:
        """All records with this display name (case-insensitive)."""
        wanted = name.casefold()
        return [r for r in self.installations if r.name.casefold() == wanted]

    def resolve(self, key: str) -> Installation | None:
        """Resolve a user-supplied key: path first, then a unique name.

        Relative and ``~`` paths are taken from the current directory,
        the same way ``add`` stores them.
        """
        record = self.find(key)
        if record is not None:
            return record
        if _looks_like_path(key):
            record = self.find(os.path.abspath(os.path.expanduser(key)))
            if record is not None:
                return record
        named = self.find_by_name(key)
        return named[0] if len(named) == 1 else None

    def active_installation(self) -> Installation | None:
        """The record currently flagged active, if any."""
        for record in self.installations:
            if record.active:
                return record
        return None

    # ── Mutations ────────────────────────────────────────────────

    def add(self, record: Installation) -> bool:
        """Append a record. Returns False (no-op) if its path is already known."""
        if self.find(record.path) is not None:
            return False
        self.installations.append(record)
        return True

    def remove(self, record: Installation) -> bool:
        """Remove this exact record object. Returns False if it isn't here."""
        for index, existing in enumerate(self.installations):
            if existing is record:
                del self.installations[index]
                return True
        return False

    def recompute_active(self, observed_target: str | None) -> Installation | None:
        """Re-derive every ``active`` flag from the observed binding target.

        Returns the record that ended up active, or None when the target
        is unset or matches nothing.
        """
        active: Installation | None = None
        for record in self.installations:
            record.active = active is None and same_path(record.path, observed_target)
            if record.active:
                active = record
        return active
