"""
Environment binding — the active runtime as the OS sees it.

This is the only code that reads or writes machine-wide environment
state. Two things make up the active binding:

1. the primary variable (``JAVA_HOME``) pointing at the installation;
2. the installation's ``bin`` directory at the head of the search path.

They are written by two independent store writes. If the first one
succeeds and the second fails, the machine is partially switched;
callers must report that, there is no compensating write.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence

from jswitch.adapters.base import EnvironmentStore
from jswitch.core.errors import EnvironmentWriteError
from jswitch.core.models.installation import normalize_path
from jswitch.core.models.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_TOKENS: tuple[str, ...] = ("java", "jdk", "jre")

_BIN_SUFFIXES = ("\\bin", "/bin")


# ═══════════════════════════════════════════════════════════════════
#  Search path surgery (pure functions)
# ═══════════════════════════════════════════════════════════════════


def is_runtime_bin_entry(entry: str, tokens: Iterable[str] = DEFAULT_RUNTIME_TOKENS) -> bool:
    """Whether a search path entry looks like a runtime's bin directory.

    Heuristic: the entry contains a bin segment AND one of the runtime
    name tokens, both case-insensitive. ``C:\\tools\\bin`` is kept,
    ``C:\\Program Files\\Java\\jdk-17\\bin`` is not.
    """
    lowered = entry.lower()
    if not any(suffix in lowered for suffix in _BIN_SUFFIXES):
        return False
    return any(token and token.lower() in lowered for token in tokens)


def split_search_path(raw: str | None, separator: str) -> list[str]:
    """Split a search path value, dropping empty segments."""
    if not raw:
        return []
    return [part for part in raw.split(separator) if part.strip()]


def splice_entries(
    entries: Sequence[str],
    bin_dir: str,
    tokens: Iterable[str] = DEFAULT_RUNTIME_TOKENS,
) -> list[str]:
    """Put ``bin_dir`` first and drop every stale runtime entry.

    Idempotent: splicing the result again with the same ``bin_dir``
    returns the same list. Entries that aren't runtime bin dirs keep
    their relative order.
    """
    tokens = tuple(tokens)
    target = normalize_path(bin_dir)
    kept = [
        entry
        for entry in entries
        if entry.strip()
        and normalize_path(entry) != target
        and not is_runtime_bin_entry(entry, tokens)
    ]
    return [bin_dir, *kept]


def bin_dir_for(path: str) -> str:
    """The bin directory of an installation root."""
    return os.path.join(path, "bin")


# ═══════════════════════════════════════════════════════════════════
#  Binding
# ═══════════════════════════════════════════════════════════════════


class EnvironmentBinding:
    """Reads and rewrites the active binding through an EnvironmentStore."""

    def __init__(
        self,
        store: EnvironmentStore,
        variable: str = "JAVA_HOME",
        runtime_tokens: Iterable[str] = DEFAULT_RUNTIME_TOKENS,
    ):
        self.store = store
        self.variable = variable
        self.runtime_tokens = tuple(runtime_tokens)

    @classmethod
    def from_settings(cls, settings: Settings, store: EnvironmentStore) -> EnvironmentBinding:
        return cls(store, variable=settings.variable, runtime_tokens=settings.runtime_tokens)

    # ── Read ────────────────────────────────────────────────────

    def get_active_target(self) -> str | None:
        """Current value of the primary variable, or None if unset.

        Prefers the durable store; falls back to this process's
        environment when the store can't be read.
        """
        try:
            value = self.store.get(self.variable)
        except (OSError, UnicodeError) as e:
            logger.warning(
                "Cannot read %s from %s store (%s) — using process environment",
                self.variable,
                self.store.name,
                e,
            )
            value = os.environ.get(self.variable)
        return value or None

    def get_search_path(self) -> list[str]:
        """Search path entries as the durable store holds them.

        Falls back to the process search path when the store has no
        value or can't be read.
        """
        try:
            raw = self.store.get(self.store.search_path_key)
        except (OSError, UnicodeError) as e:
            logger.debug("Cannot read search path from %s store: %s", self.store.name, e)
            raw = None
        if raw is None:
            return split_search_path(os.environ.get("PATH"), os.pathsep)
        return split_search_path(raw, self.store.separator)

    # ── Write ───────────────────────────────────────────────────

    def set_active_target(self, path: str) -> None:
        """Point the primary variable at ``path``, durably and in-process.

        Raises:
            EnvironmentWriteError: If the store rejects the write.
        """
        try:
            self.store.set(self.variable, path)
        except (OSError, UnicodeError) as e:
            raise EnvironmentWriteError(f"Failed to set {self.variable}: {e}") from e

        os.environ[self.variable] = path
        logger.info("%s = %s (%s store)", self.variable, path, self.store.name)
        self._broadcast()

    def splice_search_path(self, path: str) -> list[str]:
        """Make ``<path>/bin`` the first search path entry.

        Stale runtime entries are removed (see ``is_runtime_bin_entry``)
        and the new list is written back in one store write.

        Returns:
            The search path entries that were written.

        Raises:
            EnvironmentWriteError: If the store can't be read or written.
        """
        key = self.store.search_path_key
        try:
            raw = self.store.get(key)
        except (OSError, UnicodeError) as e:
            raise EnvironmentWriteError(f"Cannot access system environment: {e}") from e

        if raw is None:
            # Never replace a missing system path with a single entry
            entries = split_search_path(os.environ.get("PATH"), os.pathsep)
            logger.debug("No %s in %s store, seeding from process environment", key, self.store.name)
        else:
            entries = split_search_path(raw, self.store.separator)

        bin_dir = bin_dir_for(path)
        spliced = splice_entries(entries, bin_dir, self.runtime_tokens)
        removed = len(entries) - (len(spliced) - 1)

        try:
            self.store.set(key, self.store.separator.join(spliced))
        except (OSError, UnicodeError) as e:
            raise EnvironmentWriteError(f"Failed to update {key}: {e}") from e

        logger.info("%s: %s first, %d stale runtime entr(ies) removed", key, bin_dir, removed)
        self._broadcast()
        return spliced

    def _broadcast(self) -> None:
        try:
            self.store.broadcast()
        except OSError as e:
            logger.warning("Environment change broadcast failed: %s", e)
