"""
Switch orchestrator — the user-facing operations.

One orchestrator owns the in-memory catalogue for the session. It is
created at startup, passed to whoever needs it, and closed at
shutdown (which flushes the catalogue if a save failed earlier).

Switch flow:
    IDLE → VALIDATING → REWRITING → PERSISTING → DONE
                 ↘            ↘
                  FAILED       FAILED

Add / remove / scan / auto-detect follow the same shape:
    validate → mutate catalogue → persist → report
Duplicates and invalid candidates are skipped, never fatal.
"""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from jswitch.adapters.base import EnvironmentStore
from jswitch.core.errors import EnvironmentWriteError, InvalidPathError, PersistenceError
from jswitch.core.models.catalogue import Catalogue
from jswitch.core.models.installation import Installation
from jswitch.core.models.operation import OperationResult
from jswitch.core.models.settings import Settings
from jswitch.core.persistence.catalogue_file import (
    load_catalogue,
    resolve_catalogue_path,
    save_catalogue,
)
from jswitch.core.services.discovery import InstallationDiscovery
from jswitch.core.services.environment import EnvironmentBinding
from jswitch.core.services.validator import PathValidator

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., OperationResult])


class SwitchPhase(str, Enum):
    """Where the last switch attempt got to."""

    IDLE = "idle"
    VALIDATING = "validating"
    REWRITING = "rewriting"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


def _exclusive(operation: str) -> Callable[[_F], _F]:
    """Refuse to start while another operation of this session runs."""

    def decorator(method: _F) -> _F:
        @functools.wraps(method)
        def wrapper(self: SwitchOrchestrator, *args: Any, **kwargs: Any) -> OperationResult:
            if self.busy:
                return OperationResult.failure(
                    operation,
                    "Another operation is in progress",
                    error_kind="busy",
                )
            self.busy = True
            try:
                return method(self, *args, **kwargs)
            finally:
                self.busy = False

        return wrapper  # type: ignore[return-value]

    return decorator


class SwitchOrchestrator:
    """Catalogue owner and entry point for every user operation.

    Args:
        binding: Environment binding (owns all OS environment access).
        validator: Installation validator / version probe.
        discovery: Filesystem scanner.
        catalogue_path: Where the catalogue is persisted. None keeps
            the catalogue in memory only (dry runs, tests).
        catalogue: Initial catalogue; ``load()`` replaces it.
    """

    def __init__(
        self,
        binding: EnvironmentBinding,
        validator: PathValidator,
        discovery: InstallationDiscovery,
        catalogue_path: Path | None = None,
        catalogue: Catalogue | None = None,
    ):
        self.binding = binding
        self.validator = validator
        self.discovery = discovery
        self.catalogue_path = catalogue_path
        self.catalogue = catalogue if catalogue is not None else Catalogue()

        self.selected: Installation | None = None
        self.phase = SwitchPhase.IDLE
        self.busy = False
        self.dirty = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: EnvironmentStore,
        persist: bool = True,
    ) -> SwitchOrchestrator:
        """Wire up every component from loaded settings.

        With ``persist=False`` the saved catalogue is read once up front
        and every later change stays in memory.
        """
        validator = PathValidator.from_settings(settings)
        path = resolve_catalogue_path(settings)
        return cls(
            binding=EnvironmentBinding.from_settings(settings, store),
            validator=validator,
            discovery=InstallationDiscovery(validator, extra_roots=settings.extra_search_roots),
            catalogue_path=path if persist else None,
            catalogue=None if persist else load_catalogue(path),
        )

    # ── Session ─────────────────────────────────────────────────

    @_exclusive("load")
    def load(self) -> OperationResult:
        """Load the catalogue from disk and refresh active flags."""
        if self.catalogue_path is not None:
            self.catalogue = load_catalogue(self.catalogue_path)
        self.selected = None
        self.dirty = False
        self._refresh_active()
        count = len(self.catalogue.installations)
        return OperationResult.success("load", f"Loaded {count} Java installation(s)")

    @_exclusive("refresh")
    def refresh(self) -> OperationResult:
        """Re-read the OS binding and recompute every active flag."""
        target = self._refresh_active()
        active = self.catalogue.active_installation()
        if target is None:
            message = f"{self.binding.variable} is not set"
        else:
            message = f"{self.binding.variable} = {target}"
        return OperationResult.success("refresh", message, installation=active)

    def select(self, key: str | None) -> Installation | None:
        """Set the selected record by path or unique name (None clears it)."""
        self.selected = self.catalogue.resolve(key) if key else None
        return self.selected

    def close(self) -> bool:
        """Flush the catalogue if a save is outstanding.

        Returns:
            False if the final save failed.
        """
        if not self.dirty:
            return True
        try:
            self._persist()
        except PersistenceError as e:
            logger.error("Catalogue not saved at shutdown: %s", e)
            return False
        return True

    # ── Switch ──────────────────────────────────────────────────

    @_exclusive("switch")
    def switch_to(self, record: Installation | None) -> OperationResult:
        """Make ``record`` the active installation."""
        if record is None:
            return OperationResult.failure(
                "switch", "No Java installation selected", error_kind="no_selection"
            )

        self.phase = SwitchPhase.VALIDATING
        logger.info("Switching to %s (%s)", record.name, record.path)
        try:
            self.validator.require_valid(record.path)
        except InvalidPathError as e:
            self.phase = SwitchPhase.FAILED
            return OperationResult.failure(
                "switch", str(e), error_kind=e.kind, installation=record
            )

        self.phase = SwitchPhase.REWRITING
        target_written = False
        try:
            self.binding.set_active_target(record.path)
            target_written = True
            self.binding.splice_search_path(record.path)
        except EnvironmentWriteError as e:
            self.phase = SwitchPhase.FAILED
            logger.error("Switch to %s failed: %s", record.name, e)
            message = f"Switch failed: {e}"
            if target_written:
                message += (
                    f" ({self.binding.variable} now points to {record.path} but the"
                    " search path was not updated; the environment is partially switched)"
                )
            return OperationResult.failure(
                "switch", message, error_kind=e.kind, installation=record
            )

        self.phase = SwitchPhase.PERSISTING
        # Recompute against the value just written, not a fresh OS read
        self.catalogue.recompute_active(record.path)
        self.dirty = True
        try:
            self._persist()
        except PersistenceError as e:
            self.phase = SwitchPhase.DONE
            return OperationResult.partial(
                "switch",
                f"Switched to {record.name}, but the catalogue was not saved: {e}",
                installation=record,
            )

        self.phase = SwitchPhase.DONE
        return OperationResult.success("switch", f"Switched to {record.name}", installation=record)

    # ── Catalogue edits ─────────────────────────────────────────

    @_exclusive("add")
    def add(self, path: str | None) -> OperationResult:
        """Add one installation by path."""
        if not path or not path.strip():
            return OperationResult.failure("add", "No Java path provided", error_kind="invalid_path")

        path = os.path.abspath(os.path.expanduser(path.strip()))
        try:
            self.validator.require_valid(path)
        except InvalidPathError as e:
            return OperationResult.failure("add", str(e), error_kind=e.kind)

        existing = self.catalogue.find(path)
        if existing is not None:
            return OperationResult.skip(
                "add",
                f"Java installation already exists: {existing.path}",
                error_kind="duplicate",
                installation=existing,
            )

        record = self._new_record(path)
        self.catalogue.add(record)
        return self._commit("add", f"Added {record.name}", added=1, installation=record)

    @_exclusive("remove")
    def remove(self, record: Installation | None) -> OperationResult:
        """Remove a record from the catalogue."""
        if record is None:
            return OperationResult.failure(
                "remove", "No Java installation selected", error_kind="no_selection"
            )
        if not self.catalogue.remove(record):
            return OperationResult.failure(
                "remove", f"{record.name} is not in the catalogue", error_kind="no_selection"
            )
        if self.selected is record:
            self.selected = None
        return self._commit("remove", f"Removed {record.name}", installation=record, refresh=False)

    @_exclusive("scan")
    def scan(self, directory: str | None) -> OperationResult:
        """Add every new installation directly under ``directory``."""
        if not directory or not directory.strip():
            return OperationResult.failure("scan", "No directory provided", error_kind="invalid_path")

        added = self._import(self.discovery.scan_directory(directory.strip()))
        if not added:
            return OperationResult.success("scan", "No new Java installations found")
        return self._commit("scan", f"Scan complete, added {added} Java installation(s)", added=added)

    @_exclusive("auto_detect")
    def auto_detect(self) -> OperationResult:
        """Add every new installation found under the well-known roots."""
        found = self.discovery.auto_detect()
        added = self._import(found)
        total = len(self.catalogue.installations)
        if not added:
            return OperationResult.success(
                "auto_detect",
                f"No new Java installations found ({len(found)} detected, {total} known)",
            )
        return self._commit(
            "auto_detect",
            f"Auto-detect complete, added {added} Java installation(s), {total} known",
            added=added,
        )

    # ── Internals ───────────────────────────────────────────────

    def _new_record(self, path: str) -> Installation:
        return Installation(
            name=os.path.basename(path.rstrip("/\\")) or path,
            path=path,
            version=self.validator.get_version(path),
        )

    def _import(self, paths: Iterable[str]) -> int:
        """Add candidates one at a time, skipping duplicates and invalid ones."""
        added = 0
        for path in paths:
            if self.catalogue.find(path) is not None:
                logger.debug("Already known: %s", path)
                continue
            if not self.validator.is_valid_installation(path):
                logger.debug("Not an installation: %s", path)
                continue
            record = self._new_record(path)
            self.catalogue.add(record)
            added += 1
            logger.info("Added %s (%s)", record.display_text, path)
        return added

    def _commit(
        self,
        operation: str,
        message: str,
        refresh: bool = True,
        **kwargs: Any,
    ) -> OperationResult:
        """Persist after a successful in-memory mutation and build the result."""
        if refresh:
            self._refresh_active()
        self.dirty = True
        try:
            self._persist()
        except PersistenceError as e:
            return OperationResult.partial(operation, f"{message}, but not saved: {e}", **kwargs)
        return OperationResult.success(operation, message, **kwargs)

    def _refresh_active(self) -> str | None:
        target = self.binding.get_active_target()
        self.catalogue.recompute_active(target)
        return target

    def _persist(self) -> None:
        if self.catalogue_path is None:
            logger.debug("In-memory catalogue, nothing to save")
            self.dirty = False
            return
        save_catalogue(self.catalogue, self.catalogue_path)
        self.dirty = False
