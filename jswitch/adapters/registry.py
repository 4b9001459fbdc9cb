"""
Store registry — pick the environment store for this machine.

The store kind comes from settings (``store: auto|registry|file|memory``).
``auto`` resolves to the Windows registry on Windows and to the
environment file everywhere else. In dry-run mode the chosen store is
wrapped: its current values are copied into a memory store and every
write stays in memory.
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path

from jswitch.adapters.base import EnvironmentStore
from jswitch.adapters.mock import MemoryEnvironmentStore
from jswitch.adapters.system.env_file import PosixEnvironmentFileStore
from jswitch.adapters.system.windows_registry import WindowsRegistryStore
from jswitch.core.models.settings import Settings

logger = logging.getLogger(__name__)

STORE_KINDS = ("auto", "registry", "file", "memory")


def resolve_store_kind(kind: str) -> str:
    """Turn ``auto`` into the concrete store kind for this OS."""
    if kind == "auto":
        return "registry" if platform.system() == "Windows" else "file"
    return kind


def create_store(settings: Settings, dry_run: bool = False) -> EnvironmentStore:
    """Build the environment store described by ``settings``.

    Args:
        settings: Loaded settings.
        dry_run: Wrap the store so nothing is written to the OS.

    Returns:
        An EnvironmentStore instance.
    """
    kind = resolve_store_kind(settings.store)

    store: EnvironmentStore
    if kind == "registry":
        store = WindowsRegistryStore()
    elif kind == "file":
        store = PosixEnvironmentFileStore(Path(settings.environment_file).expanduser())
    elif kind == "memory":
        store = MemoryEnvironmentStore()
    else:
        raise ValueError(f"Unknown store kind '{kind}'. Valid: {', '.join(STORE_KINDS)}")

    if not store.is_available():
        logger.warning("Environment store %r is not available on this machine", store)

    if dry_run:
        store = MemoryEnvironmentStore.seeded_from(
            store, [settings.variable, store.search_path_key]
        )

    logger.debug("Using environment store %r", store)
    return store
