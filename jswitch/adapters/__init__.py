"""Adapters — bindings to the OS environment store.

Public re-exports for convenient access.
"""

from jswitch.adapters.base import EnvironmentStore
from jswitch.adapters.mock import MemoryEnvironmentStore
from jswitch.adapters.registry import create_store, resolve_store_kind
from jswitch.adapters.system.env_file import PosixEnvironmentFileStore
from jswitch.adapters.system.windows_registry import WindowsRegistryStore

__all__ = [
    "EnvironmentStore",
    "MemoryEnvironmentStore",
    "PosixEnvironmentFileStore",
    "WindowsRegistryStore",
    "create_store",
    "resolve_store_kind",
]
