"""
Memory store — in-process test double for the environment store.

Used by the test suite and by ``--dry-run``: every read and write
lands in a dict, nothing reaches the OS. Failures can be injected
per key to exercise the partial-switch paths.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from jswitch.adapters.base import EnvironmentStore


class MemoryEnvironmentStore(EnvironmentStore):
    """Dict-backed environment store.

    By default every operation succeeds. ``fail_on_set`` makes writes
    to the named keys raise PermissionError; ``unreadable`` makes every
    read raise, as if the store were locked.
    """

    def __init__(
        self,
        values: dict[str, str] | None = None,
        *,
        search_path_key: str = "PATH",
        separator: str = os.pathsep,
        store_name: str = "memory",
    ):
        self.values: dict[str, str] = dict(values or {})
        self.search_path_key = search_path_key
        self.separator = separator
        self._name = store_name
        self.fail_on_set: set[str] = set()
        self.unreadable = False
        self.broadcast_count = 0
        self._call_log: list[tuple[str, str, str | None]] = []

    @classmethod
    def seeded_from(cls, store: EnvironmentStore, keys: Iterable[str]) -> MemoryEnvironmentStore:
        """Copy ``keys`` out of a real store into a fresh memory store.

        Keys that can't be read from the source are left unset.
        """
        values: dict[str, str] = {}
        for key in keys:
            try:
                value = store.get(key)
            except (OSError, UnicodeError):
                continue
            if value is not None:
                values[key] = value
        return cls(
            values,
            search_path_key=store.search_path_key,
            separator=store.separator,
            store_name=f"memory:{store.name}",
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[tuple[str, str, str | None]]:
        """Every (operation, key, value) this store has received."""
        return self._call_log

    def writes(self, key: str | None = None) -> list[tuple[str, str]]:
        """Successful and attempted ``set`` calls, optionally for one key."""
        return [
            (k, v or "")
            for op, k, v in self._call_log
            if op == "set" and (key is None or k == key)
        ]

    def is_available(self) -> bool:
        return True

    def get(self, key: str) -> str | None:
        self._call_log.append(("get", key, None))
        if self.unreadable:
            raise PermissionError(f"[mock] store is unreadable: {key}")
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self._call_log.append(("set", key, value))
        if key in self.fail_on_set:
            raise PermissionError(f"[mock] access denied writing {key}")
        self.values[key] = value

    def broadcast(self) -> None:
        self.broadcast_count += 1

    def reset(self) -> None:
        """Clear the call log and injected failures."""
        self._call_log.clear()
        self.fail_on_set.clear()
        self.unreadable = False
        self.broadcast_count = 0
