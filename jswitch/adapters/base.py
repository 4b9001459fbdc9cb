"""
Environment store base — the contract between jswitch and the OS.

An environment store is the durable, machine-wide key/value store
that new processes inherit their environment from (the Windows
registry, /etc/environment, ...). EnvironmentBinding only ever
talks to the OS through this interface.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod


class EnvironmentStore(ABC):
    """Abstract base class for all environment stores.

    Unlike command adapters, stores DO raise: ``get`` and ``set``
    raise ``OSError`` (usually ``PermissionError``) when the store
    can't be read or written. The binding decides what that means.

    To create a new store:
        1. Subclass EnvironmentStore
        2. Implement name, is_available, get, set
        3. Override broadcast if the OS has a change notification
        4. Wire it into ``create_store``
    """

    #: Variable holding the executable search path in this store
    search_path_key: str = "PATH"
    #: Separator between search path entries
    separator: str = os.pathsep

    @property
    @abstractmethod
    def name(self) -> str:
        """The store identifier (e.g. 'registry', 'file', 'memory')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether this store can be used on this machine. Never raises."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Read a variable. None when it isn't set.

        Raises:
            OSError: If the store itself can't be accessed.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a variable durably.

        Raises:
            OSError: On permission or store errors.
        """

    def broadcast(self) -> None:
        """Tell running processes the environment changed. Best effort."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
