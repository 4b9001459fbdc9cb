"""
Error taxonomy — the failures an operation can end with.

Services raise these. The orchestrator catches them and reports them
through the same OperationResult channel as a success, using ``kind``
as the error_kind. Nothing is retried.

Duplicate entries are not errors: the orchestrator reports them as a
skip with error_kind ``"duplicate"``.
"""

from __future__ import annotations


class JswitchError(Exception):
    """Base class for every jswitch error."""

    kind: str = "error"


class InvalidPathError(JswitchError):
    """A directory is not a runtime installation."""

    kind = "invalid_path"

    def __init__(self, path: str):
        super().__init__(f"Invalid Java path: {path}")
        self.path = path


class EnvironmentWriteError(JswitchError):
    """The machine environment store could not be read for update or written."""

    kind = "environment_write"


class PersistenceError(JswitchError):
    """The catalogue could not be saved."""

    kind = "persistence"


class ProbeFailure(JswitchError):
    """The version probe produced nothing usable.

    Only raised inside the validator; ``get_version`` turns it into
    the unknown-version placeholder.
    """

    kind = "probe"
