"""
OperationResult — what every user-facing operation returns.

Success and failure travel through the same object and differ only
by status and message. ``error_kind`` names the failure class
(invalid_path, environment_write, persistence, duplicate, ...) for
callers that want to branch on it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from jswitch.core.models.installation import Installation


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class OperationResult(BaseModel):
    """Outcome of one orchestrator operation.

    Statuses:
        ok       — done and persisted
        partial  — applied, but the catalogue save failed
        skipped  — nothing to do (e.g. duplicate path)
        failed   — nothing was applied, or the environment write broke
    """

    operation: str
    status: Literal["ok", "partial", "skipped", "failed"] = "ok"
    message: str = ""
    error_kind: str | None = None

    added: int = 0
    installation: Installation | None = None

    finished_at: str = Field(default_factory=_now_iso)

    @property
    def ok(self) -> bool:
        """Whether the operation completed without any failure."""
        return self.status in ("ok", "skipped")

    @property
    def failed(self) -> bool:
        """Whether the operation failed."""
        return self.status == "failed"

    @classmethod
    def success(cls, operation: str, message: str, **kwargs: Any) -> OperationResult:
        """Create a success result."""
        return cls(operation=operation, status="ok", message=message, **kwargs)

    @classmethod
    def partial(cls, operation: str, message: str, **kwargs: Any) -> OperationResult:
        """Create a result for an applied-but-not-saved operation."""
        kwargs.setdefault("error_kind", "persistence")
        return cls(operation=operation, status="partial", message=message, **kwargs)

    @classmethod
    def skip(cls, operation: str, message: str, **kwargs: Any) -> OperationResult:
        """Create a skip result."""
        return cls(operation=operation, status="skipped", message=message, **kwargs)

    @classmethod
    def failure(
        cls,
        operation: str,
        message: str,
        error_kind: str = "error",
        **kwargs: Any,
    ) -> OperationResult:
        """Create a failure result."""
        return cls(
            operation=operation,
            status="failed",
            message=message,
            error_kind=error_kind,
            **kwargs,
        )
