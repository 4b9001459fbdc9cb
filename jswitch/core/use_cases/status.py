"""
Status use case — what the OS says is active, and whether it adds up.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from jswitch.core.engine.orchestrator import SwitchOrchestrator
from jswitch.core.models.installation import Installation, normalize_path
from jswitch.core.services.environment import bin_dir_for


@dataclass
class StatusResult:
    """Observed binding plus drift warnings."""

    variable: str = "JAVA_HOME"
    target: str | None = None
    store: str = ""
    active: Installation | None = None
    search_path_head: str | None = None
    installation_count: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.warnings

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "variable": self.variable,
            "target": self.target,
            "store": self.store,
            "active": self.active.model_dump() if self.active else None,
            "search_path_head": self.search_path_head,
            "installation_count": self.installation_count,
            "consistent": self.consistent,
            "warnings": self.warnings,
        }


def get_status(orchestrator: SwitchOrchestrator) -> StatusResult:
    """Refresh active flags and check the binding for drift.

    Drift means the machine doesn't look like a clean switch: the
    variable points outside the catalogue or at a broken install, or
    the search path doesn't start with the target's bin directory
    (typically a switch that failed halfway).
    """
    orchestrator.refresh()
    binding = orchestrator.binding

    result = StatusResult(
        variable=binding.variable,
        store=binding.store.name,
        installation_count=len(orchestrator.catalogue.installations),
    )
    result.target = binding.get_active_target()
    result.active = orchestrator.catalogue.active_installation()

    entries = binding.get_search_path()
    result.search_path_head = entries[0] if entries else None

    if result.target is None:
        return result

    if result.active is None:
        result.warnings.append(f"{binding.variable} points outside the catalogue: {result.target}")

    if not orchestrator.validator.is_valid_installation(result.target):
        result.warnings.append(f"{binding.variable} is not a valid Java installation: {result.target}")

    expected = bin_dir_for(result.target)
    if normalize_path(result.search_path_head) != normalize_path(expected):
        result.warnings.append(
            f"Search path does not start with {expected}"
            f" (first entry: {result.search_path_head or 'none'})"
        )

    return result
