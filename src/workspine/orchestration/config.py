"""Orchestration configuration — rollback mode and atomic scope flag."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class TransactionMode(str, Enum):
    """When the atomic scope's effects are undone."""

    NONE = "none"  # No scope; partial effects persist
    ROLLBACK_ANY = "rollback_any"  # First failing step aborts everything
    ROLLBACK_END = "rollback_end"  # Run all steps, abort if overall failed


@dataclass(frozen=True)
class OrchestrationConfig:
    """
    Immutable per-orchestrator configuration.

    Attributes:
        mode: Rollback policy
        atomic: Run steps inside an atomic scope. Ignored under ``NONE``.
    """

    mode: TransactionMode = TransactionMode.ROLLBACK_END
    atomic: bool = True

    def __post_init__(self):
        object.__setattr__(self, "mode", TransactionMode(self.mode))

    @property
    def uses_scope(self) -> bool:
        """Whether steps run inside an atomic scope."""
        return self.atomic and self.mode is not TransactionMode.NONE

    def with_overrides(self, **changes: Any) -> OrchestrationConfig:
        """Return a copy with *changes* applied."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {"mode": self.mode.value, "atomic": self.atomic}


__all__ = ["TransactionMode", "OrchestrationConfig"]
