"""Step declarations for complex workers.

A step is one invocation of a worker inside an orchestrator: which worker,
how the orchestrator's attributes are renamed for it, and an optional guard.

Example::

    class SyncUsers(ComplexWorker):
        required_attributes = ("p1", "u1", "p2", "u2")
        optional_attributes = ("p3", "u3")

        steps = (
            step(UpdateUser, p1="params", u1="user"),
            step(UpdateUser, p2="params", u2="user"),
            step(UpdateUser, p3="params", u3="user", if_=lambda w, options: options.get("u3")),
        )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from workspine.core.errors import ErrorContext, StepDeclarationError
from workspine.workers.base import BasicWorker

Predicate = Callable[[Any, Mapping[str, Any]], Any]


@dataclass(frozen=True)
class Guard:
    """
    Step condition.

    ``predicate`` is called with ``(orchestrator, options)``; a string names a
    method on the orchestrator class with the same signature. ``invert`` is
    set for ``unless`` guards.
    """

    predicate: Predicate | str
    invert: bool = False

    def allows(self, orchestrator: Any, options: Mapping[str, Any]) -> bool:
        predicate = self.predicate
        if isinstance(predicate, str):
            predicate = getattr(type(orchestrator), predicate)
        return bool(predicate(orchestrator, options)) ^ self.invert

    def describe(self) -> str:
        keyword = "unless" if self.invert else "if"
        name = self.predicate if isinstance(self.predicate, str) else getattr(
            self.predicate, "__name__", repr(self.predicate)
        )
        return f"{keyword} {name}"


@dataclass(frozen=True)
class StepSpec:
    """
    One declared step.

    Attributes:
        worker: Worker class to run
        remap: orchestrator attribute name → name expected by the worker
        guard: Optional condition; the step is skipped when it fails
    """

    worker: type[BasicWorker]
    remap: Mapping[str, str] = field(default_factory=dict)
    guard: Guard | None = None

    def __post_init__(self):
        object.__setattr__(self, "remap", MappingProxyType(dict(self.remap)))

    @property
    def name(self) -> str:
        return self.worker.__name__

    def should_run(self, orchestrator: Any, options: Mapping[str, Any]) -> bool:
        """Evaluate the guard; steps without one always run."""
        if self.guard is None:
            return True
        return self.guard.allows(orchestrator, options)

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker": self.name,
            "remap": dict(self.remap),
            "guard": self.guard.describe() if self.guard else None,
        }


def step(
    worker: type[BasicWorker],
    remap: Mapping[str, str] | None = None,
    *,
    if_: Predicate | str | None = None,
    unless: Predicate | str | None = None,
    **attribute_map: str,
) -> StepSpec:
    """
    Declare a step.

    Args:
        worker: Worker class to run
        remap: Attribute renames as a mapping (for names that are not identifiers)
        if_: Run only when the predicate is truthy
        unless: Run only when the predicate is falsy
        **attribute_map: Attribute renames as keywords, ``source="target"``

    Raises:
        StepDeclarationError: both ``if_`` and ``unless`` given, or *worker*
            is not a worker class
    """
    if not (isinstance(worker, type) and issubclass(worker, BasicWorker)):
        raise StepDeclarationError(f"Step worker must be a BasicWorker subclass, got {worker!r}")
    if if_ is not None and unless is not None:
        raise StepDeclarationError(
            "A step accepts either 'if_' or 'unless', not both",
            context=ErrorContext(step=worker.__name__),
        )

    guard = None
    if if_ is not None:
        guard = Guard(if_)
    elif unless is not None:
        guard = Guard(unless, invert=True)

    return StepSpec(worker=worker, remap={**(remap or {}), **attribute_map}, guard=guard)


__all__ = ["Guard", "StepSpec", "step"]
