"""
Capability protocols consumed by workers and orchestrators.

Workers never import a web framework or an ORM to find out what they were
handed. They check shapes:

- ``ReportsErrors``  — a result that carries its own validation messages
  (an ORM model, a form object, another worker)
- ``Permittable``    — an untrusted parameter bag that can hand out an
  allow-listed subset of its fields
- ``AtomicScope``    — an all-or-nothing execution boundary

Manifesto:
    Protocols define contracts without inheritance. Any object with the
    right shape works, and ``isinstance`` checks replace ad hoc
    ``hasattr`` probing.

Tags:
    protocol, capability, duck-typing, workspine, contracts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class ReportsErrors(Protocol):
    """
    Object exposing its error messages.

    ``errors`` may be an iterable, ``None`` (no errors) or a zero-argument
    method returning either, as on pydantic's ``ValidationError``.
    """

    @property
    def errors(self) -> Iterable[str]:
        ...


@runtime_checkable
class Permittable(Protocol):
    """Parameter bag that can be narrowed to named fields."""

    def permit(self, *fields: str) -> Any:
        """Return only *fields*, as a mapping or an object with ``to_dict()``."""
        ...


@runtime_checkable
class AtomicScope(Protocol):
    """
    All-or-nothing execution boundary.

    ``run`` executes *body*, commits on normal return and returns the body's
    value. If *body* raises ``AbortScope`` every effect since the scope began
    is undone and ``run`` returns ``None`` without raising. Scopes opened
    while another one is active must join it.
    """

    def run(self, body: Callable[[], T]) -> T | None:
        ...


__all__ = ["ReportsErrors", "Permittable", "AtomicScope"]
