"""Attribute contracts — resolved required/optional/skipped sets per worker class.

Manifesto:
    A worker declares what it needs in its class body and inherits what its
    ancestors need. Resolving that chain on every construction would be
    wasted work, so it is resolved once when the class is created and stored
    on the class itself. Discarding a worker class discards its contract.

ARCHITECTURE
────────────
::

    class UpdateUser(BasicWorker):
        required_attributes = ("user", "params")
        optional_attributes = ("notify",)

    __init_subclass__  →  register_contract(UpdateUser)
                             ├── declared_levels()   own __dict__ per class
                             └── resolve_contract()  → AttributeContract

    BasicWorker.__init__  →  contract_for(type(self)).bind(options)

Resolution rules:

- levels are walked from the concrete class up to, excluding, the root
- skipped names of every level are collected first and never bound,
  unless a more derived level declares them again
- each name is bound once, at the first (most derived) level declaring it
- ``result`` can never be declared

Tags:
    workspine, workers, contract, attributes, registry

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from workspine.core.errors import MissingAttributeError, ReservedAttributeError

RESERVED_ATTRIBUTES = frozenset({"result"})

_MISSING = object()


@dataclass(frozen=True)
class AttributeDeclaration:
    """Attributes declared directly in one class body."""

    owner: type
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()

    @classmethod
    def of(cls, owner: type) -> AttributeDeclaration:
        namespace = vars(owner)
        return cls(
            owner=owner,
            required=_names(namespace.get("required_attributes")),
            optional=_names(namespace.get("optional_attributes")),
            skipped=_names(namespace.get("skipped_attributes")),
        )


@dataclass(frozen=True)
class AttributeContract:
    """
    Resolved contract of a worker class.

    Attributes:
        worker: The worker class this contract belongs to
        required: Names that must be present in the input bag, in bind order
        optional: Names bound when present, ``None`` otherwise, in bind order
        skipped: Names opted out of by this class or an ancestor
    """

    worker: type
    required: tuple[str, ...]
    optional: tuple[str, ...]
    skipped: frozenset[str]

    @property
    def names(self) -> tuple[str, ...]:
        """Every bound name, required first."""
        return self.required + self.optional

    def bind(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """
        Validate *options* against the contract and return the bound values.

        Key presence is what counts: ``None`` is a valid required value.

        Raises:
            MissingAttributeError: a required name is absent from *options*
        """
        bound: dict[str, Any] = {}
        for name in self.required:
            value = options.get(name, _MISSING)
            if value is _MISSING:
                raise MissingAttributeError(name, worker=self.worker.__name__)
            bound[name] = value
        for name in self.optional:
            bound[name] = options.get(name)
        return bound

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging/introspection."""
        return {
            "worker": self.worker.__name__,
            "required": list(self.required),
            "optional": list(self.optional),
            "skipped": sorted(self.skipped),
        }


# Own-namespace slot holding the resolved contract of a worker class
_CONTRACT_ATTR = "__workspine_contract__"


def _names(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(name) for name in value)


def _dedupe(names: Iterable[str], loaded: set[str]) -> tuple[str, ...]:
    result = []
    for name in names:
        if name not in loaded:
            loaded.add(name)
            result.append(name)
    return tuple(result)


def declared_levels(worker: type, root: type) -> list[AttributeDeclaration]:
    """Own declarations of *worker* and its ancestors, most derived first, excluding *root*."""
    levels = []
    for klass in worker.__mro__:
        if klass is root or klass is object:
            continue
        if not issubclass(klass, root):
            continue
        levels.append(AttributeDeclaration.of(klass))
    return levels


def check_reserved(declaration: AttributeDeclaration) -> None:
    """Reject reserved names in a single class body."""
    for name in declaration.required + declaration.optional:
        if name in RESERVED_ATTRIBUTES:
            raise ReservedAttributeError(name, worker=declaration.owner.__name__)


def resolve_contract(worker: type, root: type) -> AttributeContract:
    """Walk the hierarchy of *worker* and build its contract."""
    levels = declared_levels(worker, root)
    for level in levels:
        check_reserved(level)

    # A descendant re-declaring a skipped name takes it back.
    skipped: set[str] = set()
    for level in reversed(levels):
        skipped.difference_update(level.required + level.optional)
        skipped.update(level.skipped)

    loaded = set(skipped)
    required = _dedupe((name for level in levels for name in level.required), loaded)
    optional = _dedupe((name for level in levels for name in level.optional), loaded)

    return AttributeContract(
        worker=worker,
        required=required,
        optional=optional,
        skipped=frozenset(skipped),
    )


def register_contract(worker: type, root: type) -> AttributeContract:
    """Resolve and store the contract of *worker*."""
    contract = resolve_contract(worker, root)
    setattr(worker, _CONTRACT_ATTR, contract)
    return contract


def contract_for(worker: type) -> AttributeContract:
    """Get the registered contract of a worker class."""
    contract = vars(worker).get(_CONTRACT_ATTR)
    if contract is None:
        raise KeyError(f"No attribute contract registered for {worker.__name__}")
    return contract


__all__ = [
    "RESERVED_ATTRIBUTES",
    "AttributeDeclaration",
    "AttributeContract",
    "declared_levels",
    "resolve_contract",
    "register_contract",
    "contract_for",
]
