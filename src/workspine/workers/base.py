"""Basic worker — the interface every unit of business logic implements.

Manifesto:
    One business operation, one class, one call. A worker declares the
inputs it needs, gets them validated and bound before any logic runs, and
reports success through a uniform ``errors`` / ``success`` surface, so
callers (controllers, jobs, orchestrators) never special-case a worker.

ARCHITECTURE
────────────
::

    class UpdateUser(BasicWorker):
        required_attributes = ("user", "params")
        optional_attributes = ("notify",)

        @after_initialize
        def _normalize(self):
            self._attributes["params"] = self.permit_attributes(self.params, "email")

        def execute(self):
            self.user.update(self.params)
            return self.user

    UpdateUser.call(user=u, params=p)        → raw execute() value
    UpdateUser.call_self(user=u, params=p)   → worker, value in .result
      └── .errors / .success                 → result.errors win when present

Lifecycle:
    construct (contract bind → after-initialize hooks) → execute()
    → result captured → errors/success read. Instances are single-use.

Related modules:
    contract.py          — contract resolution and registry
    params.py            — permit_attributes helper
    orchestration/       — ComplexWorker composes workers into steps

Tags:
    workspine, workers, business-logic, contract, callbacks

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar

from workspine.core.errors import AbstractWorkerError
from workspine.core.logging import get_logger
from workspine.core.protocols import ReportsErrors
from workspine.workers.contract import AttributeContract, contract_for, register_contract
from workspine.workers.params import permit_attributes

logger = get_logger(__name__)

W = TypeVar("W", bound="BasicWorker")

Hook = Callable[[Any], None]

_HOOK_MARKER = "__workspine_after_initialize__"


def after_initialize(func: Callable[[W], None]) -> Callable[[W], None]:
    """Mark a method to run once after attributes are bound."""
    setattr(func, _HOOK_MARKER, True)
    return func


def _attribute_reader(name: str) -> property:
    def read(self: BasicWorker) -> Any:
        return self._attributes.get(name)

    read.__name__ = name
    read.__doc__ = f"Bound value of the {name!r} attribute."
    return property(read)


class BasicWorker:
    """
    Base class for all workers.

    Subclasses declare ``required_attributes``, ``optional_attributes`` and
    ``skipped_attributes`` and implement ``execute``. The class itself cannot
    be instantiated.
    """

    required_attributes: ClassVar[tuple[str, ...]] = ()
    optional_attributes: ClassVar[tuple[str, ...]] = ()
    skipped_attributes: ClassVar[tuple[str, ...]] = ()

    _after_initialize_hooks: ClassVar[list[Hook]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        contract = register_contract(cls, BasicWorker)

        for name in contract.names:
            if not hasattr(cls, name):
                setattr(cls, name, _attribute_reader(name))

        cls._after_initialize_hooks = [
            value for value in vars(cls).values() if getattr(value, _HOOK_MARKER, False)
        ]

    # =========================================================================
    # Class API
    # =========================================================================

    @classmethod
    def contract(cls) -> AttributeContract:
        """Resolved attribute contract of this worker class."""
        return contract_for(cls)

    @classmethod
    def set_callback(cls, hook: Hook) -> Hook:
        """Append an after-initialize hook; it receives the worker instance."""
        if "_after_initialize_hooks" not in vars(cls):
            cls._after_initialize_hooks = []
        cls._after_initialize_hooks.append(hook)
        return hook

    @classmethod
    def initialize_hooks(cls) -> Iterator[Hook]:
        """After-initialize hooks in registration order, ancestors first."""
        for klass in reversed(cls.__mro__):
            yield from vars(klass).get("_after_initialize_hooks", ())

    @classmethod
    def call(cls, **options: Any) -> Any:
        """Construct the worker, execute it and return the raw value."""
        return cls(**options).execute()

    @classmethod
    def call_self(cls: type[W], **options: Any) -> W:
        """Construct the worker, execute it and return the worker itself."""
        return cls(**options).perform()

    # =========================================================================
    # Instance lifecycle
    # =========================================================================

    def __init__(self, **options: Any) -> None:
        if type(self) is BasicWorker:
            raise AbstractWorkerError("Never use this class directly. Inherit!")

        self._options: dict[str, Any] = dict(options)
        self._attributes: dict[str, Any] = contract_for(type(self)).bind(self._options)
        self._errors: list[Any] | None = None
        self._result: Any = None

        for hook in self.initialize_hooks():
            hook(self)

        logger.debug(
            "worker_initialized",
            worker=type(self).__name__,
            attributes=list(self._attributes),
        )

    def execute(self) -> Any:
        """Business logic. Subclasses must override."""
        raise AbstractWorkerError("Override #execute method")

    def perform(self: W) -> W:
        """Execute and store the value in ``result``; return ``self``."""
        self._result = self.execute()
        logger.debug("worker_executed", worker=type(self).__name__, success=self.success)
        return self

    # =========================================================================
    # Result surface
    # =========================================================================

    @property
    def result(self) -> Any:
        """Value returned by ``execute`` when run through ``perform``/``call_self``."""
        return self._result

    @property
    def errors(self) -> list[Any]:
        """
        Errors collected while executing.

        When ``result`` reports its own errors they take precedence, even over
        errors this worker recorded and even when the result has none. An
        ``errors`` method (pydantic's ``ValidationError.errors()``) is called;
        ``None`` reads as no errors.
        """
        result = self._result
        if result is not self and isinstance(result, ReportsErrors):
            reported = result.errors
            if callable(reported):
                reported = reported()
            return list(reported or [])
        return list(self._errors or [])

    @property
    def success(self) -> bool:
        """True when no errors occurred."""
        return not self.errors

    def add_error(self, *messages: Any) -> None:
        """Record business-rule failures."""
        if self._errors is None:
            self._errors = []
        self._errors.extend(messages)

    # =========================================================================
    # Helpers for subclasses
    # =========================================================================

    @property
    def options(self) -> Mapping[str, Any]:
        """Full input bag the worker was constructed with."""
        return MappingProxyType(self._options)

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Bound attribute values, read-only."""
        return MappingProxyType(self._attributes)

    def permit_attributes(self, attributes: Any, *allowed_fields: str) -> dict[str, Any]:
        """Plain dict from a trusted mapping or a permittable parameter bag."""
        return permit_attributes(attributes, *allowed_fields)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(attributes={self._attributes})"


__all__ = ["BasicWorker", "after_initialize"]
