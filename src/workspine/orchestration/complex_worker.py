"""Complex worker — sequences workers as steps of one transactional operation.

Manifesto:
    A business operation that touches several entities is still one
operation. ``ComplexWorker`` runs existing workers in declaration order,
feeds each one a renamed view of its own inputs, collects their errors and
applies a single rollback policy to the whole run.

ARCHITECTURE
────────────
::

    class SyncUsers(ComplexWorker, mode=TransactionMode.ROLLBACK_ANY):
        required_attributes = ("p1", "u1", "p2", "u2")
        steps = (
            step(UpdateUser, p1="params", u1="user"),
            step(UpdateUser, p2="params", u2="user"),
        )

    SyncUsers.call_self(**options)
      ├── contract bind (own attributes)
      ├── atomic_scope().run(...)        when config.uses_scope
      │     for spec in steps:
      │       guard?  ── no → results.append(None)
      │       bag = {**options, target: bound(source)}
      │       spec.worker.call_self(**bag)
      │       failed? ── errors += step.errors
      │                  ROLLBACK_ANY → AbortScope
      │       results.append(step)
      │     ROLLBACK_END and not success → AbortScope
      └── result = last executed step's result

Mode table:
    NONE          no scope; earlier effects persist
    ROLLBACK_ANY  first failure aborts the scope, later steps never run
    ROLLBACK_END  all steps run; the scope is aborted if the run failed

Related modules:
    config.py   — TransactionMode, OrchestrationConfig
    step.py     — step(), StepSpec, Guard
    scope.py    — AbortScope, SessionScope, bind_scope_provider

Tags:
    workspine, orchestration, steps, transaction, rollback

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from workspine.core.errors import ConfigError, ErrorContext
from workspine.core.logging import LogContext, get_logger
from workspine.core.protocols import AtomicScope
from workspine.orchestration.config import OrchestrationConfig, TransactionMode
from workspine.orchestration.scope import AbortScope, current_scope_provider
from workspine.orchestration.step import StepSpec
from workspine.workers.base import BasicWorker

logger = get_logger(__name__)

_CONFIG_KEYWORDS = ("mode", "atomic")


class ComplexWorker(BasicWorker):
    """
    Worker composed of ordered steps.

    Configure the rollback policy with class keywords::

        class Pipeline(ComplexWorker, mode=TransactionMode.NONE): ...

    Subclasses inherit their parent's ``config`` and ``steps`` unless they
    declare their own.
    """

    steps: ClassVar[tuple[StepSpec, ...]] = ()
    config: ClassVar[OrchestrationConfig] = OrchestrationConfig()
    scope_provider: ClassVar[AtomicScope | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        overrides = {key: kwargs.pop(key) for key in _CONFIG_KEYWORDS if key in kwargs}
        super().__init_subclass__(**kwargs)
        if overrides:
            cls.config = cls.config.with_overrides(**overrides)
        cls.steps = tuple(cls.steps)

    @classmethod
    def configured(cls, **changes: Any) -> type[ComplexWorker]:
        """
        Subclass of this orchestrator with a different config.

        Subclasses are cached per resulting config, so calling this per
        request returns the same class every time.
        """
        target = cls.config.with_overrides(**changes)
        cache = vars(cls).get("_configured_variants")
        if cache is None:
            cache = {}
            cls._configured_variants = cache
        variant = cache.get(target)
        if variant is None:
            variant = type(cls.__name__, (cls,), {"__module__": cls.__module__}, **changes)
            cache[target] = variant
        return variant

    def __init__(self, **options: Any) -> None:
        self.results: list[BasicWorker | None] = []
        self.aborted = False
        self._last_executed: BasicWorker | None = None
        super().__init__(**options)

    # =========================================================================
    # Execution
    # =========================================================================

    def execute(self) -> Any:
        self._errors = []
        self.results = []
        self.aborted = False
        self._last_executed = None

        with LogContext(orchestrator=type(self).__name__):
            logger.debug(
                "orchestration_started",
                steps=len(self.steps),
                **self.config.to_dict(),
            )
            if self.config.uses_scope:
                self.atomic_scope().run(self._run_in_scope)
            else:
                self._run_steps()

            logger.debug(
                "orchestration_finished",
                success=self.success,
                aborted=self.aborted,
                errors=len(self._errors),
            )

        if self.aborted and self.config.mode is TransactionMode.ROLLBACK_ANY:
            return None
        if self._last_executed is None:
            return None
        return self._last_executed.result

    @property
    def errors(self) -> list[Any]:
        """Errors accumulated from failed steps, in step order."""
        return list(self._errors or [])

    def atomic_scope(self) -> AtomicScope:
        """Scope provider for this run: class ``scope_provider``, else the bound one."""
        provider = self.scope_provider or current_scope_provider()
        if provider is None:
            raise ConfigError(
                "No atomic scope provider: set scope_provider or use bind_scope_provider()",
                context=ErrorContext(worker=type(self).__name__),
            )
        return provider

    def _run_in_scope(self) -> None:
        self._run_steps()
        if self.config.mode is TransactionMode.ROLLBACK_END and not self.success:
            self._abort(reason="overall_failure")

    def _run_steps(self) -> None:
        for index, spec in enumerate(self.steps):
            if not spec.should_run(self, self.options):
                logger.debug("step_skipped", step=index, worker=spec.name)
                self.results.append(None)
                continue

            executed = spec.worker.call_self(**self._map_attributes(spec.remap))
            self.results.append(executed)
            self._last_executed = executed

            if executed.success:
                continue

            logger.debug("step_failed", step=index, worker=spec.name, errors=executed.errors)
            self._errors.extend(executed.errors)
            if self.config.uses_scope and self.config.mode is TransactionMode.ROLLBACK_ANY:
                self._abort(reason="step_failure", step=index)

    def _abort(self, **fields: Any) -> None:
        self.aborted = True
        logger.debug("scope_aborted", **fields)
        raise AbortScope()

    def _map_attributes(self, remap: Mapping[str, str]) -> dict[str, Any]:
        """Input bag for a step: own options overlaid with renamed bound values."""
        bag = dict(self._options)
        for source, target in remap.items():
            if source in self._attributes:
                bag[target] = self._attributes[source]
            else:
                bag[target] = self._options.get(source)
        return bag


__all__ = ["ComplexWorker"]
