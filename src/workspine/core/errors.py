"""
Structured error types for workspine.

Every hard failure raised by the library is a ``WorkspineError``. Errors carry
a category for routing, a ``retryable`` flag and an ``ErrorContext`` so they
can be logged as structured events instead of bare strings.

Step-level business failures are NOT exceptions. A worker that fails its
business rules records messages in ``errors``; only contract, declaration
and configuration problems raise.

Manifesto:
    - **Typed hierarchy:** contract, orchestration and config failures are
      distinguishable with a single ``except`` clause each
    - **Stdlib compatible:** ``MissingAttributeError`` is a ``KeyError``,
      ``AbstractWorkerError`` is a ``NotImplementedError``, declaration
      errors are ``ValueError``s
    - **Rich context:** worker/step/attribute names travel with the error

Architecture:
    ::

        WorkspineError
          ├── ContractError                 (CONTRACT)
          │     ├── MissingAttributeError   (KeyError)
          │     └── ReservedAttributeError  (ValueError)
          ├── AbstractWorkerError           (NotImplementedError)
          ├── OrchestrationError            (ORCHESTRATION)
          │     └── StepDeclarationError    (ValueError)
          └── ConfigError                   (CONFIG)

Examples:
    >>> error = MissingAttributeError("user", worker="UpdateUser")
    >>> error.attribute
    'user'
    >>> error.to_dict()["category"]
    'CONTRACT'

Tags:
    error-handling, exception-hierarchy, error-context, workspine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification and log routing."""

    CONTRACT = "CONTRACT"  # Attribute contract violations
    ORCHESTRATION = "ORCHESTRATION"  # Step declaration / pipeline wiring
    CONFIG = "CONFIG"  # Missing providers, bad settings
    INTERNAL = "INTERNAL"  # Programmer errors, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        worker: Name of the worker class involved
        step: Index or name of the orchestration step
        attribute: Attribute name involved in a contract violation
        metadata: Additional key-value pairs
    """

    worker: str | None = None
    step: str | None = None
    attribute: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["worker", "step", "attribute"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class WorkspineError(Exception):
    """
    Base exception for all workspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` class
    attributes; instances may override both.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> WorkspineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("No scope provider").with_context(worker="SyncUsers")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONTRACT ERRORS
# =============================================================================


class ContractError(WorkspineError):
    """Attribute contract violation."""

    default_category = ErrorCategory.CONTRACT


class MissingAttributeError(ContractError, KeyError):
    """A required attribute is absent from the input bag."""

    def __init__(self, attribute: str, *, worker: str | None = None):
        self.attribute = attribute
        super().__init__(
            f"key not found: {attribute!r}",
            context=ErrorContext(worker=worker, attribute=attribute),
        )


class ReservedAttributeError(ContractError, ValueError):
    """A worker declared a reserved attribute name."""

    def __init__(self, attribute: str, *, worker: str | None = None):
        self.attribute = attribute
        super().__init__(
            f"{attribute!r} attribute is reserved",
            context=ErrorContext(worker=worker, attribute=attribute),
        )


# =============================================================================
# PROGRAMMER ERRORS
# =============================================================================


class AbstractWorkerError(WorkspineError, NotImplementedError):
    """The abstract root worker was instantiated or executed."""

    pass


# =============================================================================
# ORCHESTRATION / CONFIG ERRORS
# =============================================================================


class OrchestrationError(WorkspineError):
    """Orchestrator wiring error."""

    default_category = ErrorCategory.ORCHESTRATION


class StepDeclarationError(OrchestrationError, ValueError):
    """A step declaration is invalid."""

    pass


class ConfigError(WorkspineError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "WorkspineError",
    "ContractError",
    "MissingAttributeError",
    "ReservedAttributeError",
    "AbstractWorkerError",
    "OrchestrationError",
    "StepDeclarationError",
    "ConfigError",
]
