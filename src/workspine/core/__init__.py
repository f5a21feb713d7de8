"""
Workspine core: errors, logging, settings and capability protocols.

Everything here is independent of workers and orchestration so both layers
(and host applications) can import it without cycles.
"""

from workspine.core.errors import (
    AbstractWorkerError,
    ConfigError,
    ContractError,
    ErrorCategory,
    ErrorContext,
    MissingAttributeError,
    OrchestrationError,
    ReservedAttributeError,
    StepDeclarationError,
    WorkspineError,
)
from workspine.core.logging import LogContext, configure_logging, get_logger
from workspine.core.protocols import AtomicScope, Permittable, ReportsErrors

__all__ = [
    "AbstractWorkerError",
    "ConfigError",
    "ContractError",
    "ErrorCategory",
    "ErrorContext",
    "MissingAttributeError",
    "OrchestrationError",
    "ReservedAttributeError",
    "StepDeclarationError",
    "WorkspineError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "AtomicScope",
    "Permittable",
    "ReportsErrors",
]
