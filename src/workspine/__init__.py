"""
workspine - business-logic workers with declarative input contracts and
transactional step orchestration.

Usage:
    from workspine import BasicWorker, ComplexWorker, step
"""

from workspine.core.errors import (
    AbstractWorkerError,
    ConfigError,
    ContractError,
    MissingAttributeError,
    OrchestrationError,
    ReservedAttributeError,
    StepDeclarationError,
    WorkspineError,
)
from workspine.orchestration import (
    AbortScope,
    ComplexWorker,
    NullScope,
    OrchestrationConfig,
    SessionScope,
    TransactionMode,
    bind_scope_provider,
    step,
)
from workspine.workers import BasicWorker, after_initialize, permit_attributes

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BasicWorker",
    "after_initialize",
    "permit_attributes",
    "ComplexWorker",
    "OrchestrationConfig",
    "TransactionMode",
    "AbortScope",
    "NullScope",
    "SessionScope",
    "bind_scope_provider",
    "step",
    "AbstractWorkerError",
    "ConfigError",
    "ContractError",
    "MissingAttributeError",
    "OrchestrationError",
    "ReservedAttributeError",
    "StepDeclarationError",
    "WorkspineError",
]
