"""
Orchestration: compose workers into one transactional operation.

Usage:
    from workspine.orchestration import ComplexWorker, TransactionMode, step

    class SyncUsers(ComplexWorker, mode=TransactionMode.ROLLBACK_ANY):
        required_attributes = ("p1", "u1", "p2", "u2")
        steps = (
            step(UpdateUser, p1="params", u1="user"),
            step(UpdateUser, p2="params", u2="user"),
        )

    with bind_scope_provider(SessionScope(session)):
        SyncUsers.call_self(**options)
"""

from workspine.orchestration.complex_worker import ComplexWorker
from workspine.orchestration.config import OrchestrationConfig, TransactionMode
from workspine.orchestration.scope import (
    AbortScope,
    NullScope,
    SessionScope,
    bind_scope_provider,
    current_scope_provider,
)
from workspine.orchestration.step import Guard, StepSpec, step

__all__ = [
    "ComplexWorker",
    "OrchestrationConfig",
    "TransactionMode",
    "AbortScope",
    "NullScope",
    "SessionScope",
    "bind_scope_provider",
    "current_scope_provider",
    "Guard",
    "StepSpec",
    "step",
]
