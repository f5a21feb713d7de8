"""SQLAlchemy integration for database-backed atomic scopes."""

from workspine.core.orm.session import (
    WorkspineSession,
    create_workspine_engine,
    workspine_session_factory,
)

__all__ = [
    "WorkspineSession",
    "create_workspine_engine",
    "workspine_session_factory",
]
