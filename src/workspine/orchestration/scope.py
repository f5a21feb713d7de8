"""Atomic scopes — all-or-nothing boundaries around orchestrator runs.

Manifesto:
    The orchestrator decides *when* to undo work; the scope provider knows
*how*. Keeping them apart lets the same pipeline run against a database
transaction in production and a plain in-process scope in tests.

ARCHITECTURE
────────────
::

    ComplexWorker.execute()
      └── atomic_scope().run(body)
            ├── body returns            → commit, return value
            ├── body raises AbortScope  → undo, return None (no raise)
            └── body raises anything    → undo, re-raise

    SessionScope(session)
      ├── no transaction in progress   → session.begin()         (owner)
      ├── only an autobegun one        → adopts it               (owner)
      └── begun or nested, or adopted  → session.begin_nested()  (joins)

    bind_scope_provider(provider)      → ContextVar default for the run

Tags:
    workspine, orchestration, transaction, savepoint, rollback, sqlalchemy

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TypeVar

from sqlalchemy.orm import Session, SessionTransaction, SessionTransactionOrigin

from workspine.core.logging import get_logger
from workspine.core.protocols import AtomicScope

logger = get_logger(__name__)

T = TypeVar("T")

_ADOPTED_KEY = "workspine_adopted_transaction"


class AbortScope(Exception):
    """Signal raised inside a scope body to undo the scope without failing."""

    pass


class SessionScope:
    """
    Atomic scope backed by a SQLAlchemy session.

    The outermost scope owns the transaction and commits it. A transaction
    the session autobegan for an earlier read has no owner, so the scope
    adopts it and commits or rolls back the session itself. A scope opened
    while an owned transaction is open (an outer scope, or one the caller
    began with ``begin()``) joins it through a SAVEPOINT; its owner decides
    the final commit.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def run(self, body: Callable[[], T]) -> T | None:
        transaction, nested, adopted = self._open()
        logger.debug("scope_opened", nested=nested, adopted=adopted)
        try:
            value = body()
        except AbortScope:
            transaction.rollback()
            logger.debug("scope_rolled_back", nested=nested, aborted=True)
            return None
        except BaseException:
            if transaction.is_active:
                transaction.rollback()
            logger.debug("scope_rolled_back", nested=nested, aborted=False)
            raise
        finally:
            if adopted:
                self._session.info.pop(_ADOPTED_KEY, None)
        transaction.commit()
        logger.debug("scope_committed", nested=nested)
        return value

    def _open(self) -> tuple[SessionTransaction, bool, bool]:
        """Transaction for this scope, and whether it joins or adopts one."""
        session = self._session
        current = session.get_transaction()
        if current is None:
            return session.begin(), False, False

        # Reads autobegin a transaction nobody owns; the first scope takes it.
        owned = (
            session.in_nested_transaction()
            or current.origin is not SessionTransactionOrigin.AUTOBEGIN
            or session.info.get(_ADOPTED_KEY) is current
        )
        if owned:
            return session.begin_nested(), True, False
        session.info[_ADOPTED_KEY] = current
        return current, False, True


class NullScope:
    """
    Scope without durable effects to undo.

    Aborting stops the body and returns ``None``; anything the body already
    did stays done.
    """

    def run(self, body: Callable[[], T]) -> T | None:
        try:
            return body()
        except AbortScope:
            logger.debug("scope_rolled_back", nested=False, aborted=True)
            return None


_current_provider: ContextVar[AtomicScope | None] = ContextVar(
    "workspine_scope_provider", default=None
)


def current_scope_provider() -> AtomicScope | None:
    """Scope provider bound for the current context, if any."""
    return _current_provider.get()


@contextmanager
def bind_scope_provider(provider: AtomicScope) -> Iterator[AtomicScope]:
    """
    Bind *provider* as the default atomic scope for orchestrators.

    Example:
        with Session(engine) as session, bind_scope_provider(SessionScope(session)):
            SyncUsers.call_self(**options)
    """
    token = _current_provider.set(provider)
    try:
        yield provider
    finally:
        _current_provider.reset(token)


__all__ = [
    "AbortScope",
    "SessionScope",
    "NullScope",
    "current_scope_provider",
    "bind_scope_provider",
]
