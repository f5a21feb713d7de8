"""SQLAlchemy engine factory and session helpers.

Workers do not own a persistence engine; the host application does. This
module only provides a correctly configured engine and session for the
database-backed atomic scope (``workspine.orchestration.scope.SessionScope``).

* ``create_workspine_engine``    -- Create a SA engine from a URL.
* ``WorkspineSession``           -- Session with ``expire_on_commit=False``.
* ``workspine_session_factory``  -- ``sessionmaker`` producing ``WorkspineSession``.

Tags:
    workspine, orm, sqlalchemy, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from workspine.core.settings import get_settings


def create_workspine_engine(
    url: str | None = None,
    *,
    echo: bool | None = None,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    pool_timeout: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.). Defaults to
        ``WORKSPINE_DATABASE_URL``.
    echo:
        If ``True``, log all SQL. Defaults to ``WORKSPINE_DATABASE_ECHO``.
    pool_size, max_overflow, pool_timeout:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    if url is None or echo is None:
        settings = get_settings()
        url = url or settings.database_url
        echo = settings.database_echo if echo is None else echo

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = _sa_create_engine(url, echo=echo, **kwargs)

        # pysqlite issues BEGIN lazily and breaks SAVEPOINT; take over
        # transaction control so nested scopes can join an outer one.
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _emit_begin(conn: Any) -> None:
            conn.exec_driver_sql("BEGIN")

        return engine

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow
    if pool_timeout is not None:
        pool_kwargs["pool_timeout"] = pool_timeout

    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class WorkspineSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Objects handed between workers stay readable after the scope commits.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def workspine_session_factory(engine: Engine) -> sessionmaker[WorkspineSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``WorkspineSession`` instances."""
    return sessionmaker(bind=engine, class_=WorkspineSession)
