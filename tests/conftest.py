"""
Shared pytest fixtures and configuration for workspine tests.

This module provides:
- A file-backed SQLite engine per test (real transactions and savepoints)
- A session, a bound ``SessionScope`` and three persisted users
- A ``reload`` helper reading committed state through a separate session

Usage:
    def test_something(session, users, reload):
        ...
"""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog
from sqlalchemy.engine import Engine

from tests._support.models import Base, FakeUser
from workspine.core.orm.session import WorkspineSession, create_workspine_engine
from workspine.core.settings import clear_settings_cache
from workspine.orchestration.scope import SessionScope, bind_scope_provider


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on the fixtures they use."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "engine" in getattr(item, "fixturenames", ()):
            item.add_marker(pytest.mark.integration)
        elif not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings_cache() -> Generator[None, None, None]:
    """Settings are cached per process; reset around every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """SQLite engine on a temporary file with the test tables created."""
    eng = create_workspine_engine(f"sqlite:///{tmp_path / 'workspine.db'}", echo=False)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[WorkspineSession, None, None]:
    with WorkspineSession(bind=engine) as sess:
        yield sess


@pytest.fixture
def scope(session: WorkspineSession) -> Generator[SessionScope, None, None]:
    """SessionScope bound as the default provider for orchestrators."""
    provider = SessionScope(session)
    with bind_scope_provider(provider):
        yield provider


@pytest.fixture
def users(session: WorkspineSession) -> tuple[FakeUser, FakeUser, FakeUser]:
    """Three committed users."""
    user1 = FakeUser(email="asd", first_name="asd", last_name="asd")
    user2 = FakeUser(email="asd1@asd1", first_name="asd1", last_name="asd1")
    user3 = FakeUser(email="asd2", first_name="asd2", last_name="asd2")
    session.add_all([user1, user2, user3])
    session.commit()
    return user1, user2, user3


@pytest.fixture
def reload(engine: Engine) -> Callable[[FakeUser], FakeUser]:
    """Read a user's committed state through a separate session."""

    def _reload(user: FakeUser) -> FakeUser:
        with WorkspineSession(bind=engine) as other:
            return other.get(FakeUser, user.id)

    return _reload
