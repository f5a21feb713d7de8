"""Tests for SessionScope, NullScope and the scope-provider binding."""

import pytest

from tests._support.models import FakeUser
from workspine.core.protocols import AtomicScope
from workspine.orchestration.scope import (
    AbortScope,
    NullScope,
    SessionScope,
    bind_scope_provider,
    current_scope_provider,
)


class TestSessionScope:
    """Commit on return, undo on abort, join when nested."""

    def test_satisfies_protocol(self, session):
        assert isinstance(SessionScope(session), AtomicScope)

    def test_commits_on_normal_return(self, session, users, reload):
        user1, _, _ = users

        def body():
            user1.first_name = "ddd"
            session.flush()
            return "done"

        assert SessionScope(session).run(body) == "done"
        assert reload(user1).first_name == "ddd"

    def test_abort_undoes_and_does_not_raise(self, session, users, reload):
        user1, _, _ = users

        def body():
            user1.first_name = "ddd"
            session.flush()
            raise AbortScope()

        assert SessionScope(session).run(body) is None
        assert reload(user1).first_name == "asd"

    def test_other_exceptions_roll_back_and_propagate(self, session, users, reload):
        user1, _, _ = users

        def body():
            user1.first_name = "ddd"
            session.flush()
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            SessionScope(session).run(body)
        assert reload(user1).first_name == "asd"

    def test_nested_scope_joins_outer(self, session, users, reload):
        user1, user2, _ = users
        scope = SessionScope(session)

        def inner():
            user2.email = "inner@x"
            session.flush()
            raise AbortScope()

        def outer():
            user1.first_name = "outer"
            session.flush()
            scope.run(inner)
            assert session.in_transaction()

        scope.run(outer)
        assert reload(user1).first_name == "outer"
        assert reload(user2).email == "asd1@asd1"

    def test_outer_abort_undoes_committed_inner_scope(self, session, users, reload):
        user1, _, _ = users
        scope = SessionScope(session)

        def inner():
            user1.first_name = "inner"
            session.flush()

        def outer():
            scope.run(inner)
            raise AbortScope()

        scope.run(outer)
        assert reload(user1).first_name == "asd"

    def test_joins_caller_owned_transaction(self, session, users, reload):
        user1, _, _ = users

        def body():
            user1.first_name = "ddd"
            session.flush()

        with session.begin():
            SessionScope(session).run(body)
            assert reload(user1).first_name == "asd"
        assert reload(user1).first_name == "ddd"


class TestAutobegunTransaction:
    """A transaction opened implicitly by a read is adopted, not joined."""

    @pytest.fixture
    def loaded(self, session, users):
        session.expunge_all()
        user = session.get(FakeUser, users[0].id)
        assert session.in_transaction()
        return user

    def test_commits_after_read(self, session, loaded, reload):
        def body():
            loaded.first_name = "new"
            session.flush()

        SessionScope(session).run(body)
        assert not session.in_transaction()
        session.close()
        assert reload(loaded).first_name == "new"

    def test_abort_after_read_rolls_back(self, session, loaded, reload):
        def body():
            loaded.first_name = "new"
            session.flush()
            raise AbortScope()

        assert SessionScope(session).run(body) is None
        assert not session.in_transaction()
        assert reload(loaded).first_name == "asd"

    def test_exception_after_read_rolls_back(self, session, loaded, reload):
        def body():
            loaded.first_name = "new"
            session.flush()
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            SessionScope(session).run(body)
        assert not session.in_transaction()
        assert reload(loaded).first_name == "asd"

    def test_nested_scope_joins_adopted_transaction(self, session, loaded, users, reload):
        scope = SessionScope(session)

        def inner():
            other = session.get(FakeUser, users[1].id)
            other.email = "inner@x"
            session.flush()
            raise AbortScope()

        def outer():
            loaded.first_name = "outer"
            session.flush()
            scope.run(inner)
            assert session.in_transaction()

        scope.run(outer)
        session.close()
        assert reload(loaded).first_name == "outer"
        assert reload(users[1]).email == "asd1@asd1"

    def test_explicit_savepoint_is_joined(self, session, loaded, reload):
        def body():
            loaded.first_name = "new"
            session.flush()

        savepoint = session.begin_nested()
        SessionScope(session).run(body)
        assert session.in_nested_transaction()
        savepoint.rollback()
        session.commit()
        assert reload(loaded).first_name == "asd"


class TestNullScope:
    def test_returns_body_value(self):
        assert NullScope().run(lambda: 5) == 5

    def test_abort_stops_body_without_undo(self):
        effects = []

        def body():
            effects.append(1)
            raise AbortScope()

        assert NullScope().run(body) is None
        assert effects == [1]

    def test_other_exceptions_propagate(self):
        def body():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            NullScope().run(body)


class TestScopeProviderBinding:
    def test_nothing_bound_by_default(self):
        assert current_scope_provider() is None

    def test_bind_and_reset(self):
        provider = NullScope()
        with bind_scope_provider(provider) as bound:
            assert bound is provider
            assert current_scope_provider() is provider
        assert current_scope_provider() is None

    def test_inner_binding_wins(self):
        outer, inner = NullScope(), NullScope()
        with bind_scope_provider(outer):
            with bind_scope_provider(inner):
                assert current_scope_provider() is inner
            assert current_scope_provider() is outer
