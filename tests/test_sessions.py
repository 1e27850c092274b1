"""
Tests for the session store.
"""
import pytest
from calcpad.sessions import (
    SessionError, SessionLimitError, SessionNotFoundError, SessionStore,
)
from calcpad.state import EMPTY_STATE, AddDigit, Clear


class TestSessionStore:
    """Tests for SessionStore."""

    def test_create_starts_empty(self):
        """Test that a new session holds the empty state."""
        store = SessionStore()
        session_id = store.create()

        assert store.get(session_id) == EMPTY_STATE

    def test_dispatch_updates_state(self):
        """Test applying events in order."""
        store = SessionStore()
        session_id = store.create()

        store.dispatch(session_id, AddDigit("4"))
        state = store.dispatch(session_id, AddDigit("2"))

        assert state.current_operand == "42"
        assert store.get(session_id) == state

    def test_sessions_are_independent(self):
        """Test that events only touch their own session."""
        store = SessionStore()
        first = store.create()
        second = store.create()

        store.dispatch(first, AddDigit("9"))

        assert store.get(second) == EMPTY_STATE

    def test_unknown_session(self):
        """Test lookups and dispatch on an unknown id."""
        store = SessionStore()

        with pytest.raises(SessionNotFoundError):
            store.get("missing")
        with pytest.raises(SessionNotFoundError):
            store.dispatch("missing", Clear())
        with pytest.raises(SessionNotFoundError):
            store.close("missing")

    def test_close(self):
        """Test closing a session."""
        store = SessionStore()
        session_id = store.create()
        store.close(session_id)

        with pytest.raises(SessionNotFoundError):
            store.get(session_id)

    def test_session_limit(self):
        """Test that the store refuses sessions past its limit."""
        store = SessionStore(max_sessions=1)
        store.create()

        with pytest.raises(SessionLimitError):
            store.create()

    def test_errors_share_base_class(self):
        """Test the exception hierarchy."""
        assert issubclass(SessionNotFoundError, SessionError)
        assert issubclass(SessionLimitError, SessionError)

    def test_stats(self):
        """Test store statistics."""
        store = SessionStore(max_sessions=5)
        store.create()
        store.create()

        assert store.get_stats() == {"active_sessions": 2, "max_sessions": 5}

        store.clear()
        assert store.get_stats()["active_sessions"] == 0
