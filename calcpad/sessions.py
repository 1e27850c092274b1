"""
In-memory session store holding one calculator state per session.
"""
import logging
import threading
import uuid
from typing import Any, Dict, Optional

from .config import MAX_SESSIONS
from .state import EMPTY_STATE, CalculatorState, InputEvent, transition

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Base class for session store errors."""
    pass


class SessionNotFoundError(SessionError):
    """Raised when a session id is not known to the store."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class SessionLimitError(SessionError):
    """Raised when the store is already holding the maximum number of sessions."""
    pass


class SessionStore:
    """Holds the current state of every open calculator session."""

    def __init__(self, max_sessions: int = MAX_SESSIONS):
        """
        Initialize the store.

        Args:
            max_sessions: Maximum number of sessions kept at once
        """
        self.max_sessions = max_sessions
        self._states: Dict[str, CalculatorState] = {}
        self._lock = threading.Lock()

    def create(self) -> str:
        """
        Open a new session in the empty state.

        Returns:
            The new session id

        Raises:
            SessionLimitError: If the store is full
        """
        with self._lock:
            if len(self._states) >= self.max_sessions:
                raise SessionLimitError(
                    f"Session limit of {self.max_sessions} reached. "
                    "Close an existing session or increase MAX_SESSIONS."
                )
            session_id = uuid.uuid4().hex
            self._states[session_id] = EMPTY_STATE

        logger.info(f"Opened session {session_id}")
        return session_id

    def get(self, session_id: str) -> CalculatorState:
        """Get the current state of a session."""
        with self._lock:
            state = self._states.get(session_id)
        if state is None:
            raise SessionNotFoundError(session_id)
        return state

    def dispatch(self, session_id: str, event: InputEvent) -> CalculatorState:
        """
        Apply one input event to a session.

        Events for the store are applied one at a time, in the order they
        arrive.

        Args:
            session_id: Session to update
            event: Input event to apply

        Returns:
            The session's new state
        """
        with self._lock:
            state = self._states.get(session_id)
            if state is None:
                raise SessionNotFoundError(session_id)
            new_state = transition(state, event)
            self._states[session_id] = new_state

        logger.debug(f"Session {session_id}: {type(event).__name__} -> {new_state}")
        return new_state

    def close(self, session_id: str) -> None:
        """Drop a session."""
        with self._lock:
            if self._states.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.info(f"Closed session {session_id}")

    def clear(self) -> None:
        """Drop every session."""
        with self._lock:
            self._states.clear()
        logger.info("Cleared session store")

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the store."""
        with self._lock:
            active = len(self._states)
        return {
            "active_sessions": active,
            "max_sessions": self.max_sessions,
        }


# Global session store instance
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the global session store instance."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store
