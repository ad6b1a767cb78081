"""Change sessions and an in-memory manager for them."""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field

from kubechange.audit import log
from kubechange.state import SessionSignal, State, transition


class SessionNotFoundError(LookupError):
    """Raised when a session ID is not known to the manager."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"session not found: {session_id}")
        self.session_id = session_id


@dataclass
class ChangeSession:
    """A single change operation moving through the state machine."""

    id: str
    state: State = field(default=State.PARSING)

    def transition(self, signal: SessionSignal) -> State:
        """Apply ``signal``, record the move in the audit log and return the new state.

        The state is left unchanged when the transition is rejected.
        """
        old_state = self.state
        new_state = transition(old_state, signal)
        self.state = new_state
        log(
            self.id,
            "state_transition",
            "session",
            {
                "from_state": str(old_state),
                "to_state": str(new_state),
                "signal": str(SessionSignal(signal)),
            },
        )
        return new_state


class ChangeManager:
    """Creates, looks up, signals and closes change sessions."""

    def __init__(self) -> None:
        self._sessions: dict[str, ChangeSession] = {}
        self._lock = threading.Lock()

    def create_session(self) -> str:
        """Start a new session in the PARSING state and return its ID."""
        session_id = str(uuid.uuid4())
        with self._lock:
            self._sessions[session_id] = ChangeSession(session_id)
        return session_id

    def get_session(self, session_id: str) -> ChangeSession:
        """Return the session with ``session_id``."""
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise SessionNotFoundError(session_id) from None

    def signal_session(self, session_id: str, signal: SessionSignal) -> State:
        """Send ``signal`` to a session and return its new state."""
        session = self.get_session(session_id)
        with self._lock:
            return session.transition(signal)

    def close_session(self, session_id: str) -> None:
        """Remove a finished or abandoned session."""
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)