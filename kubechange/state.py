"""Change-session state machine: states, signals and transitions."""

from __future__ import annotations

from enum import IntEnum


class State(IntEnum):
    """Position of a change session in its workflow."""

    PARSING = 0
    CLARIFYING = 1
    PLANNING = 2
    REVIEWING = 3
    EXECUTING = 4
    COMPLETED = 5
    FAILED = 6

    def __str__(self) -> str:
        return self.name

    @property
    def is_terminal(self) -> bool:
        """True for states that accept no further signals."""
        return self in (State.COMPLETED, State.FAILED)


class SessionSignal(IntEnum):
    """Signals a user sends to drive a session between states."""

    CONFIRM = 0
    ABORT = 1
    MODIFY = 2
    PROCEED = 3

    def __str__(self) -> str:
        return self.name.capitalize()


class TransitionError(Exception):
    """Raised when a signal is not valid for the current state."""

    def __init__(self, from_state: State | int, signal: SessionSignal | int, message: str) -> None:
        super().__init__(f"invalid transition: {message}")
        self.from_state = from_state
        self.signal = signal
        self.message = message


_TRANSITIONS: dict[State, dict[SessionSignal, State]] = {
    State.PARSING: {
        SessionSignal.CONFIRM: State.PLANNING,
        SessionSignal.MODIFY: State.CLARIFYING,
        SessionSignal.ABORT: State.FAILED,
    },
    State.CLARIFYING: {
        SessionSignal.CONFIRM: State.PARSING,
        SessionSignal.MODIFY: State.CLARIFYING,
        SessionSignal.ABORT: State.FAILED,
    },
    State.PLANNING: {
        SessionSignal.CONFIRM: State.REVIEWING,
        SessionSignal.MODIFY: State.PLANNING,
        SessionSignal.ABORT: State.FAILED,
    },
    State.REVIEWING: {
        SessionSignal.CONFIRM: State.EXECUTING,
        SessionSignal.MODIFY: State.PLANNING,
        SessionSignal.ABORT: State.FAILED,
    },
    State.EXECUTING: {
        SessionSignal.CONFIRM: State.COMPLETED,
        SessionSignal.ABORT: State.FAILED,
    },
}


def transition(current_state: State | int, signal: SessionSignal | int) -> State:
    """Return the state reached from ``current_state`` on ``signal``.

    Raises TransitionError when the signal is not allowed there.
    """
    try:
        state = State(current_state)
    except ValueError:
        raise TransitionError(current_state, signal, "invalid state transition") from None

    if state.is_terminal:
        raise TransitionError(state, signal, "terminal state has no transitions")

    try:
        return _TRANSITIONS[state][SessionSignal(signal)]
    except (KeyError, ValueError):
        raise TransitionError(
            state, signal, f"signal not allowed from {state.name}"
        ) from None