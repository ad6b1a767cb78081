import pytest

from kubechange.audit import clear_audit_log, get_audit_log
from kubechange.session import ChangeManager, ChangeSession, SessionNotFoundError
from kubechange.state import SessionSignal, State, TransitionError


def test_new_session_starts_parsing():
    session = ChangeSession("test-session-new")
    assert session.state == State.PARSING
    assert session.id == "test-session-new"


def test_transition_logs_audit_entry():
    session_id = "test-session-transition"
    clear_audit_log(session_id)
    session = ChangeSession(session_id)

    assert session.transition(SessionSignal.CONFIRM) == State.PLANNING
    assert session.state == State.PLANNING

    entries = [e for e in get_audit_log(session_id) if e.action == "state_transition"]
    assert len(entries) == 1
    assert entries[0].actor == "session"
    assert entries[0].details["from_state"] == "PARSING"
    assert entries[0].details["to_state"] == "PLANNING"
    assert entries[0].details["signal"] == "Confirm"


def test_multiple_transitions_logged():
    session_id = "test-session-multi-transition"
    clear_audit_log(session_id)
    session = ChangeSession(session_id)

    for _ in range(4):
        session.transition(SessionSignal.CONFIRM)

    assert session.state == State.COMPLETED
    transitions = [e for e in get_audit_log(session_id) if e.action == "state_transition"]
    assert len(transitions) == 4


@pytest.mark.parametrize("state", [State.COMPLETED, State.FAILED])
def test_terminal_session_rejects_signals_and_keeps_state(state):
    session_id = f"test-terminal-{state.name}"
    clear_audit_log(session_id)
    session = ChangeSession(session_id, state)
    for signal in SessionSignal:
        with pytest.raises(TransitionError):
            session.transition(signal)
        assert session.state == state
    assert get_audit_log(session_id) == []


@pytest.mark.parametrize(
    "state",
    [State.PARSING, State.CLARIFYING, State.PLANNING, State.REVIEWING, State.EXECUTING],
)
def test_abort_then_terminal(state):
    session = ChangeSession("test-session-abort", state)
    session.transition(SessionSignal.ABORT)
    assert session.state == State.FAILED
    with pytest.raises(TransitionError):
        session.transition(SessionSignal.CONFIRM)


def test_clarify_loop():
    session = ChangeSession("test-session-clarify")
    session.transition(SessionSignal.MODIFY)
    assert session.state == State.CLARIFYING
    session.transition(SessionSignal.MODIFY)
    assert session.state == State.CLARIFYING
    session.transition(SessionSignal.CONFIRM)
    assert session.state == State.PARSING
    session.transition(SessionSignal.MODIFY)
    assert session.state == State.CLARIFYING


def test_manager_create_and_get():
    manager = ChangeManager()
    session_id = manager.create_session()
    session = manager.get_session(session_id)
    assert session.id == session_id
    assert session.state == State.PARSING


def test_manager_ids_are_unique():
    manager = ChangeManager()
    ids = {manager.create_session() for _ in range(10)}
    assert len(ids) == 10


def test_manager_signal_session():
    manager = ChangeManager()
    session_id = manager.create_session()
    assert manager.signal_session(session_id, SessionSignal.CONFIRM) == State.PLANNING
    assert manager.get_session(session_id).state == State.PLANNING
    entries = get_audit_log(session_id)
    assert [e.action for e in entries] == ["state_transition"]


def test_manager_invalid_signal_keeps_state():
    manager = ChangeManager()
    session_id = manager.create_session()
    with pytest.raises(TransitionError):
        manager.signal_session(session_id, SessionSignal.PROCEED)
    assert manager.get_session(session_id).state == State.PARSING


def test_manager_close_session():
    manager = ChangeManager()
    session_id = manager.create_session()
    manager.close_session(session_id)
    with pytest.raises(SessionNotFoundError):
        manager.get_session(session_id)


def test_manager_unknown_session_errors():
    manager = ChangeManager()
    with pytest.raises(SessionNotFoundError):
        manager.get_session("missing")
    with pytest.raises(SessionNotFoundError):
        manager.signal_session("missing", SessionSignal.CONFIRM)
    with pytest.raises(SessionNotFoundError):
        manager.close_session("missing")