import pytest

from api.session import (
    ConversationHistory,
    SessionBusyError,
    SessionContext,
    SessionRegistry,
)


def test_history_keeps_last_five_fifo():
    session = SessionContext(session_id="s1")
    for i in range(1, 7):
        session.record(f"cmd {i}", f"reply {i}")

    users = [e.user for e in session.history]
    assert len(session.history) == 5
    assert users == ["cmd 2", "cmd 3", "cmd 4", "cmd 5", "cmd 6"]
    assert session.last_response == "reply 6"


def test_history_size_is_configurable():
    history = ConversationHistory(maxlen=2)
    session = SessionContext(session_id="s1", history=history)
    for i in range(3):
        session.record(str(i), str(i))
    assert [e.user for e in history] == ["1", "2"]


def test_second_submission_is_refused_while_in_flight():
    session = SessionContext(session_id="s1")
    with session.in_flight():
        with pytest.raises(SessionBusyError):
            with session.in_flight():
                pass
    assert session.busy is False


def test_guard_is_released_after_error():
    session = SessionContext(session_id="s1")
    with pytest.raises(ValueError):
        with session.in_flight():
            raise ValueError("boom")
    with session.in_flight():
        assert session.busy


def test_clear_and_serialize():
    session = SessionContext(session_id="s1")
    session.record("hi", "hello")
    data = session.to_dict()
    assert data["history"][0]["user"] == "hi"
    assert data["last_response"] == "hello"

    session.clear()
    assert session.to_dict() == {"history": [], "last_response": ""}


def test_registry_returns_same_session():
    registry = SessionRegistry()
    assert registry.get("a") is registry.get("a")
    assert registry.get("a") is not registry.get("b")
