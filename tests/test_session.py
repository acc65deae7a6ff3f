import pytest
from pydantic import ValidationError

from client import session as transitions
from client.session import InvalidTransition, Session, SessionStatus, normalize_host


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("http://localhost:8082", "http://localhost:8082"),
        ("  https://chat.example.com///  ", "https://chat.example.com"),
        ("http://10.0.0.5:9000/api/", "http://10.0.0.5:9000/api"),
        ("example.com ", ""),
        ("", ""),
        ("   ", ""),
        ("ftp://example.com", ""),
        ("http://", ""),
        ("httpx://example.com", ""),
    ],
)
def test_normalize_host(raw, expected):
    assert normalize_host(raw) == expected


def test_new_session_is_idle_without_token():
    session = Session()
    assert session.status == SessionStatus.IDLE
    assert session.token is None
    assert not session.in_flight


@pytest.mark.parametrize(
    "status, token",
    [
        (SessionStatus.AUTHENTICATED, None),
        (SessionStatus.BUSY, ""),
        (SessionStatus.IDLE, "abc"),
        (SessionStatus.EXPIRED, "abc"),
        (SessionStatus.AUTHENTICATING, "abc"),
    ],
)
def test_token_must_match_status(status, token):
    with pytest.raises(ValidationError):
        Session(status=status, token=token)


def test_session_is_immutable():
    with pytest.raises(ValidationError):
        Session().status = SessionStatus.BUSY


def test_happy_path_round_trip():
    s = transitions.begin_login(Session(), "http://h")
    assert s.status == SessionStatus.AUTHENTICATING and s.in_flight and s.host == "http://h"

    s = transitions.login_succeeded(s, "tok")
    assert s.status == SessionStatus.AUTHENTICATED and s.token == "tok"

    s = transitions.begin_chat(s)
    assert s.status == SessionStatus.BUSY and s.token == "tok" and s.in_flight

    s = transitions.chat_succeeded(s)
    assert s.status == SessionStatus.AUTHENTICATED and s.token == "tok"


def test_failed_login_returns_to_idle():
    s = transitions.login_failed(transitions.begin_login(Session(), "http://h"))
    assert s.status == SessionStatus.IDLE
    assert s.token is None


def test_failed_chat_expires_and_clears_token():
    s = transitions.login_succeeded(transitions.begin_login(Session(), "http://h"), "tok")
    s = transitions.chat_failed(transitions.begin_chat(s))
    assert s.status == SessionStatus.EXPIRED
    assert s.token is None
    assert s.host == "http://h"


def test_login_from_expired_or_authenticated_drops_old_token():
    authed = transitions.login_succeeded(transitions.begin_login(Session(), "http://h"), "old")
    relog = transitions.begin_login(authed, "http://other")
    assert relog.token is None
    assert relog.host == "http://other"

    expired = transitions.chat_failed(transitions.begin_chat(authed))
    assert transitions.begin_login(expired, "http://h").status == SessionStatus.AUTHENTICATING


@pytest.mark.parametrize(
    "transition, args",
    [
        (transitions.begin_chat, ()),
        (transitions.chat_succeeded, ()),
        (transitions.chat_failed, ()),
        (transitions.login_succeeded, ("tok",)),
        (transitions.login_failed, ()),
    ],
)
def test_invalid_transitions_from_idle(transition, args):
    with pytest.raises(InvalidTransition):
        transition(Session(), *args)


def test_cannot_login_while_busy():
    authed = transitions.login_succeeded(transitions.begin_login(Session(), "http://h"), "tok")
    busy = transitions.begin_chat(authed)
    with pytest.raises(InvalidTransition) as exc_info:
        transitions.begin_login(busy, "http://h")
    assert exc_info.value.status == SessionStatus.BUSY
