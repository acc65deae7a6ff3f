"""
MODULE OVERVIEW:
The session value object and its pure transition functions.

WHAT IS HAPPENING HERE:
A `Session` is immutable. Each transition takes the current session and returns a new
one, or raises `InvalidTransition` when the move is not allowed from the current state.
The controller is the only caller, and it only swaps sessions at operation
boundaries, never in the middle of a stream.

    idle/expired/authenticated --begin_login--> authenticating
    authenticating --login_succeeded--> authenticated   (token stored)
    authenticating --login_failed-----> idle
    authenticated --begin_chat--------> busy
    busy --chat_succeeded-------------> authenticated
    busy --chat_failed----------------> expired         (token cleared)
"""
from enum import Enum

import httpx
from pydantic import BaseModel, ConfigDict, model_validator


class SessionStatus(str, Enum):
    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    BUSY = "busy"
    EXPIRED = "expired"


TOKEN_STATES = {SessionStatus.AUTHENTICATED, SessionStatus.BUSY}
IN_FLIGHT_STATES = {SessionStatus.AUTHENTICATING, SessionStatus.BUSY}
LOGIN_READY_STATES = {SessionStatus.IDLE, SessionStatus.EXPIRED, SessionStatus.AUTHENTICATED}


class InvalidTransition(ValueError):
    def __init__(self, action: str, status: SessionStatus):
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action} while session is {status.value}")


class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: SessionStatus = SessionStatus.IDLE
    token: str | None = None
    host: str = ""

    @model_validator(mode="after")
    def _token_matches_status(self):
        has_token = bool(self.token)
        if has_token != (self.status in TOKEN_STATES):
            raise ValueError(f"token presence does not match status {self.status.value}")
        return self

    @property
    def in_flight(self) -> bool:
        return self.status in IN_FLIGHT_STATES


def normalize_host(raw: str) -> str:
    """
    Trims whitespace and trailing slashes. Returns "" unless what is left is an
    absolute http(s) URL with a host part.
    """
    candidate = raw.strip().rstrip("/")
    if not candidate.startswith("http"):
        return ""
    try:
        url = httpx.URL(candidate)
    except httpx.InvalidURL:
        return ""
    if url.scheme not in ("http", "https") or not url.host:
        return ""
    return candidate


def _require(session: Session, allowed: set[SessionStatus], action: str) -> None:
    if session.status not in allowed:
        raise InvalidTransition(action, session.status)


def begin_login(session: Session, host: str) -> Session:
    _require(session, LOGIN_READY_STATES, "start login")
    return Session(status=SessionStatus.AUTHENTICATING, token=None, host=host)


def login_succeeded(session: Session, token: str) -> Session:
    _require(session, {SessionStatus.AUTHENTICATING}, "complete login")
    return session.model_copy(update={"status": SessionStatus.AUTHENTICATED, "token": token})


def login_failed(session: Session) -> Session:
    _require(session, {SessionStatus.AUTHENTICATING}, "fail login")
    return session.model_copy(update={"status": SessionStatus.IDLE, "token": None})


def begin_chat(session: Session) -> Session:
    _require(session, {SessionStatus.AUTHENTICATED}, "send a message")
    return session.model_copy(update={"status": SessionStatus.BUSY})


def chat_succeeded(session: Session) -> Session:
    _require(session, {SessionStatus.BUSY}, "complete chat")
    return session.model_copy(update={"status": SessionStatus.AUTHENTICATED})


def chat_failed(session: Session) -> Session:
    _require(session, {SessionStatus.BUSY}, "fail chat")
    return session.model_copy(update={"status": SessionStatus.EXPIRED, "token": None})
