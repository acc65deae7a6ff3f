"""
MODULE OVERVIEW:
The session controller: the single owner of login state and the in-flight guard.

WHAT IS HAPPENING HERE:
The UI layer calls exactly two things: `submit_login()` and `submit_message()`.
Each call is one "operation". Inside an operation we:
  1. check the single-flight guard (a second submit while one is running is ignored),
  2. move the session into its in-flight state and tell the renderer,
  3. await the network (the only suspension points),
  4. move the session to its success or failure state and tell the renderer again.

Every `ChatClientError` is caught right here, at the operation boundary. It becomes a
hint plus a status update, and is kept in `last_error` for callers that care.
Any chat failure clears the token: we cannot know what went wrong on the server side,
so the safe move is to ask for a fresh login.
Anything else propagates, but only after the session has left its in-flight state,
so the guard can never stay stuck.
"""
from loguru import logger

from client import session as transitions
from client.api_client import ChatApiClient
from client.renderer import Renderer, Severity
from client.session import Session, SessionStatus
from client.stream_decoder import StreamError, TextDelta
from shared.config import settings
from shared.errors import ChatClientError, InvalidHost, NotAuthenticated, StreamAborted

STATUS_DISPLAY: dict[SessionStatus, tuple[Severity, str]] = {
    SessionStatus.IDLE: ("idle", "Not logged in"),
    SessionStatus.AUTHENTICATING: ("busy", "Logging in…"),
    SessionStatus.AUTHENTICATED: ("ok", "Logged in"),
    SessionStatus.BUSY: ("busy", "Chatting…"),
    SessionStatus.EXPIRED: ("idle", "Re-login required"),
}


class SessionController:
    def __init__(
        self,
        renderer: Renderer,
        api: ChatApiClient | None = None,
        default_host: str = settings.CHAT_HOST,
    ):
        self.renderer = renderer
        self.api = api or ChatApiClient()
        self.default_host = default_host
        self.last_error: ChatClientError | None = None
        self._session = Session()

        self.renderer.lock_input(True)
        self._show_status()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def busy(self) -> bool:
        return self._session.in_flight

    async def aclose(self) -> None:
        await self.api.aclose()

    def _transition(self, new_session: Session) -> None:
        logger.debug(f"Session {self._session.status.value} -> {new_session.status.value}")
        self._session = new_session

    def _show_status(self) -> None:
        severity, text = STATUS_DISPLAY[self._session.status]
        self.renderer.set_status(severity, text)

    async def submit_login(self, username: str, password: str, host: str | None = None) -> bool:
        """
        Returns True once a token is held. Returns False when the attempt was ignored
        (another operation is running) or failed (see `last_error`).
        """
        if self.busy:
            logger.debug("Login submit ignored: operation already in flight")
            return False

        raw_host = host if host and host.strip() else self.default_host
        base_url = transitions.normalize_host(raw_host)
        if not base_url:
            self._fail("login", InvalidHost(raw_host))
            return False

        self.last_error = None
        self._transition(transitions.begin_login(self._session, base_url))
        self._show_status()
        self.renderer.set_hint("login", "Requesting token…")
        self.renderer.lock_input(True)

        try:
            token = await self.api.login(base_url, username, password)
        except ChatClientError as e:
            self._transition(transitions.login_failed(self._session))
            self._show_status()
            self._fail("login", e)
            return False
        else:
            self._transition(transitions.login_succeeded(self._session, token))
            self._show_status()
            self.renderer.set_hint("login", "Token acquired, start chatting!")
            self.renderer.lock_input(False)
            logger.info(f"Logged in to {base_url}")
            return True
        finally:
            # Only an unexpected exception can leave the session in flight here
            if self._session.status == SessionStatus.AUTHENTICATING:
                logger.error("Login aborted by an unexpected error")
                self._transition(transitions.login_failed(self._session))
                self._show_status()

    async def submit_message(self, text: str) -> bool:
        """
        Returns True when the full response streamed in. Returns False when the message
        was ignored (empty text, operation in flight) or the chat failed.
        """
        if self.busy:
            logger.debug("Message submit ignored: operation already in flight")
            return False
        if self._session.status != SessionStatus.AUTHENTICATED:
            self._fail("chat", NotAuthenticated())
            return False
        message = text.strip()
        if not message:
            return False

        self.last_error = None
        self._transition(transitions.begin_chat(self._session))
        self.renderer.append_message("user", message)
        self.renderer.set_hint("chat", "Waiting for the model…")
        self._show_status()
        self.renderer.lock_input(True)

        try:
            await self._stream_reply(message)
        except ChatClientError as e:
            self.renderer.append_message("error", str(e))
            self._transition(transitions.chat_failed(self._session))
            self._show_status()
            self._fail("chat", e)
            return False
        else:
            self._transition(transitions.chat_succeeded(self._session))
            self._show_status()
            self.renderer.set_hint("chat", "Done.")
            return True
        finally:
            if self._session.status == SessionStatus.BUSY:
                logger.error("Chat aborted by an unexpected error")
                self._transition(transitions.chat_failed(self._session))
                self._show_status()
            self.renderer.lock_input(False)

    async def _stream_reply(self, message: str) -> None:
        async with self.api.open_chat_stream(
            self._session.host, self._session.token, message
        ) as events:
            bubble = self.renderer.append_message("model", "")
            async for event in events:
                if isinstance(event, StreamError):
                    raise StreamAborted(event.message)
                if isinstance(event, TextDelta):
                    bubble.append_text(event.text)

    def _fail(self, target: str, error: ChatClientError) -> None:
        self.last_error = error
        logger.warning(f"{target} failed: {error}")
        self.renderer.set_hint(target, str(error), is_error=True)
