"""
MODULE OVERVIEW:
The HTTP client for the chat service: one call to log in, one streaming call to chat.

WHAT IS HAPPENING HERE:
We use HTTPX. Login is a plain request/response. Chat uses the `stream()` context
manager so the response body stays open while we read it fragment by fragment.
We hand the raw bytes (`aiter_bytes()`, not `aiter_text()`) to `StreamDecoder`,
because the decoder itself is responsible for characters split across fragments.

Any httpx failure is translated into our own transport errors here, so the layers
above only ever deal with `ChatClientError`.
"""
from contextlib import aclosing, asynccontextmanager
from typing import AsyncIterator

import httpx
from loguru import logger

from client.stream_decoder import StreamDecoder, StreamEvent
from shared.config import settings
from shared.errors import (
    ChatRejected,
    ChatTransportError,
    LoginRejected,
    LoginTransportError,
)
from shared.models import ChatRequest, LoginRequest, LoginResponse


class ChatApiClient:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        login_timeout_s: float = settings.LOGIN_TIMEOUT_S,
        chat_timeout_s: float = settings.CHAT_TIMEOUT_S,
    ):
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()
        self.login_timeout_s = login_timeout_s
        self.chat_timeout_s = chat_timeout_s

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def login(self, host: str, username: str, password: str) -> str:
        body = LoginRequest(username=username.strip(), password=password)
        try:
            response = await self.client.post(
                f"{host}/login",
                json=body.model_dump(),
                timeout=self.login_timeout_s,
            )
        except httpx.HTTPError as e:
            raise LoginTransportError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            raise LoginRejected(response.status_code, response.text)

        try:
            return LoginResponse.model_validate(response.json()).token
        except ValueError as e:
            # Covers JSONDecodeError, UnicodeDecodeError and pydantic ValidationError
            logger.warning(f"Login reply from {host} carried no usable token: {e}")
            raise LoginRejected(response.status_code, "empty token") from e

    @asynccontextmanager
    async def open_chat_stream(
        self, host: str, token: str, message: str
    ) -> AsyncIterator[AsyncIterator[StreamEvent]]:
        """
        Opens one chat call and yields the lazy event sequence of its body.
        A non-2xx reply raises `ChatRejected` on entry, before any decoder exists.
        The response is closed when the block exits, however it exits.
        """
        body = ChatRequest(message=message)
        timeout = httpx.Timeout(self.chat_timeout_s, connect=self.login_timeout_s)
        try:
            async with self.client.stream(
                "POST",
                f"{host}/chat",
                json=body.model_dump(),
                headers={"Authorization": f"Bearer {token}", "Accept": "text/event-stream"},
                timeout=timeout,
            ) as response:
                if not response.is_success:
                    await response.aread()
                    raise ChatRejected(response.status_code, response.text)

                decoder = StreamDecoder()
                async with aclosing(decoder.iter_events(response.aiter_bytes())) as events:
                    yield events
        except httpx.HTTPError as e:
            raise ChatTransportError(str(e) or e.__class__.__name__) from e
