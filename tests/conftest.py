import json

import httpx
import pytest

from client.api_client import ChatApiClient
from client.controller import SessionController
from client.renderer import RecordingRenderer

HOST = "http://chat.test"


class FakeChatService:
    """
    Scriptable stand-in for the remote service, mounted through httpx.MockTransport.
    Records every request so tests can assert on what went over the wire.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.login_response = httpx.Response(200, json={"token": "tok-1"})
        self.chat_response_factory = lambda request: httpx.Response(200, content=b"data: ok\n\n")

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def json_body(self, index: int) -> dict:
        return json.loads(self.requests[index].content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/login":
            if isinstance(self.login_response, Exception):
                raise self.login_response
            return self.login_response
        if request.url.path == "/chat":
            return self.chat_response_factory(request)
        return httpx.Response(404, text="not found")

    def stream_fragments(self, fragments, status_code: int = 200):
        async def body():
            for fragment in fragments:
                yield fragment

        self.chat_response_factory = lambda request: httpx.Response(status_code, content=body())


@pytest.fixture
def service():
    return FakeChatService()


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def controller(service, renderer):
    client = httpx.AsyncClient(transport=httpx.MockTransport(service.handler))
    return SessionController(renderer, ChatApiClient(client), default_host=HOST)

