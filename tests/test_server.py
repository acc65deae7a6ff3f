import httpx
import pytest

from client.api_client import ChatApiClient
from client.controller import SessionController
from client.renderer import RecordingRenderer
from client.session import SessionStatus
from server.main import app
from server.responder import SIMULATED_FAILURE, split_into_chunks
from server.token_store import TokenStore
from shared.config import settings
from shared.errors import StreamAborted

BASE_URL = "http://testserver"


@pytest.fixture(autouse=True)
def fast_demo_stream(monkeypatch):
    monkeypatch.setattr(settings, "DEMO_CHUNK_DELAY_S", 0.0)
    # Older sse-starlette releases keep an exit event bound to the first event loop
    from sse_starlette.sse import AppStatus
    if hasattr(AppStatus, "should_exit_event"):
        monkeypatch.setattr(AppStatus, "should_exit_event", None)


@pytest.fixture
def asgi_client():
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL)


async def get_token(client: httpx.AsyncClient) -> str:
    resp = await client.post("/login", json={"username": "alice", "password": "123"})
    assert resp.status_code == 200
    return resp.json()["token"]


def test_split_into_chunks_keeps_leading_spaces():
    assert split_into_chunks("You said:  hi there") == ["You", " said:", "  hi", " there"]


def test_token_store_expiry():
    store = TokenStore(ttl_s=0.0)
    token = store.issue("alice")
    assert store.resolve(token) is None
    assert store.active_count == 0

    store = TokenStore(ttl_s=60.0)
    token = store.issue("alice")
    assert store.resolve(token) == "alice"


def test_expired_tokens_are_swept_on_login():
    store = TokenStore(ttl_s=0.0)
    for _ in range(50):
        store.issue("alice")

    # Each login sweeps the already-expired ones before adding its own
    assert store.active_count == 1
    assert store.total_issued == 50
    assert store.prune_expired() == 1
    assert store.active_count == 0


@pytest.mark.asyncio
async def test_healthz(asgi_client):
    resp = await asgi_client.get("/healthz")
    assert resp.json() == {"status": "ok"}
    assert "X-Process-Time-Ms" in resp.headers


@pytest.mark.asyncio
async def test_login_with_wrong_password(asgi_client):
    resp = await asgi_client.post("/login", json={"username": "alice", "password": "nope"})
    assert resp.status_code == 401
    assert resp.text == "unauthorized"


@pytest.mark.asyncio
async def test_login_with_non_ascii_username_is_unauthorized(asgi_client):
    resp = await asgi_client.post("/login", json={"username": "älice", "password": "123"})
    assert resp.status_code == 401
    assert resp.text == "unauthorized"

    resp = await asgi_client.post("/login", json={"username": "alice", "password": "12三"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_chat_requires_bearer_token(asgi_client):
    resp = await asgi_client.post("/chat", json={"message": "hi"})
    assert resp.status_code == 401

    resp = await asgi_client.post(
        "/chat", json={"message": "hi"}, headers={"Authorization": "Bearer made-up"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_chat_rejects_empty_message(asgi_client):
    token = await get_token(asgi_client)
    resp = await asgi_client.post(
        "/chat", json={"message": ""}, headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 400
    assert resp.text == "message is required"


@pytest.mark.asyncio
async def test_chat_stream_uses_plain_newline_framing(asgi_client):
    token = await get_token(asgi_client)
    resp = await asgi_client.post(
        "/chat", json={"message": "hi"}, headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert "data: You\n\n" in resp.text
    assert "data:  hi\n\n" in resp.text
    assert "\r\n" not in resp.text


@pytest.mark.asyncio
async def test_controller_against_demo_server(asgi_client):
    renderer = RecordingRenderer()
    controller = SessionController(renderer, ChatApiClient(asgi_client), default_host=BASE_URL)

    assert not await controller.submit_login("alice", "wrong")
    assert await controller.submit_login("alice", "123")
    assert await controller.submit_message("hello  world")

    assert renderer.transcript[-1].role == "model"
    assert renderer.transcript[-1].text == "You said: hello  world"
    assert controller.session.status == SessionStatus.AUTHENTICATED


@pytest.mark.asyncio
async def test_controller_handles_simulated_failure(asgi_client):
    renderer = RecordingRenderer()
    controller = SessionController(renderer, ChatApiClient(asgi_client), default_host=BASE_URL)
    await controller.submit_login("alice", "123")

    assert not await controller.submit_message("/fail please")

    assert isinstance(controller.last_error, StreamAborted)
    assert controller.last_error.message == SIMULATED_FAILURE
    assert controller.session.status == SessionStatus.EXPIRED
    assert [(e.role, e.text) for e in renderer.transcript] == [
        ("user", "/fail please"),
        ("model", "Let me think about that"),
        ("error", SIMULATED_FAILURE),
    ]
