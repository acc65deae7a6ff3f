"""
MODULE OVERVIEW:
The streaming chat route of the demo chat server.

WHAT IS HAPPENING HERE:
We use sse-starlette's `EventSourceResponse`, exactly like a production SSE route,
but we force plain "\n" separators (its default is "\r\n") because the chat client
frames blocks on "\n\n" only. Each reply piece goes out as its own `data:` block;
a failure goes out as an `event: error` block and ends the stream.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from loguru import logger
from sse_starlette.sse import EventSourceResponse

from server.auth import require_bearer_token
from server.responder import demo_reply
from shared.config import settings
from shared.models import ChatRequest

router = APIRouter()


@router.post("/chat")
async def chat(body: ChatRequest, username: str = Depends(require_bearer_token)):
    if not body.message:
        return PlainTextResponse("message is required", status_code=400)

    logger.info(f"event=chat_start username={username} chars={len(body.message)}")
    return EventSourceResponse(
        demo_reply(body.message, settings.DEMO_CHUNK_DELAY_S),
        sep="\n",
    )
