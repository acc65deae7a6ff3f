"""
MODULE OVERVIEW:
The fake "model" behind the demo chat endpoint.

WHAT IS HAPPENING HERE:
In the real deployment this would be an upstream LLM streaming API. Here we simulate
it: the reply is cut into word-sized pieces (each keeping its leading space) and
emitted with a small delay, so clients see a genuinely incremental stream.

A message starting with `/fail` streams part of a reply and then an `error` event,
mimicking an upstream failure halfway through a response (quota, timeout, ...).
"""
import asyncio
import re
from typing import AsyncIterator

FAIL_COMMAND = "/fail"
SIMULATED_FAILURE = "simulated upstream failure"


def split_into_chunks(text: str) -> list[str]:
    """'hi there you' -> ['hi', ' there', ' you']"""
    return re.findall(r"\s*\S+", text)


async def demo_reply(message: str, delay_s: float = 0.0) -> AsyncIterator[dict]:
    """Yields sse-starlette event dicts for one reply."""
    if message.startswith(FAIL_COMMAND):
        for chunk in split_into_chunks("Let me think about that"):
            yield {"data": chunk}
            await asyncio.sleep(delay_s)
        yield {"event": "error", "data": SIMULATED_FAILURE}
        return

    for chunk in split_into_chunks(f"You said: {message}"):
        yield {"data": chunk}
        await asyncio.sleep(delay_s)
