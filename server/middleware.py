"""
MODULE OVERVIEW:
FastAPI middleware to track request timings.
Where it fits: Middleware runs on *every* HTTP request, wrapping our endpoints.

WHAT IS HAPPENING HERE:
We add an `X-Process-Time-Ms` header so clients can observe the server-side overhead.
For the chat route this is the time until the stream *started*, not until it ended:
the body keeps flowing after `call_next` returns.
"""

import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time_ms = (time.perf_counter() - start_time) * 1000
        response.headers["X-Process-Time-Ms"] = f"{process_time_ms:.2f}"

        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {process_time_ms:.2f}ms"
        )
        return response
