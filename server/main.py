"""
MODULE OVERVIEW:
The FastAPI application for the demo chat service.

WHAT IS HAPPENING HERE:
Three routes: `/login` hands out bearer tokens, `/chat` streams a reply as framed
`event:`/`data:` blocks, `/healthz` answers liveness probes. CORS is wide open so a
browser page served from anywhere can talk to it.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from server.middleware import TimingMiddleware
from server.routes import chat, login
from server.token_store import token_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Demo chat server starting up...")
    yield
    logger.info(f"Shutdown complete. Tokens issued this run: {token_store.total_issued}")


app = FastAPI(
    title="Stream Chat Demo Server",
    description="Login plus a streamed chat endpoint for the stream chat client",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(login.router, tags=["Auth"])
app.include_router(chat.router, tags=["Chat"])


@app.get("/healthz", tags=["Ops"])
async def health_check():
    return {"status": "ok"}
