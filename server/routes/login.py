"""
MODULE OVERVIEW:
The login route of the demo chat server.

WHAT IS HAPPENING HERE:
Credentials are checked against the fixed demo account from settings. On success we
mint a bearer token; on failure we answer 401 with a short text body, which the client
shows verbatim as the error detail.
"""
import secrets

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from loguru import logger

from server.token_store import token_store
from shared.config import settings
from shared.models import LoginRequest, LoginResponse

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest):
    # compare_digest only accepts ASCII str, so compare the encoded bytes
    username_ok = secrets.compare_digest(body.username.encode(), settings.DEMO_USERNAME.encode())
    password_ok = secrets.compare_digest(body.password.encode(), settings.DEMO_PASSWORD.encode())
    if not (username_ok and password_ok):
        logger.info(f"event=login_rejected username={body.username}")
        return PlainTextResponse("unauthorized", status_code=401)
    return LoginResponse(token=token_store.issue(body.username))
