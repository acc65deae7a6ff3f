"""
Bearer token authentication for the demo chat routes.
"""
from fastapi import Header, HTTPException

from server.token_store import token_store


async def require_bearer_token(
    authorization: str | None = Header(default=None),
) -> str:
    """Returns the username behind a valid `Authorization: Bearer <token>` header."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Invalid Authorization header format. Expected 'Bearer <token>'",
        )

    token = authorization.removeprefix("Bearer ").strip()
    username = token_store.resolve(token)
    if username is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return username
