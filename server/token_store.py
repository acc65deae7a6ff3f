"""
MODULE OVERVIEW:
The demo server's in-memory registry of issued bearer tokens.

WHAT IS HAPPENING HERE:
Login mints an opaque random token and remembers who owns it and when it expires.
Chat looks the token up on every request. Expired tokens are dropped when someone
tries to use them, and swept on every new login so the registry stays bounded.
Nothing is persisted: restart the server and every client has to log in again,
which is exactly what the client expects.
"""
import secrets
import time
from dataclasses import dataclass

from loguru import logger

from shared.config import settings


@dataclass
class IssuedToken:
    username: str
    expires_at: float


class TokenStore:
    def __init__(self, ttl_s: float = settings.TOKEN_TTL_S):
        self.ttl_s = ttl_s
        self._tokens: dict[str, IssuedToken] = {}
        self.total_issued = 0

    def issue(self, username: str) -> str:
        self.prune_expired()
        token = secrets.token_urlsafe(32)
        self._tokens[token] = IssuedToken(username, time.monotonic() + self.ttl_s)
        self.total_issued += 1
        logger.info(f"event=token_issued username={username} ttl_s={self.ttl_s}")
        return token

    def resolve(self, token: str) -> str | None:
        """Returns the owning username, or None for unknown and expired tokens."""
        issued = self._tokens.get(token)
        if issued is None:
            return None
        if issued.expires_at <= time.monotonic():
            del self._tokens[token]
            logger.info(f"event=token_expired username={issued.username}")
            return None
        return issued.username

    def prune_expired(self) -> int:
        now = time.monotonic()
        expired = [token for token, issued in self._tokens.items() if issued.expires_at <= now]
        for token in expired:
            del self._tokens[token]
        if expired:
            logger.debug(f"event=tokens_pruned count={len(expired)}")
        return len(expired)

    @property
    def active_count(self) -> int:
        return len(self._tokens)


# The singleton instance used server-wide
token_store = TokenStore()
