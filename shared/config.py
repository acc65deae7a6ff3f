"""
MODULE OVERVIEW:
This module provides application-wide configuration using Pydantic Settings.
Where it fits: both the chat client (timeouts, default host) and the demo server
(credentials, token lifetime, stream pacing) read from here.

WHAT IS HAPPENING HERE:
Instead of hardcoding "60 seconds" for the chat stream deep inside the API client,
we declare it once here. Every value can be overridden by an environment variable
or a `.env` file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Tolerate unrelated env vars so the app runs out of the box
        extra="ignore",
    )

    PORT: int = 8082
    LOG_LEVEL: str = "INFO"

    # Client
    CHAT_HOST: str = "http://127.0.0.1:8082"
    LOGIN_TIMEOUT_S: float = 10.0
    CHAT_TIMEOUT_S: float = 60.0

    # Demo server
    DEMO_USERNAME: str = "alice"
    DEMO_PASSWORD: str = "123"
    TOKEN_TTL_S: float = 1800.0
    DEMO_CHUNK_DELAY_S: float = 0.05


settings = Settings()
