"""
Configuration Management Module

Configures application parameters via environment variables or .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "Chat Bridge"
    DEBUG: bool = False
    # Plaintext body returned by GET /
    LIVENESS_MESSAGE: str = "Chat Bridge is running"

    # Upstream Config
    UPSTREAM_BASE_URL: str = "http://127.0.0.1:9000"
    UPSTREAM_CHAT_PATH: str = "/api/chat/completions"
    UPSTREAM_SESSION_PATH: str = "/api/conversation/create"
    # "type" field sent with every session creation request
    UPSTREAM_SESSION_TYPE: str = "chat"
    # Value of "code" in the session creation body that signals success
    UPSTREAM_SESSION_SUCCESS_CODE: int = 200

    # Browser impersonation headers required by upstream
    UPSTREAM_ORIGIN: str = "http://127.0.0.1:9000"
    UPSTREAM_REFERER: str = "http://127.0.0.1:9000/"
    UPSTREAM_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )

    # HTTP Client Config
    # Per-phase upstream timeout: connect, read, write and pool (seconds)
    HTTP_TIMEOUT: int = 300
    # Max wait between two upstream stream reads (seconds)
    STREAM_READ_TIMEOUT: int = 120

    # Session Config
    # Title used when a request carries no user message
    DEFAULT_SESSION_TITLE: str = "New Chat"

    # Model Table Config
    # Optional JSON file replacing the built-in model mapping table
    MODEL_TABLE_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application configuration (Singleton)

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
