"""
Application settings loaded from environment variables.

Settings are read once at startup and are immutable afterwards. Every field
can be overridden by the upper-case environment variable of the same name
(``REDDIT_TIMEOUT_MS``, ``AUTH_TOKENS``, ...) or by a ``.env`` file.
"""

from typing import Annotated, Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from reddit_dashboard.reddit.http import DEFAULT_USER_AGENT, ClientConfig, RateLimitConfig


def parse_auth_tokens(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse ``AUTH_TOKENS`` ("token:email,token:email") into a token -> email map.

    Entries without a colon are ignored.
    """
    tokens: Dict[str, str] = {}
    for entry in (raw or "").split(","):
        token, sep, email = entry.strip().partition(":")
        if sep and token:
            tokens[token] = email
    return tokens


class Settings(BaseSettings):
    """Runtime configuration of the dashboard backend."""

    model_config = SettingsConfigDict(
        frozen=True,
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    reddit_base_url: str = "https://www.reddit.com"
    reddit_user_agent: str = DEFAULT_USER_AGENT
    reddit_timeout_ms: int = Field(30000, ge=1)
    reddit_rate_limit_max: int = Field(100, ge=1)
    reddit_rate_limit_window_ms: int = Field(60000, ge=1)

    ingress_rate_limit_max: int = Field(100, ge=1)
    ingress_rate_limit_window_ms: int = Field(60000, ge=1)

    database_url: str = "sqlite+aiosqlite:///./reddit_dashboard.db"
    redis_url: Optional[str] = None
    # "token:email,token:email" in the environment, not JSON
    auth_tokens: Annotated[Dict[str, str], NoDecode] = Field(default_factory=dict)

    log_level: str = "INFO"
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("auth_tokens", mode="before")
    @classmethod
    def _parse_auth_tokens(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return parse_auth_tokens(value)
        return value

    def client_config(self) -> ClientConfig:
        """HTTP client configuration derived from these settings."""
        return ClientConfig(
            timeout_ms=self.reddit_timeout_ms,
            rate_limit=RateLimitConfig(
                max_requests=self.reddit_rate_limit_max,
                window_ms=self.reddit_rate_limit_window_ms,
            ),
            user_agent=self.reddit_user_agent,
        )
