"""
Session lookup for mutating API routes.

Session issuance and verification belong to the hosted auth provider; this
module only defines how a route asks "who is calling?". Any object with an
async ``read(request)`` method returning a ``Session`` or None can be passed
to ``create_app``.
"""

from typing import Mapping, Optional, Protocol

from fastapi import Request
from pydantic import BaseModel, ConfigDict

from reddit_dashboard.reddit.exceptions import AuthenticationError


class Session(BaseModel):
    """Authenticated caller."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: Optional[str] = None


class SessionReader(Protocol):
    async def read(self, request: Request) -> Optional[Session]:
        ...


def bearer_token(request: Request) -> Optional[str]:
    """Token from an ``Authorization: Bearer <token>`` header, if present."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class StaticTokenSessionReader:
    """
    Resolve bearer tokens against a fixed token -> email map.

    Example:
        >>> reader = StaticTokenSessionReader({"s3cret": "ops@example.com"})
    """

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self.tokens = dict(tokens)

    async def read(self, request: Request) -> Optional[Session]:
        token = bearer_token(request)
        if token is None or token not in self.tokens:
            return None
        email = self.tokens[token] or None
        return Session(user_id=email or token[:8], email=email)


async def require_session(request: Request) -> Session:
    """
    FastAPI dependency for routes that need an authenticated caller.

    Raises:
        AuthenticationError: No session; the route body never runs
    """
    session = await request.app.state.session_reader.read(request)
    if session is None:
        raise AuthenticationError()
    return session
