"""
ASGI middleware applying the ingress rate limit to API routes.

Every response under the protected prefix carries ``X-RateLimit-Limit``,
``X-RateLimit-Remaining`` and ``X-RateLimit-Reset`` (epoch milliseconds),
whether the request was admitted, rejected or failed.
"""

from typing import Any, Dict, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from reddit_dashboard.models.responses import ErrorResponse
from reddit_dashboard.reddit.exceptions import InternalError, RateLimitError
from reddit_dashboard.reddit.rate_limiter import RateLimitDecision
from reddit_dashboard.utils.logger import component_logger

ANONYMOUS_CALLER = "anonymous"


def rate_limit_headers(decision: RateLimitDecision) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(decision.reset_at),
    }


def caller_key(request: Request) -> str:
    """Network address of the caller, or "anonymous" when the server does not know it."""
    if request.client and request.client.host:
        return request.client.host
    return ANONYMOUS_CALLER


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject callers over their window with 429 before any route runs."""

    def __init__(
        self,
        app: ASGIApp,
        limiter: Any,
        path_prefix: str = "/api",
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix
        self.logger = component_logger(logger, __name__)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        caller = caller_key(request)
        decision = await self.limiter.check(caller)
        headers = rate_limit_headers(decision)

        if not decision.allowed:
            error = RateLimitError(limit=decision.limit, reset_at=decision.reset_at, message="Too many requests")
            return JSONResponse(
                status_code=error.status_code,
                content=ErrorResponse(error=error.message, code=error.code).model_dump(exclude_none=True),
                headers=headers,
            )

        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.error(
                "unhandled_request_error",
                path=request.url.path,
                method=request.method,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            error = InternalError(str(e) or type(e).__name__)
            response = JSONResponse(
                status_code=error.status_code,
                content=ErrorResponse(error="Internal server error", code=error.code).model_dump(exclude_none=True),
            )

        response.headers.update(headers)
        return response
