"""
Rate-limited HTTP client for outbound Reddit requests.

Wraps ``httpx.AsyncClient`` with a fixed-window admission counter and a
uniform error translation:

- window full            -> RateLimitError (no request is sent)
- non-2xx response       -> UpstreamError carrying the upstream status
- transport / decode     -> InternalError (500)
"""

from typing import Any, Optional

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from reddit_dashboard.models.responses import APIResponse
from reddit_dashboard.reddit.exceptions import APIError, InternalError, UpstreamError
from reddit_dashboard.reddit.rate_limiter import Clock, FixedWindowCounter
from reddit_dashboard.utils.logger import component_logger

DEFAULT_USER_AGENT = "reddit-dashboard/1.0"


class RateLimitConfig(BaseModel):
    """Fixed-window limit: ``max_requests`` per ``window_ms``."""

    model_config = ConfigDict(frozen=True)

    max_requests: int = Field(100, ge=1)
    window_ms: int = Field(60000, ge=1)


class ClientConfig(BaseModel):
    """HTTP client configuration; immutable after construction."""

    model_config = ConfigDict(frozen=True)

    timeout_ms: int = Field(30000, ge=1)
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    user_agent: str = DEFAULT_USER_AGENT


class RateLimitedHTTPClient:
    """
    Async HTTP client with client-side fixed-window rate limiting.

    Every call is logged: ``api_request`` at INFO once the rate limiter admits it,
    ``api_response`` at DEBUG on success and ``api_error`` at ERROR on
    failure.

    Example:
        >>> async with RateLimitedHTTPClient(ClientConfig(timeout_ms=5000)) as http:
        ...     response = await http.get("https://www.reddit.com/r/python/hot.json")
        ...     children = response.data["data"]["children"]
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Timeout and rate-limit configuration (defaults: 30s, 100/60s)
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
            clock: Callable returning epoch milliseconds for the rate window
            logger: Injected structlog logger
        """
        self.config = config or ClientConfig()
        self.logger = component_logger(logger, __name__)
        self.rate_limiter = FixedWindowCounter(
            max_requests=self.config.rate_limit.max_requests,
            window_ms=self.config.rate_limit.window_ms,
            key="reddit_http_client",
            clock=clock,
            logger=self.logger,
        )
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=httpx.Timeout(self.config.timeout_ms / 1000),
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
            follow_redirects=True,
        )

    async def request(self, method: str, url: str, **options: Any) -> APIResponse:
        """
        Send a request through the rate limiter.

        Args:
            method: HTTP method (GET, POST, ...)
            url: Absolute URL
            **options: Passed to ``httpx.AsyncClient.request`` (params, json, headers)

        Returns:
            APIResponse with the decoded JSON body

        Raises:
            RateLimitError: Window full; nothing was sent
            UpstreamError: Non-2xx response
            InternalError: Transport failure or undecodable body
        """
        try:
            response = await self._send(method, url, **options)
        except APIError as e:
            self.logger.error(
                "api_error",
                method=method,
                url=url,
                error=str(e),
                status_code=e.status_code,
                code=e.code,
            )
            raise

        self.logger.debug(
            "api_response",
            method=method,
            url=url,
            status_code=response.status_code,
            rate_limit_remaining=self.rate_limiter.get_remaining(),
        )
        return response

    async def _send(self, method: str, url: str, **options: Any) -> APIResponse:
        self.rate_limiter.acquire()
        self.logger.info("api_request", method=method, url=url)

        try:
            response = await self._client.request(method, url, **options)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise InternalError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise UpstreamError(
                response.reason_phrase or f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json() if response.content else None
        except ValueError as e:
            raise InternalError(f"Invalid JSON in response from {url}") from e

        return APIResponse(
            status_code=response.status_code,
            data=data,
            headers=dict(response.headers),
        )

    async def get(self, url: str, **options: Any) -> APIResponse:
        return await self.request("GET", url, **options)

    async def post(self, url: str, data: Any = None, **options: Any) -> APIResponse:
        return await self.request("POST", url, json=data, **options)

    async def put(self, url: str, data: Any = None, **options: Any) -> APIResponse:
        return await self.request("PUT", url, json=data, **options)

    async def delete(self, url: str, **options: Any) -> APIResponse:
        return await self.request("DELETE", url, **options)

    def get_remaining(self) -> int:
        """Requests still admissible in the current window."""
        return self.rate_limiter.get_remaining()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "RateLimitedHTTPClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
