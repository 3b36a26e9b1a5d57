"""
Fixed-window rate limiting primitives.

A window counts admitted requests until its reset timestamp passes, then
starts again from zero. The same window type backs the per-client egress
limit of the HTTP client and the per-caller ingress limit of the API.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from reddit_dashboard.reddit.exceptions import RateLimitError
from reddit_dashboard.utils.logger import component_logger

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class RateWindow:
    """Mutable counter for one caller or client; never persisted."""

    key: str
    count: int = 0
    reset_at: int = 0

    def expired(self, now: int) -> bool:
        return now > self.reset_at


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission check, used for X-RateLimit-* headers."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: int


class FixedWindowCounter:
    """
    Fixed-window admission counter.

    On each call to ``hit()``: if the window has expired it is restarted at
    ``now + window_ms`` with a zero count; if the count has reached
    ``max_requests`` the call is denied; otherwise the count is incremented.

    The read-modify-write happens without awaiting, so it is safe under
    asyncio without a lock.
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_ms: int = 60000,
        key: str = "default",
        clock: Optional[Clock] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        """
        Initialize the counter.

        Args:
            max_requests: Maximum number of requests admitted per window (default: 100)
            window_ms: Window length in milliseconds (default: 60000)
            key: Identifier used in logs and for the window itself
            clock: Callable returning epoch milliseconds (tests pin it)
            logger: Injected structlog logger
        """
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.clock = clock or now_ms
        self.window = RateWindow(key=key)
        self.logger = component_logger(logger, __name__)

    def hit(self) -> RateLimitDecision:
        """
        Count one request against the window.

        Returns:
            RateLimitDecision; ``allowed`` is False when the window is full
        """
        return apply_window(self.window, self.max_requests, self.window_ms, self.clock())

    def acquire(self) -> None:
        """
        Admit one request or fail.

        Raises:
            RateLimitError: If the current window is already full
        """
        decision = self.hit()
        if not decision.allowed:
            self.logger.warning(
                "rate_limit_hit",
                key=self.window.key,
                max_requests=self.max_requests,
                reset_at=decision.reset_at,
            )
            raise RateLimitError(limit=self.max_requests, reset_at=decision.reset_at)

        if self.window.count > self.max_requests * 0.9:
            self.logger.debug(
                "rate_limit_approaching",
                key=self.window.key,
                calls_made=self.window.count,
                remaining=decision.remaining,
            )

    def get_remaining(self) -> int:
        """
        Number of requests still admissible in the current window.

        Does not count as a request.
        """
        if self.window.expired(self.clock()):
            return self.max_requests
        return max(0, self.max_requests - self.window.count)

    def reset(self) -> None:
        """Drop the current window. Useful for testing or manual intervention."""
        self.window = RateWindow(key=self.window.key)
        self.logger.info("rate_limiter_reset", key=self.window.key)


def apply_window(window: RateWindow, max_requests: int, window_ms: int, now: int) -> RateLimitDecision:
    """Apply the fixed-window rule to ``window`` at time ``now`` (epoch ms)."""
    if window.expired(now):
        window.count = 0
        window.reset_at = now + window_ms

    if window.count >= max_requests:
        return RateLimitDecision(
            allowed=False,
            limit=max_requests,
            remaining=0,
            reset_at=window.reset_at,
        )

    window.count += 1
    return RateLimitDecision(
        allowed=True,
        limit=max_requests,
        remaining=max_requests - window.count,
        reset_at=window.reset_at,
    )
