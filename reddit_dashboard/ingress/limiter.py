"""
Per-caller ingress rate limiting.

Callers are keyed by network address. Each key gets its own fixed window,
independent of the HTTP client's egress window.

Two backends share one contract, ``await limiter.check(key)``:

- IngressRateLimiter keeps windows in a process-local dict and purges
  expired ones on every check.
- RedisIngressRateLimiter keeps counters in Redis so several processes
  share one budget; Redis expires them.
"""

from typing import Any, Dict, Optional

import structlog
from redis.exceptions import RedisError

from reddit_dashboard.reddit.rate_limiter import (
    Clock,
    RateLimitDecision,
    RateWindow,
    apply_window,
    now_ms,
)
from reddit_dashboard.utils.logger import component_logger


class IngressRateLimiter:
    """
    In-memory fixed-window limiter keyed by caller.

    State lives only in this process and is lost on restart; run
    RedisIngressRateLimiter when the API is served by several workers.

    Example:
        >>> limiter = IngressRateLimiter(max_requests=100, window_ms=60000)
        >>> decision = await limiter.check("203.0.113.7")
        >>> decision.allowed, decision.remaining
        (True, 99)
    """

    backend = "memory"

    def __init__(
        self,
        max_requests: int = 100,
        window_ms: int = 60000,
        clock: Optional[Clock] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.clock = clock or now_ms
        self.windows: Dict[str, RateWindow] = {}
        self.logger = component_logger(logger, __name__)

    def purge_expired(self, now: int) -> int:
        """Drop windows whose reset time has passed. Returns how many were dropped."""
        expired = [key for key, window in self.windows.items() if window.expired(now)]
        for key in expired:
            del self.windows[key]
        return len(expired)

    async def check(self, key: str) -> RateLimitDecision:
        """Count one request for ``key`` and report whether it is admitted."""
        now = self.clock()
        self.purge_expired(now)

        window = self.windows.get(key)
        if window is None:
            window = RateWindow(key=key)
            self.windows[key] = window

        decision = apply_window(window, self.max_requests, self.window_ms, now)
        if not decision.allowed:
            self.logger.warning(
                "ingress_rate_limit_exceeded",
                caller=key,
                max_requests=self.max_requests,
                reset_at=decision.reset_at,
            )
        return decision


class RedisIngressRateLimiter:
    """
    Redis-backed fixed-window limiter keyed by caller.

    Uses ``INCR`` on ``{prefix}:{caller}`` and sets ``PEXPIRE`` when the
    counter is created, so the key disappears when its window ends. When
    Redis is unreachable the check is answered by an in-process limiter and
    a warning is logged.
    """

    backend = "redis"

    def __init__(
        self,
        redis: Any,
        max_requests: int = 100,
        window_ms: int = 60000,
        key_prefix: str = "ratelimit:ingress",
        clock: Optional[Clock] = None,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.redis = redis
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.key_prefix = key_prefix
        self.clock = clock or now_ms
        self.logger = component_logger(logger, __name__)
        self.fallback = IngressRateLimiter(
            max_requests=max_requests,
            window_ms=window_ms,
            clock=self.clock,
            logger=self.logger,
        )

    async def check(self, key: str) -> RateLimitDecision:
        if self.redis is None:
            return await self.fallback.check(key)

        redis_key = f"{self.key_prefix}:{key}"
        try:
            count = await self.redis.incr(redis_key)
            if count == 1:
                await self.redis.pexpire(redis_key, self.window_ms)
            ttl_ms = await self.redis.pttl(redis_key)
            if ttl_ms is None or ttl_ms < 0:
                # Counter without expiry (e.g. PEXPIRE lost); restart its window.
                await self.redis.pexpire(redis_key, self.window_ms)
                ttl_ms = self.window_ms
        except RedisError as e:
            self.logger.warning(
                "ingress_redis_unavailable",
                caller=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            return await self.fallback.check(key)

        decision = RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_at=self.clock() + int(ttl_ms),
        )
        if not decision.allowed:
            self.logger.warning(
                "ingress_rate_limit_exceeded",
                caller=key,
                max_requests=self.max_requests,
                reset_at=decision.reset_at,
            )
        return decision
