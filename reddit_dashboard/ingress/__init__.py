"""Ingress gate: per-caller rate limiting in front of the API routes."""

from reddit_dashboard.ingress.connection import RedisConnection
from reddit_dashboard.ingress.limiter import IngressRateLimiter, RedisIngressRateLimiter
from reddit_dashboard.ingress.middleware import RateLimitMiddleware, caller_key, rate_limit_headers

__all__ = [
    "IngressRateLimiter",
    "RateLimitMiddleware",
    "RedisConnection",
    "RedisIngressRateLimiter",
    "caller_key",
    "rate_limit_headers",
]
