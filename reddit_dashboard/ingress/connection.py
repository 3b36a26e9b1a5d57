"""Redis connection and pooling for the shared ingress rate limiter.

This module provides the RedisConnection class for managing Redis connections
with connection pooling and graceful error handling.
"""

from typing import Optional

import redis.asyncio as redis
import structlog
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from reddit_dashboard.utils.logger import component_logger


class RedisConnection:
    """
    Redis connection manager with connection pooling.

    Attributes:
        pool: Redis connection pool
        client: Redis client instance, None when the pool could not be built
    """

    def __init__(
        self,
        redis_url: str,
        max_connections: int = 20,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.redis_url = redis_url
        self.max_connections = max_connections
        self.pool: Optional[ConnectionPool] = None
        self.client: Optional[redis.Redis] = None
        self.logger = component_logger(logger, __name__)
        self._initialize_pool()

    def _initialize_pool(self) -> None:
        """
        Initialize Redis connection pool.

        No connection is opened here; the first command connects.
        """
        try:
            self.pool = ConnectionPool.from_url(
                self.redis_url,
                max_connections=self.max_connections,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
            )

            self.client = redis.Redis(connection_pool=self.pool)

            self.logger.info(
                "redis_pool_initialized",
                max_connections=self.max_connections,
                redis_url=self.redis_url.split("@")[-1],  # Don't log credentials
            )

        except (ValueError, RedisError) as e:
            self.logger.error(
                "redis_pool_initialization_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            # Fail open: the limiter falls back to in-process windows
            self.client = None
            self.pool = None

    async def health_check(self) -> bool:
        """Return True if Redis answers PING."""
        if not self.client:
            return False

        try:
            return bool(await self.client.ping())
        except RedisError as e:
            self.logger.warning("redis_health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close the client and its pool."""
        if self.client:
            await self.client.aclose()
            self.logger.info("redis_connection_closed")
