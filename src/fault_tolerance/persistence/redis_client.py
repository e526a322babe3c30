"""
Shared async Redis connection pool for the cache layer.

Every RedisCacheStore in the process talks to Redis through one lazily
created pool, closed once on application shutdown.
"""

from typing import Any, Optional

import structlog
from redis.asyncio import ConnectionPool as AsyncConnectionPool
from redis.asyncio import Redis as AsyncRedis

from fault_tolerance.config import Settings

logger = structlog.get_logger(__name__)


class RedisClient:
    """Process-wide async Redis pool holder."""

    _async_pool: Optional[AsyncConnectionPool] = None

    @staticmethod
    def pool_options(settings: Settings) -> dict[str, Any]:
        """Connection pool options derived from REDIS_* settings."""
        return {
            "max_connections": settings.REDIS_MAX_CONNECTIONS,
            # Cache envelopes are JSON text
            "decode_responses": True,
            "socket_timeout": settings.REDIS_SOCKET_TIMEOUT,
            "socket_connect_timeout": settings.REDIS_SOCKET_TIMEOUT,
            "retry_on_timeout": True,
        }

    @classmethod
    def get_async_client(cls, settings: Settings) -> AsyncRedis:
        """
        Get an async Redis client bound to the shared pool.

        The pool is created on first call; later calls reuse it and ignore
        `settings`.
        """
        if cls._async_pool is None:
            cls._async_pool = AsyncConnectionPool.from_url(settings.REDIS_URL, **cls.pool_options(settings))
            logger.info(
                "Redis connection pool created",
                redis_url=settings.REDIS_URL,
                max_connections=settings.REDIS_MAX_CONNECTIONS,
            )
        return AsyncRedis(connection_pool=cls._async_pool)

    @classmethod
    async def close_async_pool(cls) -> None:
        """Disconnect and forget the shared pool (no-op if never created)."""
        pool, cls._async_pool = cls._async_pool, None
        if pool is not None:
            await pool.disconnect()
            logger.info("Redis connection pool closed")
