"""
Cache stores used as the fallback data source.

A cache store exposes two coroutines:
    get(key)        -> stored CacheEntry, or None on a miss
    set(key, value) -> wraps `value` in a timestamped CacheEntry and stores it

RedisCacheStore keeps entries as JSON strings with a TTL:
    Key:   {CACHE_KEY_PREFIX}{key}
    Value: {"data": <payload>, "timestamp": <unix seconds>}

Errors are not swallowed here. The FallbackAccessor decides what a failing
cache means; the store only reports it.
"""

from typing import Any, Optional, Protocol

import structlog
from redis.asyncio import Redis as AsyncRedis

from fault_tolerance.config import Settings
from fault_tolerance.models.fallback_models import CacheEntry
from fault_tolerance.persistence.redis_client import RedisClient

logger = structlog.get_logger(__name__)


class CacheStore(Protocol):
    """Contract of a cache usable by FallbackAccessor."""

    async def get(self, key: str) -> Optional[CacheEntry]:
        ...

    async def set(self, key: str, value: Any) -> None:
        ...


class RedisCacheStore:
    """
    Redis-backed cache store.

    Attributes:
        redis: Async Redis client
        ttl_seconds: Expiry applied to every entry (None = no expiry)
        key_prefix: Namespace prepended to every key
    """

    def __init__(
        self,
        redis_client: AsyncRedis,
        ttl_seconds: Optional[int] = 300,
        key_prefix: str = "ft:cache:",
    ):
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisCacheStore":
        """Build a store on the shared connection pool."""
        return cls(
            RedisClient.get_async_client(settings),
            ttl_seconds=settings.CACHE_TTL_SECONDS,
            key_prefix=settings.CACHE_KEY_PREFIX,
        )

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[CacheEntry]:
        """
        Fetch the entry stored under `key`.

        Returns:
            CacheEntry, or None on a miss

        Raises:
            redis.RedisError: Cache unreachable
            pydantic.ValidationError: Stored value is not a cache envelope
        """
        raw = await self.redis.get(self._key(key))
        if raw is None:
            logger.debug("Cache miss", key=key)
            return None

        logger.debug("Cache hit", key=key)
        return CacheEntry.model_validate_json(raw)

    async def set(self, key: str, value: Any) -> None:
        """
        Store `value` under `key` with the configured TTL.

        Raises:
            redis.RedisError: Cache unreachable
        """
        entry = CacheEntry(data=value)
        await self.redis.set(self._key(key), entry.model_dump_json(), ex=self.ttl_seconds)
        logger.debug("Cached value", key=key, ttl_seconds=self.ttl_seconds)

    async def delete(self, key: str) -> bool:
        """Remove `key`. Returns True if it existed."""
        deleted = await self.redis.delete(self._key(key))
        return deleted > 0


class InMemoryCacheStore:
    """Dict-backed cache store for local runs and tests. No expiry."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(data=value)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)
