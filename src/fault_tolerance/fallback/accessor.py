"""
Graceful-degradation data accessor.

Fetches a value by key through three tiers and tags the result with the
tier that produced it:

1. **live**: the primary data operation
2. **cache**: the cache store, only when the primary failed
3. **default**: a configured default, when both failed

The accessor never raises for failures at any tier; callers always get a
FallbackResult. Cancellation still propagates.

Usage:
    accessor = FallbackAccessor(fetch_profile, cache, default_factory=dict)
    result = await accessor.get_data_with_fallback("user:42")
    if result.source != DataSource.LIVE:
        ...  # serve degraded data
"""

import asyncio
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional

import structlog

from fault_tolerance.models.enums import DataSource
from fault_tolerance.models.fallback_models import CacheEntry, FallbackResult
from fault_tolerance.monitoring.metrics import fallback_results_total
from fault_tolerance.persistence.cache_store import CacheStore

logger = structlog.get_logger(__name__)

PrimaryFetch = Callable[[str], Awaitable[Any]]


def unwrap_cached(cached: Any) -> Any:
    """Extract the payload from a cache envelope (CacheEntry or {"data": ...} mapping)."""
    if isinstance(cached, CacheEntry):
        return cached.data
    if isinstance(cached, Mapping) and "data" in cached:
        return cached["data"]
    return cached


class FallbackAccessor:
    """
    Live -> cache -> default data access for one data source.

    Holds no state across calls.

    Attributes:
        primary: Coroutine function fetching live data for a key
        cache: Cache store consulted when the primary fails
        name: Accessor name for logs and metrics
        write_through: Store successful live values in the cache
        write_timeout: Bound on the write-through wait, in seconds
    """

    def __init__(
        self,
        primary: PrimaryFetch,
        cache: CacheStore,
        default: Any = None,
        default_factory: Optional[Callable[[], Any]] = None,
        name: str = "default",
        write_through: bool = True,
        write_timeout: Optional[float] = 0.5,
    ):
        """
        Initialize fallback accessor.

        Args:
            primary: Coroutine function `primary(key)` returning live data
            cache: Cache store with async get(key) / set(key, value)
            default: Value returned when both primary and cache fail
            default_factory: Builds a fresh default per call (takes precedence over `default`)
            name: Accessor name for logs and metrics
            write_through: Cache live values after a successful primary fetch
            write_timeout: Seconds a write-through may add to a live response
                (None = wait for the cache)
        """
        self.primary = primary
        self.cache = cache
        self.name = name
        self.write_through = write_through
        self.write_timeout = write_timeout
        self._default = default
        self._default_factory = default_factory

    async def get_data_with_fallback(self, key: str) -> FallbackResult:
        """
        Fetch `key`, degrading to cache and then to the default.

        The primary is called exactly once. The cache is read exactly once,
        and only when the primary failed.

        Args:
            key: Data key

        Returns:
            FallbackResult with `source` live, cache or default
        """
        try:
            data = await self.primary(key)
        except Exception as primary_error:
            logger.warning(
                "Primary fetch failed, trying cache",
                accessor=self.name,
                key=key,
                error_type=type(primary_error).__name__,
                error=str(primary_error),
            )
            return await self._from_cache_or_default(key)

        if self.write_through:
            await self._write_through(key, data)
        return self._result(data, DataSource.LIVE)

    async def _from_cache_or_default(self, key: str) -> FallbackResult:
        try:
            cached = await self.cache.get(key)
        except Exception as cache_error:
            logger.warning(
                "Cache lookup failed, serving default",
                accessor=self.name,
                key=key,
                error_type=type(cache_error).__name__,
                error=str(cache_error),
            )
            return self._result(self._make_default(), DataSource.DEFAULT)

        if cached is None:
            logger.warning("Cache miss, serving default", accessor=self.name, key=key)
            return self._result(self._make_default(), DataSource.DEFAULT)

        return self._result(unwrap_cached(cached), DataSource.CACHE)

    async def _write_through(self, key: str, data: Any) -> None:
        try:
            await asyncio.wait_for(self.cache.set(key, data), timeout=self.write_timeout)
        except Exception as cache_error:
            logger.warning(
                "Failed to refresh cache after live fetch",
                accessor=self.name,
                key=key,
                error_type=type(cache_error).__name__,
            )

    def _make_default(self) -> Any:
        if self._default_factory is not None:
            return self._default_factory()
        return self._default

    def _result(self, data: Any, source: DataSource) -> FallbackResult:
        fallback_results_total.labels(accessor=self.name, source=source.value).inc()
        return FallbackResult(data=data, source=source)
