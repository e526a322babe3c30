"""
FastAPI dependency injection for the fault-tolerance service.

Each application owns one UpstreamResources, built from the settings passed
to create_app() and kept on `app.state`. It holds the circuit breaker
protecting the upstream, the retry executor, the API client, the cache store
and the fallback accessor assembled from them. Providers below read it from
the request, so every component follows the application's settings and can
be replaced with `app.dependency_overrides`.
"""

from typing import Optional

import structlog
from fastapi import Depends, Request

from fault_tolerance.breaker.circuit_breaker import CircuitBreaker
from fault_tolerance.client.api_client import ApiClient
from fault_tolerance.client.exceptions import is_upstream_failure
from fault_tolerance.config import Settings
from fault_tolerance.fallback.accessor import FallbackAccessor
from fault_tolerance.persistence.cache_store import CacheStore, RedisCacheStore
from fault_tolerance.pipeline import ResiliencePipeline
from fault_tolerance.retry.executor import UpstreamRetryExecutor

logger = structlog.get_logger(__name__)

UPSTREAM = "upstream"


class UpstreamResources:
    """
    Per-application components guarding the upstream API.

    The breaker and executor are built eagerly. The API client and the cache
    store open connections, so they are created on first use and only those
    actually created are closed by `aclose()`.

    Attributes:
        settings: Settings the components were built from
        breaker: Breaker shared by every call path to the upstream
        executor: Retry executor applied inside the breaker
        pipeline: Breaker + retry composition
    """

    def __init__(
        self,
        settings: Settings,
        api_client: Optional[ApiClient] = None,
        cache_store: Optional[CacheStore] = None,
    ):
        """
        Args:
            settings: Application settings
            api_client: Prebuilt client (default: ApiClient.from_settings on first use)
            cache_store: Prebuilt cache (default: RedisCacheStore.from_settings on first use)
        """
        self.settings = settings
        self.breaker = CircuitBreaker.from_settings(settings, name=UPSTREAM, is_failure=is_upstream_failure)
        self.executor = UpstreamRetryExecutor.from_settings(settings, name=UPSTREAM)
        self.pipeline = ResiliencePipeline(self.breaker, self.executor)
        self._api_client = api_client
        self._cache_store = cache_store
        self._data_accessor: Optional[FallbackAccessor] = None

    @property
    def api_client(self) -> ApiClient:
        if self._api_client is None:
            self._api_client = ApiClient.from_settings(self.settings)
        return self._api_client

    @property
    def cache_store(self) -> CacheStore:
        if self._cache_store is None:
            self._cache_store = RedisCacheStore.from_settings(self.settings)
        return self._cache_store

    @property
    def data_accessor(self) -> FallbackAccessor:
        """
        Live -> cache -> default accessor for upstream data.

        The live tier calls the upstream through the resilience pipeline, so a
        request first gets retries, then fails fast once the breaker opens, and
        only then degrades to cache or an empty default.
        """
        if self._data_accessor is None:
            self._data_accessor = FallbackAccessor(
                primary=self.fetch_upstream,
                cache=self.cache_store,
                default_factory=dict,
                name=UPSTREAM,
                write_timeout=self.settings.CACHE_WRITE_TIMEOUT,
            )
        return self._data_accessor

    @property
    def breakers(self) -> list[CircuitBreaker]:
        """All breakers owned by this application (for health reporting)."""
        return [self.breaker]

    async def fetch_upstream(self, key: str):
        client = self.api_client
        return await self.pipeline.execute(lambda: client.get(f"/data/{key}"))

    async def aclose(self) -> None:
        """Close the API client if one was created."""
        if self._api_client is not None:
            await self._api_client.aclose()
            logger.debug("Upstream resources closed")


def get_resources(request: Request) -> UpstreamResources:
    """Get the application's upstream resources."""
    return request.app.state.resources


def get_settings(request: Request) -> Settings:
    """
    Get the settings the application was created with.

    Returns:
        Settings instance
    """
    return request.app.state.settings


def get_data_accessor(resources: UpstreamResources = Depends(get_resources)) -> FallbackAccessor:
    return resources.data_accessor


def get_breakers(resources: UpstreamResources = Depends(get_resources)) -> list[CircuitBreaker]:
    return resources.breakers
