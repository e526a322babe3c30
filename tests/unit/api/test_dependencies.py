"""
Unit tests for API dependency injection.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from fault_tolerance.api.dependencies import UPSTREAM, UpstreamResources
from fault_tolerance.breaker.circuit_breaker import CircuitBreaker
from fault_tolerance.client.api_client import ApiClient
from fault_tolerance.config import Settings
from fault_tolerance.main import create_app
from fault_tolerance.models.enums import DataSource
from fault_tolerance.persistence.cache_store import InMemoryCacheStore, RedisCacheStore
from fault_tolerance.retry.executor import UpstreamRetryExecutor


def upstream_client(handler) -> ApiClient:
    return ApiClient("http://upstream.test", transport=httpx.MockTransport(handler))


# ============================================================================
# UpstreamResources
# ============================================================================


def test_resources_follow_settings(test_settings):
    resources = UpstreamResources(test_settings)

    assert isinstance(resources.breaker, CircuitBreaker)
    assert resources.breaker.name == UPSTREAM
    assert resources.breaker.threshold == test_settings.CIRCUIT_BREAKER_THRESHOLD
    assert isinstance(resources.executor, UpstreamRetryExecutor)
    assert resources.executor.policy.max_retries == test_settings.RETRY_MAX_RETRIES
    assert resources.pipeline.breaker is resources.breaker
    assert resources.pipeline.executor is resources.executor
    assert resources.breakers == [resources.breaker]


def test_client_and_cache_built_lazily_once(test_settings):
    resources = UpstreamResources(test_settings)

    client = resources.api_client
    cache = resources.cache_store

    assert client is resources.api_client
    assert client.base_url == test_settings.UPSTREAM_BASE_URL
    assert isinstance(cache, RedisCacheStore)
    assert cache.key_prefix == test_settings.CACHE_KEY_PREFIX
    assert resources.data_accessor is resources.data_accessor
    assert resources.data_accessor.cache is cache
    assert resources.data_accessor.write_timeout == test_settings.CACHE_WRITE_TIMEOUT


@pytest.mark.asyncio
async def test_aclose_does_not_create_client(test_settings):
    """Test shutting down an app that never called the upstream builds nothing."""
    resources = UpstreamResources(test_settings)

    await resources.aclose()

    assert resources._api_client is None


@pytest.mark.asyncio
async def test_aclose_closes_created_client(test_settings):
    resources = UpstreamResources(test_settings)
    client = resources.api_client
    await client._get_client()

    await resources.aclose()

    assert client._client is None


@pytest.mark.asyncio
async def test_unknown_keys_do_not_open_upstream_breaker(test_settings):
    """Test a run of 404s is neither retried nor counted against the upstream."""
    test_settings.CIRCUIT_BREAKER_THRESHOLD = 2
    test_settings.RETRY_MAX_RETRIES = 3
    hits = []

    def handler(request: httpx.Request) -> httpx.Response:
        hits.append(request.url.path)
        if request.url.path == "/data/missing":
            return httpx.Response(404)
        return httpx.Response(200, json={"id": "exists"})

    resources = UpstreamResources(
        test_settings, api_client=upstream_client(handler), cache_store=InMemoryCacheStore()
    )
    accessor = resources.data_accessor

    for _ in range(5):
        result = await accessor.get_data_with_fallback("missing")
        assert result.source == DataSource.DEFAULT

    found = await accessor.get_data_with_fallback("exists")

    assert hits == ["/data/missing"] * 5 + ["/data/exists"]
    assert resources.breaker.is_closed()
    assert found.source == DataSource.LIVE
    assert found.data == {"id": "exists"}
    await resources.aclose()


@pytest.mark.asyncio
async def test_upstream_outage_still_opens_breaker(test_settings):
    test_settings.CIRCUIT_BREAKER_THRESHOLD = 2
    test_settings.RETRY_MAX_RETRIES = 0
    resources = UpstreamResources(
        test_settings,
        api_client=upstream_client(lambda request: httpx.Response(503)),
        cache_store=InMemoryCacheStore(),
    )

    for _ in range(2):
        await resources.data_accessor.get_data_with_fallback("k")

    assert resources.breaker.is_open()
    await resources.aclose()


# ============================================================================
# Application wiring
# ============================================================================


def test_create_app_uses_its_own_settings():
    """Test components reached through the app follow the settings it was built with."""
    custom = Settings(
        APP_VERSION="9.9.9",
        UPSTREAM_BASE_URL="http://custom-upstream",
        CIRCUIT_BREAKER_THRESHOLD=1,
        PROMETHEUS_ENABLED=False,
    )
    app = create_app(custom)
    client = TestClient(app)

    assert client.get("/").json()["version"] == "9.9.9"
    assert client.get("/health").json()["version"] == "9.9.9"
    assert client.get("/health/breakers").json()["breakers"][0]["threshold"] == 1
    assert app.state.resources.api_client.base_url == "http://custom-upstream"
    assert app.state.resources.breaker.threshold == 1


def test_apps_do_not_share_breakers(test_settings):
    first = create_app(test_settings)
    second = create_app(test_settings)

    assert first.state.resources.breaker is not second.state.resources.breaker
