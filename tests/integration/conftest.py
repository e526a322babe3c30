"""Integration test fixtures (service checks and prerequisites).

Integration tests are skipped if required services are not running.
"""

import pytest
import pytest_asyncio
from redis.asyncio import Redis as AsyncRedis

REDIS_TEST_URL = "redis://localhost:6379/15"


@pytest_asyncio.fixture
async def real_async_redis_client():
    """Real AsyncRedis client on database 15 (test database).

    Skips the test if Redis is not reachable.
    """
    client = AsyncRedis.from_url(REDIS_TEST_URL, decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis not available: {e}")

    # Clear test database before test
    await client.flushdb()

    yield client

    # Clear test database after test
    await client.flushdb()
    await client.aclose()


@pytest.fixture
def integration_settings(test_settings):
    """Settings pointing at local services."""
    test_settings.REDIS_URL = REDIS_TEST_URL
    test_settings.PROMETHEUS_ENABLED = False
    return test_settings
