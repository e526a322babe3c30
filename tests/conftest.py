"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from fault_tolerance.config import Settings


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Delays are tiny so nothing in the suite actually waits long, and
    metrics exposure is off.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.CIRCUIT_BREAKER_THRESHOLD = 2
    """
    return Settings(
        # === Application ===
        APP_NAME="Fault Tolerance Toolkit (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Retry ===
        RETRY_MAX_RETRIES=3,
        RETRY_BASE_DELAY=0.1,
        RATE_LIMIT_MAX_RETRIES=3,
        RATE_LIMIT_BASE_DELAY=1.0,

        # === Circuit Breaker ===
        CIRCUIT_BREAKER_THRESHOLD=3,
        CIRCUIT_BREAKER_RESET_TIMEOUT=30.0,

        # === Upstream / Redis ===
        UPSTREAM_BASE_URL="http://upstream.test",
        UPSTREAM_TIMEOUT=2.0,
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=10,
        REDIS_SOCKET_TIMEOUT=1.0,
        CACHE_TTL_SECONDS=60,
        CACHE_KEY_PREFIX="test:cache:",

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,  # Disable metrics endpoint in tests unless explicitly needed
    )
