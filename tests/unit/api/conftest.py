"""API test fixtures: a test app built from test settings."""

import pytest
from fastapi.testclient import TestClient

from fault_tolerance.main import create_app
from fault_tolerance.persistence.redis_client import RedisClient


@pytest.fixture(autouse=True)
def reset_redis_pool():
    """Forget any pool created while building cache stores."""
    RedisClient._async_pool = None
    yield
    RedisClient._async_pool = None


@pytest.fixture
def app(test_settings):
    app = create_app(test_settings)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """TestClient that turns unhandled errors into 500 responses."""
    return TestClient(app, raise_server_exceptions=False)
