"""
Unit tests for the cache stores.
"""

import json

import pytest
import redis
from pydantic import ValidationError

from fault_tolerance.models.fallback_models import CacheEntry
from fault_tolerance.persistence.cache_store import InMemoryCacheStore, RedisCacheStore


@pytest.fixture
def store(mock_async_redis):
    return RedisCacheStore(mock_async_redis, ttl_seconds=60, key_prefix="test:cache:")


# ============================================================================
# RedisCacheStore
# ============================================================================


@pytest.mark.asyncio
async def test_get_miss_returns_none(store, mock_async_redis):
    assert await store.get("missing") is None
    mock_async_redis.get.assert_awaited_once_with("test:cache:missing")


@pytest.mark.asyncio
async def test_get_hit_returns_envelope(store, mock_async_redis):
    mock_async_redis.get.return_value = json.dumps({"data": {"id": 7}, "timestamp": 1700000000.0})

    entry = await store.get("user:7")

    assert entry == CacheEntry(data={"id": 7}, timestamp=1700000000.0)


@pytest.mark.asyncio
async def test_set_stores_json_envelope_with_ttl(store, mock_async_redis):
    await store.set("user:7", {"id": 7})

    args, kwargs = mock_async_redis.set.call_args
    assert args[0] == "test:cache:user:7"
    stored = json.loads(args[1])
    assert stored["data"] == {"id": 7}
    assert isinstance(stored["timestamp"], float)
    assert kwargs == {"ex": 60}


@pytest.mark.asyncio
async def test_get_propagates_redis_errors(store, mock_async_redis):
    """Test the store reports failures and leaves handling to the caller."""
    mock_async_redis.get.side_effect = redis.ConnectionError("refused")

    with pytest.raises(redis.ConnectionError):
        await store.get("k")


@pytest.mark.asyncio
async def test_get_rejects_malformed_entry(store, mock_async_redis):
    mock_async_redis.get.return_value = "not json"

    with pytest.raises(ValidationError):
        await store.get("k")


@pytest.mark.asyncio
async def test_delete(store, mock_async_redis):
    assert await store.delete("k") is True
    mock_async_redis.delete.assert_awaited_once_with("test:cache:k")

    mock_async_redis.delete.return_value = 0
    assert await store.delete("k") is False


def test_from_settings_uses_cache_settings(test_settings, monkeypatch):
    sentinel = object()
    monkeypatch.setattr(
        "fault_tolerance.persistence.cache_store.RedisClient.get_async_client",
        lambda settings: sentinel,
    )

    store = RedisCacheStore.from_settings(test_settings)

    assert store.redis is sentinel
    assert store.ttl_seconds == test_settings.CACHE_TTL_SECONDS
    assert store.key_prefix == test_settings.CACHE_KEY_PREFIX


# ============================================================================
# InMemoryCacheStore
# ============================================================================


@pytest.mark.asyncio
async def test_in_memory_store_round_trip():
    store = InMemoryCacheStore()

    assert await store.get("k") is None
    await store.set("k", [1, 2, 3])

    entry = await store.get("k")
    assert entry.data == [1, 2, 3]
    assert len(store) == 1

    assert await store.delete("k") is True
    assert await store.delete("k") is False
    assert len(store) == 0
