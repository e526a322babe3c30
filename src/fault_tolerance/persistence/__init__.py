"""
Cache persistence layer.

- redis_client.py: Redis async connection pooling
- cache_store.py: CacheStore contract, Redis and in-memory implementations

Storage Strategy:
- Entries stored as JSON envelopes {"data", "timestamp"} with TTL (default 5 min)
- Keys namespaced with CACHE_KEY_PREFIX
"""

from fault_tolerance.persistence.cache_store import (
    CacheStore,
    InMemoryCacheStore,
    RedisCacheStore,
)
from fault_tolerance.persistence.redis_client import RedisClient

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "RedisCacheStore",
    "RedisClient",
]
