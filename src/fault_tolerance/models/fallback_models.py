"""
Graceful-degradation data models.

FallbackResult is what the data-access layer hands back to callers;
CacheEntry is the envelope persisted by cache stores so a cached value
can be told apart from a cache miss and aged if needed.
"""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fault_tolerance.models.enums import DataSource


class FallbackResult(BaseModel):
    """
    Value returned by FallbackAccessor, annotated with its provenance.

    `source` tells the caller which tier produced `data`: the live primary
    operation, the cache, or the configured default.
    """
    model_config = ConfigDict(frozen=True)

    data: Any = Field(default=None, description="Payload produced by the winning tier")
    source: DataSource = Field(..., description="Tier that produced the data: live, cache or default")


class CacheEntry(BaseModel):
    """Envelope stored in the cache for a single key."""

    data: Any = Field(default=None, description="Cached payload")
    timestamp: float = Field(
        default_factory=time.time,
        description="Unix timestamp (seconds) when the payload was cached",
    )
