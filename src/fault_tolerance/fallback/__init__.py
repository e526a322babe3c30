"""
Graceful degradation: live -> cache -> default.

FallbackAccessor always returns a FallbackResult whose `source` names the
tier that produced the data.
"""

from fault_tolerance.fallback.accessor import FallbackAccessor, unwrap_cached

__all__ = [
    "FallbackAccessor",
    "unwrap_cached",
]
