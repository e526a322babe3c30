"""
Enumerations for fault-tolerance data models.

All enums are closed sets - no values outside these sets are permitted.
"""

from enum import Enum


class CircuitState(str, Enum):
    """
    Circuit breaker state.

    CLOSED is the initial state. OPEN rejects calls without invoking the
    protected operation. HALF_OPEN admits a single probe call.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class DataSource(str, Enum):
    """
    Provenance tag of a FallbackResult.

    Ordered from best to worst quality.
    """

    LIVE = "live"
    CACHE = "cache"
    DEFAULT = "default"
