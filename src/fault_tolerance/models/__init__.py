"""
Pydantic data models for the fault-tolerance toolkit.

Includes:
- Enums (CircuitState, DataSource)
- Fallback models (FallbackResult, CacheEntry)
- Breaker models (BreakerSnapshot)
"""

from fault_tolerance.models.enums import CircuitState, DataSource
from fault_tolerance.models.fallback_models import CacheEntry, FallbackResult
from fault_tolerance.models.breaker_models import BreakerSnapshot

__all__ = [
    # Enums
    "CircuitState",
    "DataSource",
    # Fallback
    "FallbackResult",
    "CacheEntry",
    # Breaker
    "BreakerSnapshot",
]
