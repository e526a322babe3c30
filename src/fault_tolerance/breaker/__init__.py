"""
Circuit breaker for protecting a single dependency.

Closed -> Open after `threshold` consecutive failures; Open rejects calls
with CircuitOpenError until `reset_timeout` elapses; the next call then runs
as a half-open probe that either closes or re-opens the breaker.
"""

from fault_tolerance.breaker.circuit_breaker import CircuitBreaker
from fault_tolerance.breaker.exceptions import CIRCUIT_OPEN_MESSAGE, CircuitOpenError

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CIRCUIT_OPEN_MESSAGE",
]
