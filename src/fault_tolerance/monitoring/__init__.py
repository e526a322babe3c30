"""Monitoring and metrics instrumentation for the fault-tolerance toolkit.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from fault_tolerance.monitoring.metrics import (
    CIRCUIT_STATE_VALUES,
    circuit_breaker_rejections_total,
    circuit_breaker_state,
    circuit_breaker_transitions_total,
    fallback_results_total,
    rate_limit_hits_total,
    retry_attempts_total,
    retry_exhausted_total,
)

__all__ = [
    "CIRCUIT_STATE_VALUES",
    "circuit_breaker_state",
    "circuit_breaker_transitions_total",
    "circuit_breaker_rejections_total",
    "retry_attempts_total",
    "retry_exhausted_total",
    "rate_limit_hits_total",
    "fallback_results_total",
]
