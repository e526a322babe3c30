"""Custom Prometheus metrics for the fault-tolerance toolkit.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- circuit_breaker_state (any breaker stuck open)
- retry_exhausted_total (dependency failing beyond the retry budget)
- rate_limit_hits_total (upstream throttling us)
- fallback_results_total{source="default"} (serving degraded data)
"""

from prometheus_client import Counter, Gauge

# === Circuit Breaker Metrics ===

circuit_breaker_state = Gauge(
    "circuit_breaker_state",
    "Current circuit breaker state (0=closed, 1=open, 2=half_open)",
    ["breaker"],
)
"""
Current breaker state per protected dependency.

Labels:
- breaker: Breaker name (one breaker per dependency)

Alert thresholds:
- WARN: value == 1 for > 1 reset_timeout
- CRITICAL: value == 1 for > 10 minutes
"""

circuit_breaker_transitions_total = Counter(
    "circuit_breaker_transitions_total",
    "Total circuit breaker state transitions",
    ["breaker", "from_state", "to_state"],
)
"""
State transition counter.

Labels:
- breaker: Breaker name
- from_state / to_state: closed, open, half_open

Frequent open -> half_open -> open cycles indicate a dependency that
keeps failing its recovery probes.
"""

circuit_breaker_rejections_total = Counter(
    "circuit_breaker_rejections_total",
    "Total calls rejected without invoking the protected operation",
    ["breaker"],
)

# === Retry Metrics ===

retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total operation attempts made by retry executors by outcome",
    ["executor", "outcome"],
)
"""
Attempt counter by executor and outcome.

Labels:
- executor: Executor name
- outcome: success, retry (failed, will retry), non_retryable, exhausted

Alert thresholds:
- WARN: retry rate > 10% of total attempts
- CRITICAL: retry rate > 30% of total attempts
"""

retry_exhausted_total = Counter(
    "retry_exhausted_total",
    "Total calls that failed after exhausting every retry",
    ["executor"],
)

rate_limit_hits_total = Counter(
    "rate_limit_hits_total",
    "Total HTTP 429 (rate limited) responses observed",
    ["executor"],
)
"""
Rate-limit signal counter.

Labels:
- executor: Rate-limit aware caller name

A sustained rate indicates the upstream quota is too small for our traffic.
"""

# === Graceful Degradation Metrics ===

fallback_results_total = Counter(
    "fallback_results_total",
    "Total fallback accessor results by provenance",
    ["accessor", "source"],
)
"""
Fallback results by provenance tier.

Labels:
- accessor: Accessor name
- source: live, cache, default

Alert thresholds:
- WARN: source="cache" > 5% of results
- CRITICAL: source="default" > 1% of results
"""

CIRCUIT_STATE_VALUES = {"closed": 0, "open": 1, "half_open": 2}
