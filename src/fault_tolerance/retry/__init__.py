"""
Retry with exponential backoff.

Three executors share one backoff policy (wait base_delay * 2^(n-1) before
retry n, no wait after the final attempt, last error re-raised unchanged):

1. **RetryExecutor**: retries every failure
2. **UpstreamRetryExecutor**: retries everything except upstream client errors
3. **RateLimitAwareCaller**: retries only HTTP 429 (rate limited) failures

Main Components:
    - RetryPolicy: Immutable max_retries / base_delay configuration
    - RetryExecutor: Generic retry loop
    - RateLimitAwareCaller: 429-only specialization

Usage:
    >>> from fault_tolerance.retry import RetryExecutor, RetryPolicy
    >>> executor = RetryExecutor(RetryPolicy(max_retries=3, base_delay=0.1))
    >>> result = await executor.execute(fetch_orders)
"""

from fault_tolerance.retry.executor import RetryExecutor, UpstreamRetryExecutor
from fault_tolerance.retry.policy import RetryPolicy
from fault_tolerance.retry.rate_limit import (
    RateLimitAwareCaller,
    is_rate_limited,
    parse_retry_after,
)

__all__ = [
    "RetryPolicy",
    "RetryExecutor",
    "UpstreamRetryExecutor",
    "RateLimitAwareCaller",
    "is_rate_limited",
    "parse_retry_after",
]
