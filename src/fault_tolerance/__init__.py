"""
Fault-tolerance toolkit for calls to unreliable dependencies.

Four cooperating components protect an outbound asynchronous operation:
- RetryExecutor: exponential-backoff retries (baseDelay, 2x, 4x, ...)
- CircuitBreaker: closed/open/half-open state machine per dependency
- FallbackAccessor: live -> cache -> default graceful degradation
- RateLimitAwareCaller: retries only on HTTP 429 signals

Architecture: asyncio components + Redis cache adapter + httpx API client,
surfaced through a small FastAPI service.
"""

__version__ = "0.1.0"
