"""
Rate-limit aware caller.

A RetryExecutor specialization that treats HTTP 429 Too Many Requests as the
only retryable failure. Any other failure propagates on the first attempt.
The backoff formula is the executor's (base_delay, 2x, 4x, ...).

A 429 can reach the caller in three shapes, all treated the same:
    - a RateLimitedError raised by our ApiClient
    - any exception exposing `status_code == 429` or `response.status_code == 429`
      (e.g. httpx.HTTPStatusError after raise_for_status())
    - a response object returned with `status_code == 429`

Usage:
    caller = RateLimitAwareCaller(RetryPolicy(max_retries=3, base_delay=1.0))
    response = await caller.call_with_rate_limit_handling(lambda: http.get("/quota"))
"""

import asyncio
from typing import Any, Optional

import structlog

from fault_tolerance.client.exceptions import RateLimitedError
from fault_tolerance.config import Settings
from fault_tolerance.monitoring.metrics import rate_limit_hits_total
from fault_tolerance.operations import Operation, T, describe, invoke
from fault_tolerance.retry.executor import RetryExecutor, SleepFunc
from fault_tolerance.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)

HTTP_TOO_MANY_REQUESTS = 429


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a delta-seconds Retry-After header value (HTTP-dates are ignored)."""
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def is_rate_limited(error: BaseException) -> bool:
    """True if `error` signals HTTP 429."""
    if isinstance(error, RateLimitedError):
        return True
    if getattr(error, "status_code", None) == HTTP_TOO_MANY_REQUESTS:
        return True
    response = getattr(error, "response", None)
    return getattr(response, "status_code", None) == HTTP_TOO_MANY_REQUESTS


class RateLimitAwareCaller(RetryExecutor):
    """
    Retries a request only while the upstream keeps answering 429.

    Holds no per-call state: each call gets its own attempt counter and
    shares only the immutable policy.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
        name: str = "rate_limit",
    ):
        super().__init__(policy=policy, sleep=sleep, name=name)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RateLimitAwareCaller":
        """Build a caller from RATE_LIMIT_* settings."""
        return cls(RetryPolicy.rate_limit_from_settings(settings), **kwargs)

    def is_retryable(self, error: Exception) -> bool:
        return is_rate_limited(error)

    async def execute(
        self,
        operation: Operation[T],
        max_retries: int | None = None,
        base_delay: float | None = None,
    ) -> T:
        """
        Run `operation`, retrying with backoff while it is rate limited.

        A returned 429 response is treated exactly like a raised 429 error.
        """
        return await super().execute(
            self._raise_on_429(operation), max_retries=max_retries, base_delay=base_delay
        )

    async def call_with_rate_limit_handling(
        self,
        request: Operation[T],
        max_retries: int | None = None,
        base_delay: float | None = None,
    ) -> T:
        """
        Issue `request`, retrying with backoff while it is rate limited.

        Args:
            request: Zero-argument callable performing the request
            max_retries: Override of policy.max_retries for this call
            base_delay: Override of policy.base_delay (seconds) for this call

        Returns:
            The first non-429 response

        Raises:
            RateLimitedError: Still rate limited after every retry (or the
                caller's own 429 error, unchanged)
            Exception: Any non-429 failure, immediately and unchanged
        """
        return await self.execute(request, max_retries=max_retries, base_delay=base_delay)

    def _raise_on_429(self, request: Operation[T]) -> Operation[T]:
        """Wrap `request` so 429 responses raise RateLimitedError and every 429 is counted."""

        async def attempt() -> Any:
            try:
                response = await invoke(request)
            except Exception as e:
                if is_rate_limited(e):
                    rate_limit_hits_total.labels(executor=self.name).inc()
                raise

            if getattr(response, "status_code", None) == HTTP_TOO_MANY_REQUESTS:
                rate_limit_hits_total.labels(executor=self.name).inc()
                headers = getattr(response, "headers", None) or {}
                retry_after = parse_retry_after(headers.get("Retry-After"))
                logger.warning(
                    "Upstream returned 429 Too Many Requests",
                    executor=self.name,
                    retry_after=retry_after,
                )
                raise RateLimitedError(retry_after=retry_after)

            return response

        attempt.__qualname__ = describe(request)
        return attempt
