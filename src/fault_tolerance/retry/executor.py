"""
Retry executor with exponential backoff.

Runs an operation and retries it on failure, waiting `base_delay`,
`2 * base_delay`, `4 * base_delay`, ... between attempts. Waits are
cooperative (`await sleep(...)`), so the calling task yields during backoff.

Policy:
    - Success returns immediately, no further attempts
    - Failure with retries left: wait, then retry
    - After max_retries + 1 failed attempts: re-raise the last error unchanged
    - No wait after the final attempt

The base executor retries every failure. Classification (e.g. "only retry
rate limits") is layered on top by overriding `is_retryable`.

Usage:
    executor = RetryExecutor(RetryPolicy(max_retries=3, base_delay=0.1))
    result = await executor.execute(lambda: client.get("/orders"))
"""

import asyncio
from typing import Awaitable, Callable

import structlog

from fault_tolerance.client.exceptions import is_client_error
from fault_tolerance.config import Settings
from fault_tolerance.monitoring.metrics import retry_attempts_total, retry_exhausted_total
from fault_tolerance.operations import Operation, T, describe, invoke
from fault_tolerance.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """
    Executes operations with bounded, exponentially backed-off retries.

    The executor holds no state between calls: every `execute` invocation
    is independent, so a single instance can be shared freely.

    Attributes:
        policy: Default retry policy (overridable per call)
        name: Executor name used in logs and metrics
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
        name: str = "default",
    ):
        """
        Initialize retry executor.

        Args:
            policy: Default retry policy (RetryPolicy() if omitted)
            sleep: Awaitable sleep used for backoff waits (injectable for tests)
            name: Executor name for logs and metrics
        """
        self.policy = policy or RetryPolicy()
        self.name = name
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "RetryExecutor":
        """Build an executor from RETRY_* settings."""
        return cls(RetryPolicy.from_settings(settings), **kwargs)

    def is_retryable(self, error: Exception) -> bool:
        """
        Decide whether a failure may be retried.

        The base executor does not classify errors. Subclasses narrow this.
        """
        return True

    async def execute(
        self,
        operation: Operation[T],
        max_retries: int | None = None,
        base_delay: float | None = None,
    ) -> T:
        """
        Run `operation`, retrying failures with exponential backoff.

        Args:
            operation: Zero-argument callable returning the result (or an awaitable of it)
            max_retries: Override of policy.max_retries for this call
            base_delay: Override of policy.base_delay (seconds) for this call

        Returns:
            The operation's first successful result

        Raises:
            Exception: The last attempt's error, unchanged, once retries are
                exhausted, or a non-retryable error immediately
        """
        policy = self.policy.with_overrides(max_retries=max_retries, base_delay=base_delay)
        operation_name = describe(operation)

        attempt = 0
        while True:
            attempt += 1
            try:
                result = await invoke(operation)
            except Exception as e:
                if not self.is_retryable(e):
                    retry_attempts_total.labels(executor=self.name, outcome="non_retryable").inc()
                    logger.info(
                        "Non-retryable failure, propagating",
                        executor=self.name,
                        operation=operation_name,
                        attempt=attempt,
                        error_type=type(e).__name__,
                    )
                    raise

                if attempt > policy.max_retries:
                    retry_attempts_total.labels(executor=self.name, outcome="exhausted").inc()
                    retry_exhausted_total.labels(executor=self.name).inc()
                    logger.error(
                        "Retries exhausted",
                        executor=self.name,
                        operation=operation_name,
                        attempts=attempt,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    raise

                delay = policy.delay_for(attempt)
                retry_attempts_total.labels(executor=self.name, outcome="retry").inc()
                logger.warning(
                    f"Attempt {attempt}/{policy.total_attempts} failed, retrying in {delay}s",
                    executor=self.name,
                    operation=operation_name,
                    attempt=attempt,
                    backoff_seconds=delay,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                await self._sleep(delay)
                continue

            retry_attempts_total.labels(executor=self.name, outcome="success").inc()
            if attempt > 1:
                logger.info(
                    "Operation succeeded after retry",
                    executor=self.name,
                    operation=operation_name,
                    attempts=attempt,
                )
            return result


class UpstreamRetryExecutor(RetryExecutor):
    """
    Retry executor for calls to an HTTP upstream.

    Client errors (4xx other than 408/429) propagate on the first attempt:
    the same request would be rejected again.
    """

    def is_retryable(self, error: Exception) -> bool:
        return not is_client_error(error)
