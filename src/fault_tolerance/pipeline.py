"""
Composition of a circuit breaker around a retry executor.

The breaker sits outside so it fails fast once the dependency is known to
be bad; the executor sits inside so transient blips are absorbed before the
breaker counts a failure. One breaker call therefore covers a whole retry
sequence:

    breaker.execute(lambda: executor.execute(operation))

A FallbackAccessor is typically layered on top at the data-access layer,
with `pipeline.execute` as (part of) its primary fetch.
"""

import structlog

from fault_tolerance.breaker.circuit_breaker import CircuitBreaker
from fault_tolerance.operations import Operation, T
from fault_tolerance.retry.executor import RetryExecutor

logger = structlog.get_logger(__name__)


class ResiliencePipeline:
    """
    Breaker-wrapped retry executor for one dependency.

    Attributes:
        breaker: Breaker shared by every call path to the dependency
        executor: Retry executor applied inside the breaker
    """

    def __init__(self, breaker: CircuitBreaker, executor: RetryExecutor):
        self.breaker = breaker
        self.executor = executor
        logger.debug(
            "Resilience pipeline assembled",
            breaker=breaker.name,
            executor=executor.name,
            max_retries=executor.policy.max_retries,
        )

    async def execute(self, operation: Operation[T]) -> T:
        """
        Run `operation` with retries, behind the breaker.

        Raises:
            CircuitOpenError: Breaker rejected the call
            Exception: The last retry's error, unchanged
        """
        return await self.breaker.execute(lambda: self.executor.execute(operation))
