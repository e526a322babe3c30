"""
Circuit breaker exceptions.

CircuitOpenError is synthetic: the breaker raises it instead of calling a
dependency it knows is failing. It shares no base class with operation
errors so callers can always tell a rejection from a real failure.
"""

CIRCUIT_OPEN_MESSAGE = "Circuit breaker is open"


class CircuitOpenError(Exception):
    """
    Raised when a call is rejected without invoking the protected operation.

    Happens while the breaker is open and its reset timeout has not elapsed,
    or while it is half-open and another call already holds the probe slot.

    Attributes:
        breaker_name: Name of the breaker that rejected the call
        retry_after: Seconds until the breaker will admit a probe (None if unknown)
    """

    def __init__(
        self,
        message: str = CIRCUIT_OPEN_MESSAGE,
        breaker_name: str = "default",
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.breaker_name = breaker_name
        self.retry_after = retry_after
