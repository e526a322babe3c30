"""
Circuit breaker state machine.

Protects one dependency. Tracks consecutive failures and, once they reach
the threshold, fails fast for a cooldown period instead of calling a
dependency that is known to be failing.

States:
    - CLOSED: Normal operation, calls pass through
    - OPEN: Calls rejected with CircuitOpenError, operation not invoked
    - HALF_OPEN: A single probe call is admitted to test recovery

Transitions:
    CLOSED -> OPEN: failure_count reaches threshold
    OPEN -> HALF_OPEN: next call after reset_timeout has elapsed (evaluated
        lazily on that call, which then runs as the probe)
    HALF_OPEN -> CLOSED: probe succeeds
    HALF_OPEN -> OPEN: probe fails (opened_at restarts, error propagates)

Concurrency:
    One asyncio.Lock per breaker guards admission (including the lazy
    OPEN -> HALF_OPEN transition and probe admission) and outcome recording.
    The protected operation runs outside the lock. Every transition bumps a
    generation counter; outcomes of calls admitted under an older generation
    are ignored, so concurrent failures open the breaker exactly once.

Usage:
    breaker = CircuitBreaker(threshold=5, reset_timeout=30.0, name="orders-api")
    result = await breaker.execute(lambda: client.get("/orders"))
"""

import asyncio
import time
from typing import Callable, NamedTuple, Optional

import structlog

from fault_tolerance.breaker.exceptions import CIRCUIT_OPEN_MESSAGE, CircuitOpenError
from fault_tolerance.config import Settings
from fault_tolerance.models.breaker_models import BreakerSnapshot
from fault_tolerance.models.enums import CircuitState
from fault_tolerance.monitoring.metrics import (
    CIRCUIT_STATE_VALUES,
    circuit_breaker_rejections_total,
    circuit_breaker_state,
    circuit_breaker_transitions_total,
)
from fault_tolerance.operations import Operation, T, describe, invoke

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


def _every_error(error: Exception) -> bool:
    return True


class _Admission(NamedTuple):
    """State and generation a call was admitted under."""

    state: CircuitState
    generation: int


class CircuitBreaker:
    """
    Fixed-threshold, fixed-timeout circuit breaker for one dependency.

    Construct one instance per protected dependency and pass it to every
    call site that talks to that dependency.

    Attributes:
        name: Identifier of the protected dependency (logs, metrics)
        total_rejections: Calls rejected since creation
    """

    def __init__(
        self,
        threshold: int = 5,
        reset_timeout: float = 30.0,
        name: str = "default",
        clock: Clock = time.monotonic,
        is_failure: Optional[Callable[[Exception], bool]] = None,
    ):
        """
        Initialize circuit breaker in the CLOSED state.

        Args:
            threshold: Consecutive failures that open the breaker (>= 1)
            reset_timeout: Seconds to stay open before admitting a probe (>= 0)
            name: Identifier of the protected dependency
            clock: Monotonic clock in seconds (injectable for tests)
            is_failure: Decides whether an operation error counts against the
                dependency (default: every error). Errors it rejects are
                recorded like successes and still propagate.

        Raises:
            ValueError: If threshold or reset_timeout is out of range
        """
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        if reset_timeout < 0:
            raise ValueError(f"reset_timeout must be >= 0, got {reset_timeout}")

        self.name = name
        self._threshold = threshold
        self._reset_timeout = reset_timeout
        self._clock = clock
        self._is_failure = is_failure or _every_error

        # Guarded by _lock inside execute()
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: Optional[float] = None
        self._generation = 0
        self._probe_in_flight = False
        self._lock = asyncio.Lock()

        self.total_rejections = 0

        circuit_breaker_state.labels(breaker=name).set(CIRCUIT_STATE_VALUES[self._state.value])
        logger.info(
            "Circuit breaker initialized",
            breaker=name,
            threshold=threshold,
            reset_timeout=reset_timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings, name: str = "default", **kwargs) -> "CircuitBreaker":
        """Build a breaker from CIRCUIT_BREAKER_* settings."""
        return cls(
            threshold=settings.CIRCUIT_BREAKER_THRESHOLD,
            reset_timeout=settings.CIRCUIT_BREAKER_RESET_TIMEOUT,
            name=name,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # State queries (pure: they never evaluate the reset timeout)
    # ------------------------------------------------------------------

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def opened_at(self) -> Optional[float]:
        return self._opened_at

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def reset_timeout(self) -> float:
        return self._reset_timeout

    def is_open(self) -> bool:
        return self._state == CircuitState.OPEN

    def is_half_open(self) -> bool:
        return self._state == CircuitState.HALF_OPEN

    def is_closed(self) -> bool:
        return self._state == CircuitState.CLOSED

    def snapshot(self) -> BreakerSnapshot:
        """Immutable view of the breaker for health endpoints and logs."""
        return BreakerSnapshot(
            name=self.name,
            state=self._state,
            failure_count=self._failure_count,
            threshold=self._threshold,
            reset_timeout=self._reset_timeout,
            opened_at=self._opened_at,
            total_rejections=self.total_rejections,
        )

    # ------------------------------------------------------------------
    # Operational overrides
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Force CLOSED with a zero failure count."""
        if self._state == CircuitState.CLOSED:
            self._failure_count = 0
            self._generation += 1
            logger.info("Circuit breaker reset", breaker=self.name)
            return
        self._transition(CircuitState.CLOSED, reason="reset")

    def force_open(self) -> None:
        """Force OPEN; the reset timeout starts counting now."""
        self._transition(CircuitState.OPEN, reason="forced")

    def force_half_open(self) -> None:
        """Force HALF_OPEN with a free probe slot."""
        self._transition(CircuitState.HALF_OPEN, reason="forced")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, operation: Operation[T]) -> T:
        """
        Run `operation` under circuit breaker protection.

        Args:
            operation: Zero-argument callable returning the result (or an awaitable of it)

        Returns:
            The operation's result

        Raises:
            CircuitOpenError: Call rejected (open, or half-open with a probe in flight)
            Exception: The operation's own error, unchanged, after it is recorded
        """
        async with self._lock:
            admission = self._admit(operation)

        try:
            result = await invoke(operation)
        except Exception as e:
            async with self._lock:
                if self._is_failure(e):
                    self._record_failure(admission, e)
                else:
                    self._record_success(admission)
            raise
        except BaseException:
            # Cancelled: free the probe slot without judging the dependency
            self._release_probe(admission)
            raise

        async with self._lock:
            self._record_success(admission)
        return result

    def _admit(self, operation: Callable) -> _Admission:
        """Decide whether a call may proceed. Must hold _lock."""
        if self._state == CircuitState.OPEN:
            if self._reset_timeout_elapsed():
                self._transition(CircuitState.HALF_OPEN, reason="reset_timeout_elapsed")
            else:
                self._reject(operation, retry_after=self._remaining_open_time())

        if self._state == CircuitState.HALF_OPEN:
            if self._probe_in_flight:
                self._reject(operation, retry_after=None)
            self._probe_in_flight = True
            logger.info("Admitting half-open probe", breaker=self.name, operation=describe(operation))

        return _Admission(self._state, self._generation)

    def _reject(self, operation: Callable, retry_after: Optional[float]) -> None:
        self.total_rejections += 1
        circuit_breaker_rejections_total.labels(breaker=self.name).inc()
        logger.warning(
            "Circuit breaker rejected call",
            breaker=self.name,
            state=self._state.value,
            operation=describe(operation),
            retry_after=retry_after,
            total_rejections=self.total_rejections,
        )
        raise CircuitOpenError(CIRCUIT_OPEN_MESSAGE, breaker_name=self.name, retry_after=retry_after)

    def _record_success(self, admission: _Admission) -> None:
        """Apply a successful outcome. Must hold _lock."""
        if admission.generation != self._generation:
            logger.debug("Ignoring stale success", breaker=self.name, admitted_in=admission.state.value)
            return

        if admission.state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.CLOSED, reason="probe_succeeded")
        else:
            self._failure_count = 0

    def _record_failure(self, admission: _Admission, error: Exception) -> None:
        """Apply a failed outcome. Must hold _lock."""
        if admission.generation != self._generation:
            logger.debug(
                "Ignoring stale failure",
                breaker=self.name,
                admitted_in=admission.state.value,
                error_type=type(error).__name__,
            )
            return

        if admission.state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN, reason="probe_failed", error=error)
            return

        self._failure_count += 1
        logger.debug(
            "Failure recorded",
            breaker=self.name,
            failure_count=self._failure_count,
            threshold=self._threshold,
            error_type=type(error).__name__,
        )
        if self._failure_count >= self._threshold:
            self._transition(CircuitState.OPEN, reason="threshold_reached", error=error)

    def _release_probe(self, admission: _Admission) -> None:
        if admission.state == CircuitState.HALF_OPEN and admission.generation == self._generation:
            self._probe_in_flight = False

    def _transition(
        self, new_state: CircuitState, reason: str, error: Optional[Exception] = None
    ) -> None:
        old_state = self._state
        self._state = new_state
        self._generation += 1
        self._probe_in_flight = False

        if new_state == CircuitState.OPEN:
            self._opened_at = self._clock()
        elif new_state == CircuitState.CLOSED:
            self._failure_count = 0
            self._opened_at = None

        circuit_breaker_state.labels(breaker=self.name).set(CIRCUIT_STATE_VALUES[new_state.value])
        circuit_breaker_transitions_total.labels(
            breaker=self.name, from_state=old_state.value, to_state=new_state.value
        ).inc()

        log = logger.warning if new_state == CircuitState.OPEN else logger.info
        log(
            f"Circuit breaker {old_state.value} -> {new_state.value}",
            breaker=self.name,
            reason=reason,
            failure_count=self._failure_count,
            error_type=type(error).__name__ if error else None,
        )

    def _reset_timeout_elapsed(self) -> bool:
        if self._opened_at is None:
            return True
        return self._clock() - self._opened_at >= self._reset_timeout

    def _remaining_open_time(self) -> Optional[float]:
        if self._opened_at is None:
            return None
        return max(0.0, self._reset_timeout - (self._clock() - self._opened_at))

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(name={self.name!r}, state={self._state.value}, "
            f"failure_count={self._failure_count}, threshold={self._threshold})"
        )
