"""
Retry policy configuration.

A RetryPolicy captures how many times an operation may be retried and how
long to wait between attempts. The backoff multiplier is fixed at 2, so
retry n waits `base_delay * 2 ** (n - 1)`:

    base_delay=0.1  ->  0.1s, 0.2s, 0.4s, ...  (cumulative 0.1s, 0.3s, 0.7s)
"""

from dataclasses import dataclass

from fault_tolerance.config import Settings

BACKOFF_MULTIPLIER = 2


@dataclass(frozen=True)
class RetryPolicy:
    """
    Immutable retry configuration.

    Attributes:
        max_retries: Retries after the first attempt (total attempts = max_retries + 1)
        base_delay: Wait in seconds before the first retry
    """

    max_retries: int = 3
    base_delay: float = 0.1

    def __post_init__(self) -> None:
        if isinstance(self.max_retries, bool) or not isinstance(self.max_retries, int):
            raise ValueError(f"max_retries must be an integer, got {self.max_retries!r}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {self.base_delay}")

    @property
    def total_attempts(self) -> int:
        """Maximum number of times the operation is invoked."""
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """
        Backoff to apply after failed attempt `attempt` (1-indexed).

        Args:
            attempt: Number of the attempt that just failed

        Returns:
            Seconds to wait before the next attempt
        """
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        return self.base_delay * BACKOFF_MULTIPLIER ** (attempt - 1)

    def delays(self) -> list[float]:
        """All waits a fully failing call goes through, in order."""
        return [self.delay_for(attempt) for attempt in range(1, self.max_retries + 1)]

    def with_overrides(
        self, max_retries: int | None = None, base_delay: float | None = None
    ) -> "RetryPolicy":
        """Return a policy with the given fields replaced (validated again)."""
        if max_retries is None and base_delay is None:
            return self
        return RetryPolicy(
            max_retries=self.max_retries if max_retries is None else max_retries,
            base_delay=self.base_delay if base_delay is None else base_delay,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        """Generic retry policy (RETRY_MAX_RETRIES, RETRY_BASE_DELAY)."""
        return cls(max_retries=settings.RETRY_MAX_RETRIES, base_delay=settings.RETRY_BASE_DELAY)

    @classmethod
    def rate_limit_from_settings(cls, settings: Settings) -> "RetryPolicy":
        """Rate-limit policy (RATE_LIMIT_MAX_RETRIES, RATE_LIMIT_BASE_DELAY)."""
        return cls(
            max_retries=settings.RATE_LIMIT_MAX_RETRIES,
            base_delay=settings.RATE_LIMIT_BASE_DELAY,
        )
