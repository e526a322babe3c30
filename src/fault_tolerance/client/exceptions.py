"""
Custom exceptions for the upstream API client.

These exceptions carry the HTTP status that should be surfaced to callers,
and let the rate-limit aware caller recognize throttling (HTTP 429) as
distinct from every other failure.
"""

from typing import Any, Optional


class ApiError(Exception):
    """
    Base exception for errors that map onto an HTTP status.

    Attributes:
        status_code: HTTP status code to surface
        message: Human-readable message
        details: Extra context (upstream status, path, ...)
    """

    def __init__(self, status_code: int, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details or {}


class RequestTimeoutError(ApiError):
    """
    Raised when an upstream request exceeds its timeout.

    Surfaced as 408 Request Timeout.
    """

    def __init__(self, message: str = "Request timed out", details: dict[str, Any] | None = None):
        super().__init__(408, message, details)


class RateLimitedError(ApiError):
    """
    Raised when the upstream answers HTTP 429 Too Many Requests.

    This is the only failure RateLimitAwareCaller retries.

    Attributes:
        retry_after: Seconds suggested by the upstream Retry-After header, if any
    """

    def __init__(
        self,
        message: str = "Too many requests",
        retry_after: Optional[float] = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(429, message, details)
        self.retry_after = retry_after


# Upstream statuses in the 4xx range that still signal a struggling upstream
UPSTREAM_PRESSURE_STATUSES = frozenset({408, 429})


def is_client_error(error: BaseException) -> bool:
    """
    True if the upstream rejected the request itself (4xx other than 408/429).

    Such answers prove the upstream is up: retrying cannot change them and
    they say nothing about the dependency's health.
    """
    if not isinstance(error, ApiError) or isinstance(error, RequestTimeoutError):
        return False
    return 400 <= error.status_code < 500 and error.status_code not in UPSTREAM_PRESSURE_STATUSES


def is_upstream_failure(error: BaseException) -> bool:
    """True if `error` should count against the upstream's circuit breaker."""
    return not is_client_error(error)
