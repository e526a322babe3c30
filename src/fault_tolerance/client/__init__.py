"""
Upstream HTTP client and its error taxonomy.

- exceptions.py: ApiError, RequestTimeoutError, RateLimitedError, client-error classification
- api_client.py: httpx-based ApiClient (import it from its module)
"""

from fault_tolerance.client.exceptions import (
    ApiError,
    RateLimitedError,
    RequestTimeoutError,
    is_client_error,
    is_upstream_failure,
)

__all__ = [
    "ApiError",
    "RequestTimeoutError",
    "RateLimitedError",
    "is_client_error",
    "is_upstream_failure",
]
