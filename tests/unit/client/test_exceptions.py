"""
Unit tests for upstream error classification.
"""

import pytest

from fault_tolerance.client.exceptions import (
    ApiError,
    RateLimitedError,
    RequestTimeoutError,
    is_client_error,
    is_upstream_failure,
)


@pytest.mark.parametrize("status_code", [400, 403, 404, 409, 422])
def test_4xx_rejections_are_client_errors(status_code):
    error = ApiError(status_code, "rejected")

    assert is_client_error(error)
    assert not is_upstream_failure(error)


@pytest.mark.parametrize(
    "error",
    [
        RequestTimeoutError(),
        RateLimitedError(),
        ApiError(408, "upstream timeout"),
        ApiError(429, "slow down"),
        ApiError(500, "boom"),
        ApiError(502, "Upstream service unavailable"),
        ConnectionError("reset"),
        ValueError("bad payload"),
    ],
)
def test_everything_else_is_an_upstream_failure(error):
    assert not is_client_error(error)
    assert is_upstream_failure(error)
