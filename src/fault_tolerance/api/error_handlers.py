"""
FastAPI exception handlers for structured error responses.

Maps toolkit exceptions to HTTP status codes:
- CircuitOpenError     -> 503 (dependency known to be failing)
- RateLimitedError     -> 503 (upstream still throttling after retries)
- RequestTimeoutError  -> 408
- ApiError             -> its own status_code
- anything else        -> 500
"""

from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from fault_tolerance.breaker.exceptions import CircuitOpenError
from fault_tolerance.client.exceptions import ApiError, RateLimitedError, RequestTimeoutError

logger = structlog.get_logger(__name__)


def _error_body(error: str, message: str, status_code: int, **extra: Any) -> dict[str, Any]:
    return {
        "error": error,
        "message": message,
        "statusCode": status_code,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **extra,
    }


def _retry_after_headers(retry_after: Optional[float]) -> Optional[dict[str, str]]:
    if retry_after is None:
        return None
    return {"Retry-After": str(max(1, round(retry_after)))}


async def circuit_open_handler(request: Request, exc: CircuitOpenError) -> JSONResponse:
    """
    Handle calls rejected by an open circuit breaker.

    Maps to 503 Service Unavailable, with Retry-After when the remaining
    cooldown is known.
    """
    logger.warning(
        "Circuit open, request rejected",
        breaker=exc.breaker_name,
        path=request.url.path,
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body(
            "circuit_open",
            str(exc),
            status.HTTP_503_SERVICE_UNAVAILABLE,
            breaker=exc.breaker_name,
        ),
        headers=_retry_after_headers(exc.retry_after),
    )


async def rate_limited_handler(request: Request, exc: RateLimitedError) -> JSONResponse:
    """
    Handle upstream rate limiting that outlasted every retry.

    Maps to 503 Service Unavailable: the throttling is upstream's, not the client's.
    """
    logger.error(
        "Upstream rate limit not cleared after retries",
        path=request.url.path,
        retry_after=exc.retry_after,
    )

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body(
            "rate_limited",
            "Upstream service is rate limiting requests",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        ),
        headers=_retry_after_headers(exc.retry_after),
    )


async def request_timeout_handler(request: Request, exc: RequestTimeoutError) -> JSONResponse:
    """Handle upstream timeouts. Maps to 408 Request Timeout."""
    logger.warning("Upstream timeout", path=request.url.path, details=exc.details)

    return JSONResponse(
        status_code=status.HTTP_408_REQUEST_TIMEOUT,
        content=_error_body("request_timeout", exc.message, status.HTTP_408_REQUEST_TIMEOUT),
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError. Maps to the error's own status code."""
    logger.warning(
        "API error",
        path=request.url.path,
        status_code=exc.status_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("api_error", exc.message, exc.status_code),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected errors.

    Maps to 500 Internal Server Error; the original message is logged, not returned.
    """
    logger.error(
        "Unexpected error",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        exc_info=exc,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "internal_error",
            "Internal Server Error",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    CircuitOpenError: circuit_open_handler,
    RateLimitedError: rate_limited_handler,
    RequestTimeoutError: request_timeout_handler,
    ApiError: api_error_handler,
    Exception: generic_error_handler,
}
