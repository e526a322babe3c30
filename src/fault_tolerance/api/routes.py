"""
API routes: health, breaker state and degraded data access.
"""

import structlog
from fastapi import APIRouter, Depends, status

from fault_tolerance.api.dependencies import get_breakers, get_data_accessor, get_settings
from fault_tolerance.api.models import BreakerHealthResponse, HealthResponse
from fault_tolerance.breaker.circuit_breaker import CircuitBreaker
from fault_tolerance.config import Settings
from fault_tolerance.fallback.accessor import FallbackAccessor
from fault_tolerance.models.fallback_models import FallbackResult

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Liveness check")
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Report that the process is up."""
    return HealthResponse(status="ok", version=settings.APP_VERSION)


@router.get(
    "/health/breakers",
    response_model=BreakerHealthResponse,
    summary="Circuit breaker states",
)
async def breaker_health(
    breakers: list[CircuitBreaker] = Depends(get_breakers),
) -> BreakerHealthResponse:
    """
    Report every breaker's state.

    `degraded` is true when any breaker is not closed.
    """
    snapshots = [breaker.snapshot() for breaker in breakers]
    return BreakerHealthResponse(
        degraded=any(not breaker.is_closed() for breaker in breakers),
        breakers=snapshots,
    )


@router.get(
    "/data/{key}",
    response_model=FallbackResult,
    status_code=status.HTTP_200_OK,
    summary="Fetch data with graceful degradation",
    responses={
        200: {"description": "Data from the live upstream, the cache, or the default"},
    },
)
async def get_data(
    key: str,
    accessor: FallbackAccessor = Depends(get_data_accessor),
) -> FallbackResult:
    """
    Fetch `key` from the upstream, degrading to cache and then to a default.

    Never fails because of the upstream or the cache: `source` tells the
    client which tier answered.
    """
    result = await accessor.get_data_with_fallback(key)
    logger.info("Data served", key=key, source=result.source.value)
    return result
