"""
API-specific response models.
"""

from pydantic import BaseModel, Field

from fault_tolerance.models.breaker_models import BreakerSnapshot


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str = Field(..., description="Always 'ok' when the process answers")
    version: str = Field(..., description="Service version")


class BreakerHealthResponse(BaseModel):
    """Circuit breaker health report."""

    degraded: bool = Field(..., description="True if any breaker is open or half-open")
    breakers: list[BreakerSnapshot] = Field(default_factory=list)
