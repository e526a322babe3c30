"""
Circuit breaker read models.

Snapshots are immutable views of a breaker's state, used for health
endpoints and structured logs. They never feed back into the breaker.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fault_tolerance.models.enums import CircuitState


class BreakerSnapshot(BaseModel):
    """Point-in-time view of a CircuitBreaker."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Name of the protected dependency")
    state: CircuitState = Field(..., description="Current breaker state")
    failure_count: int = Field(..., ge=0, description="Consecutive failures while closed")
    threshold: int = Field(..., ge=1, description="Consecutive failures required to open")
    reset_timeout: float = Field(..., ge=0.0, description="Cooldown in seconds before a probe is admitted")
    opened_at: Optional[float] = Field(
        default=None,
        description="Monotonic clock reading when the breaker last opened",
    )
    total_rejections: int = Field(default=0, ge=0, description="Calls rejected since creation")
