"""
FastAPI surface of the fault-tolerance toolkit.

- routes.py: GET /health, GET /health/breakers, GET /data/{key}
- dependencies.py: Per-app UpstreamResources (breaker, executor, API client, cache, accessor) and providers
- models.py: API-specific response models
- error_handlers.py: Exception handlers mapping toolkit errors to HTTP statuses
"""

from fault_tolerance.api import dependencies, error_handlers, models
from fault_tolerance.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
    "models",
]
