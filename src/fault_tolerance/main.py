"""
FastAPI application entry point for the fault-tolerance service.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from fault_tolerance.api.dependencies import UpstreamResources
from fault_tolerance.api.error_handlers import EXCEPTION_HANDLERS
from fault_tolerance.api.routes import router
from fault_tolerance.config import Settings, settings
from fault_tolerance.logging_config import configure_logging
from fault_tolerance.persistence.redis_client import RedisClient

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown."""
    app_settings: Settings = app.state.settings
    logger.info(
        "Application startup",
        version=app_settings.APP_VERSION,
        environment=app_settings.ENVIRONMENT,
        upstream_base_url=app_settings.UPSTREAM_BASE_URL,
        breaker_threshold=app_settings.CIRCUIT_BREAKER_THRESHOLD,
        breaker_reset_timeout=app_settings.CIRCUIT_BREAKER_RESET_TIMEOUT,
    )
    yield
    logger.info("Application shutdown")
    await app.state.resources.aclose()
    await RedisClient.close_async_pool()
    logger.info("Application shutdown complete")


def create_app(app_settings: Settings = settings) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to run with (module-level settings by default)
    """
    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Retry, circuit breaker and graceful degradation around an upstream API",
        version=app_settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.resources = UpstreamResources(app_settings)

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    app.include_router(router, tags=["resilience"])

    if app_settings.PROMETHEUS_ENABLED:
        app.mount("/metrics", make_asgi_app())

    @app.get("/")
    async def root():
        """Root endpoint with links."""
        return {
            "service": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health",
            "breakers": "/health/breakers",
            "metrics": "/metrics" if app_settings.PROMETHEUS_ENABLED else None,
        }

    return app


configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT, app_name=settings.APP_NAME)
app = create_app()
