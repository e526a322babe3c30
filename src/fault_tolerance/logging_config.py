"""Structured logging configuration using structlog.

Production renders one JSON object per line; development renders colored
console output. Every event carries the service name and environment, and
events emitted by a breaker, retry executor or fallback accessor are tagged
with a `component` field so they can be filtered together.
"""

import logging
import sys
from typing import Callable

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Event keys identifying which resilience component emitted an event
COMPONENT_KEYS = {
    "breaker": "circuit_breaker",
    "executor": "retry",
    "accessor": "fallback",
}

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio", "redis", "uvicorn.access")


def app_context(app_name: str, environment: str) -> Callable[[WrappedLogger, str, EventDict], EventDict]:
    """Build a processor stamping service name and environment on every event."""

    def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        event_dict.setdefault("env", environment)
        return event_dict

    return add_app_context


def tag_component(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Set `component` from the first resilience key present in the event."""
    if "component" not in event_dict:
        for key, component in COMPONENT_KEYS.items():
            if key in event_dict:
                event_dict["component"] = component
                break
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    environment: str = "development",
    app_name: str = "fault-tolerance-toolkit",
) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Environment name; "production" selects JSON output
        app_name: Service name stamped on every event
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    json_output = environment.lower() == "production"

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        app_context(app_name, environment),
        tag_component,
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=processors)
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(level),
        environment=environment,
        output="json" if json_output else "console",
    )
