"""
Catalog-Search-Service - Structured Logging Module

Patterns Applied:
- One-time configure_logging() at startup
- structlog BoundLogger with JSON output (console renderer for local runs)

Anti-Patterns Avoided:
- structlog.configure() called per get_logger() - PREVENTED via _configured flag
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

# Module-level flag for one-time configuration
_configured: bool = False

DEFAULT_SERVICE_NAME = "catalog-search-service"


def _service_stamper(service_name: str) -> Processor:
    """Build a processor that stamps the service name on every log entry."""

    def add_service_info(
        logger: logging.Logger,  # noqa: ARG001 - Required by structlog interface
        method_name: str,  # noqa: ARG001 - Required by structlog interface
        event_dict: EventDict,
    ) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_info


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
    service_name: str = DEFAULT_SERVICE_NAME,
) -> None:
    """Configure structlog for the application.

    Must be called once at application startup; later calls are no-ops
    until reset_logging() is invoked.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to use JSON renderer (True for production)
        service_name: Value stamped into the ``service`` key of each entry
    """
    global _configured

    if _configured:
        return

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _service_stamper(service_name),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        structlog BoundLogger instance
    """
    return structlog.get_logger(name)


def reset_logging() -> None:
    """Reset logging configuration for testing."""
    global _configured
    _configured = False
    structlog.reset_defaults()
