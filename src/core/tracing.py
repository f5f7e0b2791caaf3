"""
Catalog-Search-Service - OpenTelemetry Tracing Module

Spans are opened around index rebuilds, searches and suggestions. Until
configure_tracing() runs, the global no-op provider makes every span free.

Patterns Applied:
- One-time configure_tracing() at startup
- Manual instrumentation at the engine boundary only
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

# Module-level flag for one-time configuration
_configured: bool = False

SERVICE_NAME = "catalog-search-service"


def configure_tracing(
    service_name: str = SERVICE_NAME,
    service_version: str = "0.1.0",
    console_export: bool = False,
) -> None:
    """Configure OpenTelemetry tracing for the application.

    Args:
        service_name: Name of the service for trace attribution
        service_version: Version reported in the trace resource
        console_export: Whether to export spans to console (for development)
    """
    global _configured

    if _configured:
        return

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )

    provider = TracerProvider(resource=resource)

    if console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    _configured = True


def get_tracer(name: str) -> Any:
    """Get a tracer instance for creating spans.

    Args:
        name: Tracer name (typically module name)

    Returns:
        OpenTelemetry Tracer instance
    """
    return trace.get_tracer(name)


def reset_tracing() -> None:
    """Reset tracing configuration for testing."""
    global _configured
    _configured = False
