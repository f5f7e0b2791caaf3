"""
Catalog-Search-Service - Health API Routes

GET /health - liveness
GET /ready  - readiness (503 until the search index has been built)

Patterns Applied:
- Health Check Pattern with a HealthService class
- Pydantic response models

Anti-Patterns Avoided:
- Bare except clauses
- Missing response models
"""

from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.core.logging import get_logger
from src.search.service import CatalogSearchService

# Initialize router
router = APIRouter(tags=["health"])

logger = get_logger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    version: str
    service: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""
    status: str
    checks: dict[str, bool]
    indexed_records: int | None = None


# =============================================================================
# Health Service
# =============================================================================


class HealthService:
    """Service class for health check operations."""

    def __init__(self, version: str = "0.1.0", service_name: str = "catalog-search-service"):
        """Initialize health service.

        Args:
            version: Service version string
            service_name: Reported service name
        """
        self._version = version
        self._service_name = service_name

    def check_health(self) -> dict[str, Any]:
        """Check basic service health.

        Returns:
            Health status dictionary with status, version, service
        """
        return {
            "status": "healthy",
            "version": self._version,
            "service": self._service_name,
        }

    def check_readiness(
        self, search_service: CatalogSearchService | None
    ) -> tuple[dict[str, Any], bool]:
        """Check if the service can answer searches.

        Returns:
            Tuple of (readiness dict, is_ready bool)
        """
        initialised = search_service is not None
        index_built = initialised and search_service.is_ready

        checks = {
            "service_initialised": initialised,
            "index_built": index_built,
        }
        is_ready = all(checks.values())

        result: dict[str, Any] = {
            "status": "ready" if is_ready else "not_ready",
            "checks": checks,
        }
        if index_built:
            result["indexed_records"] = len(search_service.engine.index)

        return result, is_ready


def get_health_service(request: Request) -> HealthService:
    """Get the health service for this app."""
    return HealthService(
        version=getattr(request.app, "version", "0.1.0"),
        service_name=getattr(request.app.state, "service_name", "catalog-search-service"),
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Basic health check endpoint for liveness probe",
)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint."""
    data = get_health_service(request).check_health()
    logger.debug("health_check", status=data["status"])
    return HealthResponse(**data)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Service is ready"},
        503: {"description": "Service is not ready"},
    },
    summary="Readiness Check",
    description="Readiness check endpoint for the search index",
)
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness check endpoint.

    Returns:
        200 if the index is built, 503 otherwise
    """
    search_service = getattr(request.app.state, "search_service", None)
    data, is_ready = get_health_service(request).check_readiness(search_service)

    status_code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE

    logger.debug("readiness_check", status=data["status"], is_ready=is_ready)
    return JSONResponse(content=data, status_code=status_code)
