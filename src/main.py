"""
Catalog-Search-Service - Main Application Entry Point

- FastAPI app with lifespan handler
- uvicorn src.main:app starts the service

Patterns Applied:
- Lifespan context manager
- One-time configure_logging() at startup

Anti-Patterns Avoided:
- Deprecated @app.on_event - using modern lifespan pattern
- structlog.configure() per request - one-time at startup
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.health import router as health_router
from src.api.search import search_router
from src.catalog import InMemoryBookCatalog, seed_catalog
from src.core.config import get_settings
from src.core.logging import configure_logging, get_logger
from src.core.tracing import configure_tracing
from src.search import CatalogSearchService, FuzzySearchEngine

settings = get_settings()

# Configure logging ONCE at module load
configure_logging(
    log_level=settings.log_level,
    json_output=settings.log_json,
    service_name=settings.service_name,
)

logger = get_logger(__name__)


# =============================================================================
# Lifespan Context Manager
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager for startup/shutdown events."""
    # =========================================================================
    # STARTUP
    # =========================================================================
    logger.info(
        "startup",
        service=settings.service_name,
        version=settings.version,
        environment=settings.environment,
    )

    if settings.tracing_enabled:
        configure_tracing(
            service_name=settings.service_name,
            service_version=settings.version,
            console_export=settings.tracing_console_export,
        )
        logger.info("tracing_configured")

    catalog = InMemoryBookCatalog()
    if settings.seed_catalog:
        seeded = seed_catalog(catalog)
        logger.info("catalog_seeded", book_count=seeded)

    engine = FuzzySearchEngine.from_settings(settings, provider=catalog)
    service = CatalogSearchService(engine, catalog)
    indexed = service.refresh()
    logger.info("search_index_ready", record_count=indexed)

    app.state.catalog = catalog
    app.state.search_service = service
    app.state.service_name = settings.service_name

    yield

    # =========================================================================
    # SHUTDOWN
    # =========================================================================
    logger.info("shutdown", service=settings.service_name)
    app.state.search_service = None


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="Catalog-Search-Service",
    description="Fuzzy multi-field search over the book catalog",
    version=settings.version,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.environment == "development" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(search_router)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Root endpoint redirecting to docs."""
    return {
        "service": settings.service_name,
        "version": settings.version,
        "docs": "/docs",
    }
