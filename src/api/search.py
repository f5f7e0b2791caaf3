"""
Search API Endpoints

GET /search             - Fuzzy search books by title, author or genre
GET /search/suggestions - Autocomplete suggestions for partial input

Patterns Applied:
- FastAPI router pattern
- Pydantic response models
- Dependency injection for the search service and settings (overridable in tests)
- Limit and threshold defaults and the limit cap read from Settings
- Proper error responses: QueryValidationError -> 400, bad params -> 422
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from src.catalog.models import Book
from src.core.config import Settings, get_settings
from src.core.exceptions import QueryValidationError
from src.core.logging import get_logger
from src.search.service import CatalogSearchService

logger = get_logger(__name__)

# =============================================================================
# Response Models
# =============================================================================


class MatchInfo(BaseModel):
    """Highlight data for one matched field."""

    key: str = Field(..., description="Matched field name")
    value: str = Field(..., description="Full field value")
    indices: list[list[int]] = Field(..., description="[start, end) ranges into value")


class SearchResultItem(BaseModel):
    """A ranked book."""

    record: Book
    score: float = Field(..., description="Composite distance (0 = exact)")
    matches: list[MatchInfo]


class SearchResponse(BaseModel):
    """Response from the search endpoint."""

    query: str
    results: list[SearchResultItem]
    total: int
    threshold: float


class SuggestionItem(BaseModel):
    """Summary of a suggested book."""

    title: str
    author: str
    genre: str
    score: float


# =============================================================================
# Dependencies
# =============================================================================


def get_search_service(request: Request) -> CatalogSearchService:
    """Return the service built by the application lifespan.

    Raises:
        HTTPException: 503 if the service has not been initialised
    """
    service: CatalogSearchService | None = getattr(request.app.state, "search_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search service not initialised",
        )
    return service


SearchServiceDep = Annotated[CatalogSearchService, Depends(get_search_service)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def _bad_request(error: QueryValidationError) -> HTTPException:
    logger.info("query_rejected", field=error.field, reason=error.message)
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"field": error.field, "message": error.message},
    )


# =============================================================================
# Router
# =============================================================================

search_router = APIRouter(prefix="/search", tags=["search"])


def _resolve_limit(limit: int | None, default: int, settings: Settings) -> int:
    """Apply the configured default and upper bound to ``limit``.

    Raises:
        HTTPException: 422 if limit exceeds settings.search_max_limit
    """
    if limit is None:
        return default
    if limit > settings.search_max_limit:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=[
                {
                    "type": "less_than_equal",
                    "loc": ["query", "limit"],
                    "msg": f"Input should be less than or equal to {settings.search_max_limit}",
                    "input": limit,
                }
            ],
        )
    return limit


@search_router.get("", response_model=SearchResponse)
def search_books(
    service: SearchServiceDep,
    settings: SettingsDep,
    q: Annotated[str, Query(min_length=1, description="Search query")],
    limit: Annotated[int | None, Query(ge=1, description="Number of results")] = None,
    threshold: Annotated[
        float | None, Query(ge=0.0, le=1.0, description="Maximum distance (0 = exact, 1 = anything)")
    ] = None,
) -> SearchResponse:
    """Search books by title, author, or genre using fuzzy matching.

    Case-insensitive and typo tolerant: "Pottr" finds "Harry Potter".
    Defaults for limit and threshold come from settings.
    """
    limit = _resolve_limit(limit, settings.search_default_limit, settings)
    if threshold is None:
        threshold = settings.search_default_threshold
    try:
        payload = service.search(q, limit=limit, threshold=threshold)
    except QueryValidationError as e:
        raise _bad_request(e) from e
    return SearchResponse.model_validate(payload)


@search_router.get("/suggestions", response_model=list[SuggestionItem])
def get_suggestions(
    service: SearchServiceDep,
    settings: SettingsDep,
    q: Annotated[str, Query(min_length=1, description="Partial search query")],
    limit: Annotated[int | None, Query(ge=1, description="Number of suggestions")] = None,
) -> list[SuggestionItem]:
    """Book suggestions for autocomplete."""
    limit = _resolve_limit(limit, settings.suggest_default_limit, settings)
    try:
        payload = service.suggest(q, limit=limit)
    except QueryValidationError as e:
        raise _bad_request(e) from e
    return [SuggestionItem.model_validate(item) for item in payload]
