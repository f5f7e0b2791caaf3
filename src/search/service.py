"""
Catalog Search Service

Entry point used by the HTTP layer. Wraps FuzzySearchEngine and
ResultFormatter, and keeps the index in step with the catalog:

- refresh() rebuilds from the catalog on demand.
- When the catalog exposes a ``version`` counter, each call compares it with
  the version the index was built from and rebuilds only if it moved.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol, runtime_checkable

from src.core.logging import get_logger
from src.search.engine import (
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SEARCH_THRESHOLD,
    DEFAULT_SUGGEST_LIMIT,
    FuzzySearchEngine,
)
from src.search.formatter import ResultFormatter
from src.search.index import CorpusProvider
from src.search.models import SearchQuery

logger = get_logger(__name__)


@runtime_checkable
class VersionedCorpusProvider(CorpusProvider, Protocol):
    """A corpus provider that bumps ``version`` on every mutation."""

    @property
    def version(self) -> int:
        ...


class CatalogSearchService:
    """Search and suggestions over a catalog.

    Attributes:
        engine: The underlying fuzzy search engine
        provider: The catalog the engine indexes
        formatter: Response shaper
    """

    def __init__(
        self,
        engine: FuzzySearchEngine,
        provider: CorpusProvider,
        formatter: ResultFormatter | None = None,
    ) -> None:
        self.engine = engine
        self.provider = provider
        self.formatter = formatter or ResultFormatter()
        self._built_version: int | None = None
        self._refresh_lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        """True once the index has been built at least once."""
        return self.engine.index.is_built

    def refresh(self) -> int:
        """Rebuild the index from the catalog.

        Returns:
            Number of records now indexed
        """
        with self._refresh_lock:
            version = self._provider_version()
            snapshot = self.engine.rebuild(self.provider.get_records())
            self._built_version = version
        return len(snapshot)

    def _provider_version(self) -> int | None:
        if isinstance(self.provider, VersionedCorpusProvider):
            return self.provider.version
        return None

    def _ensure_fresh(self) -> None:
        version = self._provider_version()
        if not self.is_ready or (version is not None and version != self._built_version):
            logger.debug("catalog_changed", built=self._built_version, current=version)
            self.refresh()

    def search(
        self,
        text: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
        threshold: float = DEFAULT_SEARCH_THRESHOLD,
    ) -> dict[str, Any]:
        """Fuzzy search over the catalog.

        Raises:
            QueryValidationError: Invalid text, limit or threshold
        """
        query = SearchQuery(text=text, limit=limit, threshold=threshold)
        query.validate()
        self._ensure_fresh()
        results = self.engine.search(query)
        return self.formatter.format_search(text, threshold, results)

    def suggest(self, text: str, limit: int = DEFAULT_SUGGEST_LIMIT) -> list[dict[str, Any]]:
        """Autocomplete suggestions for partial input.

        Raises:
            QueryValidationError: Invalid text or limit
        """
        SearchQuery(text=text, limit=limit, threshold=self.engine.config.suggest_threshold).validate()
        self._ensure_fresh()
        return self.formatter.format_suggestions(self.engine.suggest(text, limit))
