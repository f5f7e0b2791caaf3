"""
Fuzzy Search Engine

Orchestrates Index + Matcher + FieldScorer for a query.

Pipeline (search and suggest share it):
1. Validate the query
2. Score every record of the current snapshot
3. Keep composites <= threshold (distance semantics: lower is closer)
4. Stable sort ascending by composite; ties keep snapshot order
5. Truncate to limit

Scoring a record touches no shared mutable state, so step 2 may fan out to
worker threads. Results are collected first and sorted afterwards, which keeps
output identical to the sequential path.

Patterns Applied:
- Service Layer Pattern: engine owns no HTTP or storage concerns
- Snapshot held for the whole query (concurrent rebuild safe)
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.core.exceptions import ConfigurationError, QueryValidationError
from src.core.logging import get_logger
from src.core.tracing import get_tracer
from src.search.index import CorpusProvider, IndexedRecord, IndexSnapshot, SearchIndex
from src.search.matcher import Matcher, MatcherConfig, PreparedPattern
from src.search.models import FieldConfig, Record, ScoredResult, SearchQuery
from src.search.scorer import FieldScorer

if TYPE_CHECKING:
    from src.core.config import Settings

logger = get_logger(__name__)
tracer = get_tracer(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_SEARCH_LIMIT: int = 10
DEFAULT_SEARCH_THRESHOLD: float = 0.3
DEFAULT_SUGGEST_LIMIT: int = 5
DEFAULT_SUGGEST_THRESHOLD: float = 1.0
DEFAULT_BATCH_SIZE: int = 64


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Engine-level behaviour.

    Attributes:
        suggest_threshold: Fixed lenient threshold used by suggest()
        max_workers: Threads used for scoring; 1 scores inline
        batch_size: Records per worker task when max_workers > 1
        refresh_on_query: Pull a fresh snapshot from the provider before
            every query instead of only on first use and explicit rebuilds
    """

    suggest_threshold: float = DEFAULT_SUGGEST_THRESHOLD
    max_workers: int = 1
    batch_size: int = DEFAULT_BATCH_SIZE
    refresh_on_query: bool = False

    def __post_init__(self) -> None:
        if not 0.0 <= self.suggest_threshold <= 1.0:
            raise ConfigurationError(
                f"suggest_threshold must be within [0, 1], got {self.suggest_threshold}"
            )
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {self.batch_size}")


class FuzzySearchEngine:
    """In-memory approximate multi-field search.

    Example:
        >>> engine = FuzzySearchEngine(
        ...     [FieldConfig("title", 0.5), FieldConfig("author", 0.3)],
        ...     provider=catalog,
        ... )
        >>> hits = engine.search(SearchQuery("Pottr", limit=10, threshold=0.3))
        >>> hits[0].record_id
        1
    """

    def __init__(
        self,
        field_configs: Sequence[FieldConfig],
        matcher: Matcher | None = None,
        provider: CorpusProvider | None = None,
        config: EngineConfig | None = None,
        prefilter: bool = True,
    ) -> None:
        """Initialize the engine.

        Args:
            field_configs: Searchable fields and weights
            matcher: Matcher to share across fields (default: Matcher())
            provider: Corpus source for lazy builds and refresh()
            config: Engine behaviour (default: EngineConfig())
            prefilter: Enable the character-set pre-filter

        Raises:
            ConfigurationError: No fields, or no field with weight > 0
        """
        self.scorer = FieldScorer(field_configs, matcher=matcher, prefilter=prefilter)
        self.index = SearchIndex(self.scorer.field_names)
        self.provider = provider
        self.config = config or EngineConfig()
        self._build_lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: CorpusProvider | None = None,
    ) -> FuzzySearchEngine:
        """Build an engine from application settings."""
        matcher = Matcher(
            MatcherConfig(
                location=settings.match_location,
                distance=settings.match_distance,
                min_match_char_length=settings.min_match_char_length,
                max_pattern_length=settings.max_pattern_length,
                run_bonus=settings.run_bonus,
            )
        )
        fields = [FieldConfig(name, weight) for name, weight in settings.field_weights.items()]
        config = EngineConfig(
            suggest_threshold=settings.suggest_threshold,
            max_workers=settings.max_workers,
            refresh_on_query=settings.refresh_on_query,
        )
        return cls(
            fields,
            matcher=matcher,
            provider=provider,
            config=config,
            prefilter=settings.prefilter_enabled,
        )

    # -------------------------------------------------------------------------
    # Index lifecycle
    # -------------------------------------------------------------------------

    def rebuild(self, records: Iterable[Record] | None = None) -> IndexSnapshot:
        """Replace the indexed corpus.

        Args:
            records: New corpus; pulled from the provider when omitted

        Raises:
            ConfigurationError: records omitted and no provider configured
        """
        if records is None:
            if self.provider is None:
                raise ConfigurationError("No corpus provider configured for rebuild")
            records = self.provider.get_records()
        return self.index.rebuild(records)

    def _current_snapshot(self) -> IndexSnapshot:
        if self.provider is not None:
            if self.config.refresh_on_query:
                return self.rebuild()
            if not self.index.is_built:
                with self._build_lock:
                    if not self.index.is_built:
                        self.rebuild()
        return self.index.snapshot()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def search(self, query: SearchQuery) -> list[ScoredResult]:
        """Rank records against ``query``.

        Returns:
            At most query.limit results, all with composite <= query.threshold

        Raises:
            QueryValidationError: Invalid query text, limit or threshold
        """
        return self._run("search", query)

    def suggest(self, text: str, limit: int = DEFAULT_SUGGEST_LIMIT) -> list[ScoredResult]:
        """Autocomplete-style search with the fixed suggestion threshold.

        Same matcher and scorer as search(), so rankings agree.
        """
        return self._run(
            "suggest",
            SearchQuery(text=text, limit=limit, threshold=self.config.suggest_threshold),
        )

    def _run(self, operation: str, query: SearchQuery) -> list[ScoredResult]:
        try:
            query.validate()
        except QueryValidationError as e:
            logger.warning(f"{operation}_rejected", field=e.field, reason=e.message)
            raise

        start_time = time.perf_counter()
        with tracer.start_as_current_span(f"fuzzy_search.{operation}") as span:
            snapshot = self._current_snapshot()
            results = self._rank(snapshot, query)
            span.set_attribute("search.query_length", len(query.text))
            span.set_attribute("search.snapshot_version", snapshot.version)
            span.set_attribute("search.result_count", len(results))

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"{operation}_completed",
            query=query.text,
            limit=query.limit,
            threshold=query.threshold,
            total=len(results),
            corpus_size=len(snapshot),
            duration_ms=round(elapsed_ms, 3),
        )
        return results

    def _rank(self, snapshot: IndexSnapshot, query: SearchQuery) -> list[ScoredResult]:
        pattern = self.scorer.matcher.prepare(query.text.strip())
        candidates = self._score_all(snapshot.entries, pattern, query.threshold)
        kept = [r for r in candidates if r.composite_score <= query.threshold]
        kept.sort(key=lambda r: (r.composite_score, r.position))
        return kept[:query.limit]

    def _score_all(
        self,
        entries: Sequence[IndexedRecord],
        pattern: PreparedPattern,
        threshold: float,
    ) -> list[ScoredResult]:
        if self.config.max_workers == 1 or len(entries) <= self.config.batch_size:
            return self._score_batch(entries, pattern, threshold)

        size = self.config.batch_size
        batches = [entries[i:i + size] for i in range(0, len(entries), size)]
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            partials = executor.map(
                lambda batch: self._score_batch(batch, pattern, threshold), batches
            )
            return [result for partial in partials for result in partial]

    def _score_batch(
        self,
        entries: Sequence[IndexedRecord],
        pattern: PreparedPattern,
        threshold: float,
    ) -> list[ScoredResult]:
        results: list[ScoredResult] = []
        for entry in entries:
            scored = self.scorer.score_entry(entry, pattern, threshold)
            if scored is None:
                continue
            results.append(
                ScoredResult(
                    record=entry.record,
                    composite_score=scored.composite,
                    field_matches=tuple(fm.span for fm in scored.per_field),
                    position=entry.position,
                )
            )
        return results
