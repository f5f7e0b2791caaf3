"""
Fuzzy Search Engine Tests

Tests for FuzzySearchEngine:
- Query validation and configuration errors
- Threshold / limit / ordering guarantees
- Lazy build, refresh-on-query and explicit rebuild
- Threaded scoring gives the same output as sequential scoring
"""

from __future__ import annotations

import pytest

from src.core.exceptions import ConfigurationError, QueryValidationError
from src.search.engine import EngineConfig, FuzzySearchEngine
from src.search.models import FieldConfig, Record, ScoredResult, SearchQuery

# =============================================================================
# Fixtures
# =============================================================================

TITLE_ONLY = [FieldConfig("title", 1.0)]


def titled(*titles: str) -> list[Record]:
    return [Record(record_id=i, fields={"title": t}) for i, t in enumerate(titles)]


class CountingProvider:
    """Corpus provider that records how often it was asked for records."""

    def __init__(self, records: list[Record]) -> None:
        self.records = records
        self.calls = 0

    def get_records(self) -> list[Record]:
        self.calls += 1
        return list(self.records)


def ranked(results: list[ScoredResult]) -> list[tuple]:
    return [(r.record_id, r.composite_score, r.field_matches) for r in results]


@pytest.fixture
def engine() -> FuzzySearchEngine:
    engine = FuzzySearchEngine(TITLE_ONLY)
    engine.rebuild(titled("The Harry Potter Story", "Hary Potter", "Harry Potter"))
    return engine


# =============================================================================
# Configuration & Validation
# =============================================================================


class TestConfiguration:
    """Invalid configuration is fatal at construction."""

    def test_no_fields(self) -> None:
        with pytest.raises(ConfigurationError):
            FuzzySearchEngine([])

    @pytest.mark.parametrize(
        "kwargs",
        [{"suggest_threshold": 1.5}, {"max_workers": 0}, {"batch_size": 0}],
    )
    def test_invalid_engine_config(self, kwargs: dict) -> None:
        with pytest.raises(ConfigurationError):
            EngineConfig(**kwargs)

    def test_rebuild_without_provider_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="provider"):
            FuzzySearchEngine(TITLE_ONLY).rebuild()


class TestQueryValidation:
    """Invalid queries are rejected before any scoring."""

    @pytest.mark.parametrize(
        "query",
        [
            SearchQuery(text=""),
            SearchQuery(text="   "),
            SearchQuery(text="harry", limit=0),
            SearchQuery(text="harry", threshold=1.5),
        ],
    )
    def test_invalid_query_raises(self, engine: FuzzySearchEngine, query: SearchQuery) -> None:
        with pytest.raises(QueryValidationError):
            engine.search(query)

    def test_invalid_suggest_limit(self, engine: FuzzySearchEngine) -> None:
        with pytest.raises(QueryValidationError):
            engine.suggest("harry", limit=0)


# =============================================================================
# Ranking
# =============================================================================


class TestRanking:
    """Output is filtered, ordered and truncated."""

    def test_exact_match_ranks_first(self, engine: FuzzySearchEngine) -> None:
        results = engine.search(SearchQuery(text="Harry Potter", limit=10, threshold=0.3))

        assert results[0].record_id == 2
        assert results[0].composite_score == 0.0
        assert {r.record_id for r in results} == {0, 1, 2}

    def test_scores_are_ascending_and_within_threshold(self, engine: FuzzySearchEngine) -> None:
        results = engine.search(SearchQuery(text="Harry Potter", limit=10, threshold=0.3))
        scores = [r.composite_score for r in results]

        assert scores == sorted(scores)
        assert all(0.0 <= s <= 0.3 for s in scores)

    def test_limit_truncates(self, engine: FuzzySearchEngine) -> None:
        results = engine.search(SearchQuery(text="Harry Potter", limit=1, threshold=0.3))

        assert [r.record_id for r in results] == [2]

    def test_zero_threshold_keeps_only_exact(self, engine: FuzzySearchEngine) -> None:
        results = engine.search(SearchQuery(text="Harry Potter", limit=10, threshold=0.0))

        assert [r.record_id for r in results] == [2]

    def test_no_match_returns_empty_list(self, engine: FuzzySearchEngine) -> None:
        assert engine.search(SearchQuery(text="xqzw", limit=10, threshold=0.3)) == []

    def test_surrounding_whitespace_is_ignored(self, engine: FuzzySearchEngine) -> None:
        padded = engine.search(SearchQuery(text="  Harry Potter  ", threshold=0.3))
        plain = engine.search(SearchQuery(text="Harry Potter", threshold=0.3))

        assert ranked(padded) == ranked(plain)

    @pytest.mark.parametrize("order", [("a", "b"), ("b", "a")])
    def test_ties_keep_corpus_order(self, order: tuple[str, str]) -> None:
        engine = FuzzySearchEngine(TITLE_ONLY)
        engine.rebuild([Record(record_id=rid, fields={"title": "Dune"}) for rid in order])

        results = engine.search(SearchQuery(text="dune", threshold=0.0))

        assert [r.record_id for r in results] == list(order)

    def test_verbatim_field_ties_with_other_exact_records(self) -> None:
        """Fuzzy extra fields do not push a verbatim title behind a genre-only hit."""
        engine = FuzzySearchEngine([FieldConfig("title", 0.5), FieldConfig("genre", 0.2)])
        engine.rebuild(
            [
                Record(record_id=1, fields={"title": "Fantastic Mr Fox", "genre": "Fantasy"}),
                Record(record_id=2, fields={"title": "Fantasy", "genre": "Fantasia"}),
                Record(record_id=3, fields={"title": "Dune", "genre": "Fantasy"}),
            ]
        )

        results = engine.search(SearchQuery(text="Fantasy", threshold=0.3))

        assert [(r.record_id, r.composite_score) for r in results] == [
            (1, 0.0),
            (2, 0.0),
            (3, 0.0),
        ]

    def test_field_matches_carry_spans(self, engine: FuzzySearchEngine) -> None:
        results = engine.search(SearchQuery(text="Harry Potter", threshold=0.0))
        span = results[0].field_matches[0]

        assert span.field_name == "title"
        assert span.index_ranges == ((0, 12),)

    def test_empty_corpus_returns_empty_list(self) -> None:
        engine = FuzzySearchEngine(TITLE_ONLY)
        engine.rebuild([])

        assert engine.search(SearchQuery(text="anything", threshold=1.0)) == []


class TestSuggest:
    """Suggest uses the lenient fixed threshold and the same scoring."""

    def test_suggest_is_more_lenient_than_search(self, engine: FuzzySearchEngine) -> None:
        strict = engine.search(SearchQuery(text="Potter Story", threshold=0.0))
        lenient = engine.suggest("Potter Story")

        assert strict == []
        assert [r.record_id for r in lenient][0] == 0

    def test_swapped_letters_still_suggest(self) -> None:
        engine = FuzzySearchEngine(TITLE_ONLY)
        engine.rebuild(titled("Dune Messiah", "Dne"))

        results = engine.suggest("Dnue", 5)

        assert [r.record_id for r in results] == [1, 0]

    def test_suggest_agrees_with_search_at_same_threshold(self, engine: FuzzySearchEngine) -> None:
        suggested = engine.suggest("Harry", limit=3)
        searched = engine.search(SearchQuery(text="Harry", limit=3, threshold=1.0))

        assert ranked(suggested) == ranked(searched)


# =============================================================================
# Index Lifecycle
# =============================================================================


class TestIndexLifecycle:
    """Lazy build, refresh-on-query and explicit rebuild."""

    def test_first_query_builds_lazily_once(self) -> None:
        provider = CountingProvider(titled("Dune"))
        engine = FuzzySearchEngine(TITLE_ONLY, provider=provider)

        engine.search(SearchQuery(text="dune"))
        engine.search(SearchQuery(text="dune"))

        assert provider.calls == 1

    def test_refresh_on_query_pulls_every_time(self) -> None:
        provider = CountingProvider(titled("Dune"))
        engine = FuzzySearchEngine(
            TITLE_ONLY, provider=provider, config=EngineConfig(refresh_on_query=True)
        )

        engine.search(SearchQuery(text="dune"))
        engine.search(SearchQuery(text="dune"))

        assert provider.calls == 2

    def test_rebuild_switches_corpus(self) -> None:
        engine = FuzzySearchEngine(TITLE_ONLY)
        engine.rebuild(titled("Dune"))
        assert len(engine.search(SearchQuery(text="dune", threshold=0.0))) == 1

        engine.rebuild(titled("Emma"))

        assert engine.search(SearchQuery(text="dune", threshold=0.0)) == []

    def test_rebuild_from_provider(self) -> None:
        provider = CountingProvider(titled("Dune"))
        engine = FuzzySearchEngine(TITLE_ONLY, provider=provider)

        snapshot = engine.rebuild()

        assert len(snapshot) == 1
        assert provider.calls == 1


# =============================================================================
# Parallel Scoring
# =============================================================================


class TestParallelScoring:
    """Worker threads never change results."""

    @pytest.fixture
    def corpus(self) -> list[Record]:
        words = ["Potter", "Hobbit", "Gatsby", "Farm", "Rye", "Prejudice", "Alchemist"]
        return [
            Record(record_id=i, fields={"title": f"The {words[i % len(words)]} {i}"})
            for i in range(40)
        ]

    @pytest.mark.parametrize("text", ["hobit", "the farm", "potter 1", "gatsbi"])
    def test_threaded_matches_sequential(self, corpus: list[Record], text: str) -> None:
        sequential = FuzzySearchEngine(TITLE_ONLY)
        threaded = FuzzySearchEngine(TITLE_ONLY, config=EngineConfig(max_workers=4, batch_size=3))
        sequential.rebuild(corpus)
        threaded.rebuild(corpus)
        query = SearchQuery(text=text, limit=15, threshold=0.6)

        assert ranked(threaded.search(query)) == ranked(sequential.search(query))

    def test_prefilter_does_not_change_results(self, corpus: list[Record]) -> None:
        with_filter = FuzzySearchEngine(TITLE_ONLY, prefilter=True)
        without_filter = FuzzySearchEngine(TITLE_ONLY, prefilter=False)
        with_filter.rebuild(corpus)
        without_filter.rebuild(corpus)
        query = SearchQuery(text="alchemst", limit=40, threshold=1.0)

        assert ranked(with_filter.search(query)) == ranked(without_filter.search(query))
