"""
Field Scorer Tests

Tests for FieldScorer:
- Configuration validation (no fields, zero weights, duplicates)
- Renormalised weighted average over matched fields only
- Skipping empty and unmatched fields
- Pre-filter never changes the outcome
"""

from __future__ import annotations

import pytest

from src.core.exceptions import ConfigurationError
from src.search.models import FieldConfig, Record
from src.search.scorer import FieldScorer, active_fields

# =============================================================================
# Fixtures
# =============================================================================

BOOK_FIELDS = [
    FieldConfig("title", 0.5),
    FieldConfig("author", 0.3),
    FieldConfig("genre", 0.2),
]


@pytest.fixture
def scorer() -> FieldScorer:
    return FieldScorer(BOOK_FIELDS)


def make_record(record_id: int, title: str = "", author: str = "", genre: str = "") -> Record:
    return Record(record_id=record_id, fields={"title": title, "author": author, "genre": genre})


# =============================================================================
# Configuration
# =============================================================================


class TestFieldConfiguration:
    """Invalid field configs are fatal at construction."""

    def test_no_fields_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            FieldScorer([])

    def test_all_zero_weights_raise(self) -> None:
        with pytest.raises(ConfigurationError, match="weight > 0"):
            FieldScorer([FieldConfig("title", 0), FieldConfig("author", 0.0)])

    def test_duplicate_names_raise(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate"):
            active_fields([FieldConfig("title", 0.5), FieldConfig("title", 0.2)])

    def test_negative_weight_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            FieldConfig("title", -0.1)

    def test_zero_weight_fields_are_ignored(self) -> None:
        scorer = FieldScorer([FieldConfig("title", 1.0), FieldConfig("genre", 0)])

        assert scorer.field_names == ("title",)


# =============================================================================
# Composite Scoring
# =============================================================================


class TestCompositeScore:
    """Weighted average over the matched subset only."""

    def test_single_matched_field_keeps_its_own_distance(self, scorer: FieldScorer) -> None:
        """Matching only the lowest-weight field is not diluted by misses."""
        record = make_record(1, title="The Hobbit", author="J.R.R. Tolkien", genre="Epic Fantasy")

        result = scorer.score(record, "fantasy", threshold=0.3)

        assert result is not None
        assert [fm.field_name for fm in result.per_field] == ["genre"]
        assert result.composite == result.per_field[0].distance
        assert result.composite == pytest.approx(0.05)

    def test_two_matched_fields_are_renormalised(self, scorer: FieldScorer) -> None:
        record = make_record(1, title="Dune Messiah", author="Frank Herbert", genre="The Dune Saga")

        result = scorer.score(record, "dune", threshold=0.3)

        assert result is not None
        assert [fm.field_name for fm in result.per_field] == ["title", "genre"]
        title, genre = result.per_field
        assert title.distance == 0.0
        assert genre.distance == pytest.approx(0.04)
        assert result.composite == pytest.approx((0.5 * 0.0 + 0.2 * 0.04) / 0.7)

    def test_verbatim_field_pins_composite_to_zero(self, scorer: FieldScorer) -> None:
        """A fuzzy genre hit does not dilute a title equal to the query."""
        record = make_record(2, title="Fantasy", author="Anon", genre="Fantasia")

        result = scorer.score(record, "fantasy", threshold=0.3)

        assert result is not None
        assert [fm.field_name for fm in result.per_field] == ["title", "genre"]
        assert result.per_field[1].distance > 0.0
        assert result.composite == 0.0

    def test_spans_reference_original_text(self, scorer: FieldScorer) -> None:
        record = make_record(1, title="Harry Potter", author="J.K. Rowling", genre="Fantasy")

        result = scorer.score(record, "Pottr", threshold=0.3)

        assert result is not None
        span = result.per_field[0].span
        assert span.field_name == "title"
        assert span.matched_text == "Harry Potter"
        start, end = span.index_ranges[0]
        assert span.matched_text[start:end] == "Pott"


# =============================================================================
# Skips & Misses
# =============================================================================


class TestNoCandidate:
    """Records without any matching field are not candidates."""

    def test_all_fields_miss_returns_none(self, scorer: FieldScorer) -> None:
        record = make_record(2, title="The Hobbit", author="J.R.R. Tolkien", genre="Fantasy")

        assert scorer.score(record, "Pottr", threshold=0.3) is None

    def test_empty_fields_are_skipped(self, scorer: FieldScorer) -> None:
        record = make_record(3, title="", author="", genre="Fantasy")

        result = scorer.score(record, "fantasy", threshold=0.0)

        assert result is not None
        assert [fm.field_name for fm in result.per_field] == ["genre"]

    def test_missing_field_keys_are_skipped(self, scorer: FieldScorer) -> None:
        record = Record(record_id=4, fields={"title": "Dune"})

        result = scorer.score(record, "dune", threshold=0.0)

        assert result is not None
        assert result.composite == 0.0

    def test_record_with_no_text_returns_none(self, scorer: FieldScorer) -> None:
        assert scorer.score(make_record(5), "anything", threshold=1.0) is None


class TestPrefilterEquivalence:
    """Turning the character-set pre-filter off never changes results."""

    @pytest.mark.parametrize(
        ("query", "threshold"),
        [("Pottr", 0.3), ("tolk", 1.0), ("fantsy", 0.5), ("xqz", 1.0), ("rowling", 0.2)],
    )
    def test_same_result_with_and_without_prefilter(self, query: str, threshold: float) -> None:
        record = make_record(
            1,
            title="Harry Potter and the Philosopher's Stone",
            author="J.K. Rowling",
            genre="Fantasy",
        )
        fast = FieldScorer(BOOK_FIELDS, prefilter=True)
        slow = FieldScorer(BOOK_FIELDS, prefilter=False)

        assert fast.score(record, query, threshold) == slow.score(record, query, threshold)
