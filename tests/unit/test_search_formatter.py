"""
Result Formatter Tests

Tests for ResultFormatter response shapes.
"""

from __future__ import annotations

import pytest

from src.search.formatter import ResultFormatter
from src.search.models import MatchSpan, Record, ScoredResult


@pytest.fixture
def formatter() -> ResultFormatter:
    return ResultFormatter()


@pytest.fixture
def result() -> ScoredResult:
    record = Record(
        record_id="1",
        fields={"title": "Harry Potter", "author": "J.K. Rowling", "genre": "Fantasy"},
    )
    span = MatchSpan(field_name="title", matched_text="Harry Potter", index_ranges=((6, 10),))
    return ScoredResult(record=record, composite_score=0.2, field_matches=(span,), position=0)


class TestFormatSearch:
    """Search envelope and per-result shape."""

    def test_envelope(self, formatter: ResultFormatter, result: ScoredResult) -> None:
        payload = formatter.format_search("Pottr", 0.3, [result])

        assert payload["query"] == "Pottr"
        assert payload["threshold"] == 0.3
        assert payload["total"] == 1
        assert len(payload["results"]) == 1

    def test_empty_results(self, formatter: ResultFormatter) -> None:
        assert formatter.format_search("x", 0.3, []) == {
            "query": "x",
            "results": [],
            "total": 0,
            "threshold": 0.3,
        }

    def test_match_indices_are_lists(self, formatter: ResultFormatter, result: ScoredResult) -> None:
        item = formatter.format_result(result)

        assert item["score"] == 0.2
        assert item["matches"] == [
            {"key": "title", "value": "Harry Potter", "indices": [[6, 10]]}
        ]

    def test_record_without_source_is_passed_through(
        self, formatter: ResultFormatter, result: ScoredResult
    ) -> None:
        assert formatter.format_result(result)["record"] is result.record

    def test_source_object_is_preferred(self, formatter: ResultFormatter) -> None:
        source = object()
        scored = ScoredResult(
            record=Record(record_id=1, fields={}, source=source),
            composite_score=0.0,
            field_matches=(),
            position=0,
        )

        assert formatter.format_result(scored)["record"] is source


class TestFormatSuggestions:
    """Suggestions carry summary fields plus the score."""

    def test_summary(self, formatter: ResultFormatter, result: ScoredResult) -> None:
        assert formatter.format_suggestions([result]) == [
            {"title": "Harry Potter", "author": "J.K. Rowling", "genre": "Fantasy", "score": 0.2}
        ]

    def test_custom_summary_fields(self, result: ScoredResult) -> None:
        formatter = ResultFormatter(summary_fields=("title",))

        assert formatter.format_suggestion(result) == {"title": "Harry Potter", "score": 0.2}
