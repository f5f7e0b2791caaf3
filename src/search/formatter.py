"""
Result Formatter

Maps ranked ScoredResults to the external response contract. Pure functions:
no filtering, no side effects, records are passed by reference.

Response shapes:
- search:     {query, results: [{record, score, matches}], total, threshold}
- match:      {key, value, indices: [[start, end], ...]}  (end exclusive)
- suggestion: {<summary fields>..., score}
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from src.search.models import MatchSpan, ScoredResult

DEFAULT_SUMMARY_FIELDS: tuple[str, ...] = ("title", "author", "genre")


class ResultFormatter:
    """Shapes engine output for the HTTP layer.

    Attributes:
        summary_fields: Record fields copied into each suggestion
    """

    def __init__(self, summary_fields: Sequence[str] = DEFAULT_SUMMARY_FIELDS) -> None:
        self.summary_fields = tuple(summary_fields)

    @staticmethod
    def format_match(span: MatchSpan) -> dict[str, Any]:
        return {
            "key": span.field_name,
            "value": span.matched_text,
            "indices": [[start, end] for start, end in span.index_ranges],
        }

    def format_result(self, result: ScoredResult) -> dict[str, Any]:
        """Format one hit; ``record`` is the collaborator's object when present."""
        record = result.record.source if result.record.source is not None else result.record
        return {
            "record": record,
            "score": result.composite_score,
            "matches": [self.format_match(span) for span in result.field_matches],
        }

    def format_search(
        self,
        query: str,
        threshold: float,
        results: Sequence[ScoredResult],
    ) -> dict[str, Any]:
        formatted = [self.format_result(r) for r in results]
        return {
            "query": query,
            "results": formatted,
            "total": len(formatted),
            "threshold": threshold,
        }

    def format_suggestion(self, result: ScoredResult) -> dict[str, Any]:
        summary: dict[str, Any] = {
            name: result.record.get_text(name) for name in self.summary_fields
        }
        summary["score"] = result.composite_score
        return summary

    def format_suggestions(self, results: Sequence[ScoredResult]) -> list[dict[str, Any]]:
        return [self.format_suggestion(r) for r in results]
