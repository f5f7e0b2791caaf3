"""
Search Models

Data models shared by the matcher, field scorer, index and engine.

Offsets in every range are Python string (codepoint) offsets into the
original field value, half-open: [start, end).
"""

from __future__ import annotations

import math
from collections.abc import Hashable, Mapping
from dataclasses import dataclass
from typing import Any

from src.core.exceptions import ConfigurationError, QueryValidationError

IndexRange = tuple[int, int]


@dataclass(frozen=True, slots=True)
class Record:
    """A searchable document supplied by the catalog collaborator.

    Attributes:
        record_id: Stable identifier owned by the collaborator
        fields: Named text fields (e.g. title, author, genre)
        source: The collaborator's own object, returned as-is in results
    """

    record_id: Hashable
    fields: Mapping[str, str]
    source: Any = None

    def get_text(self, name: str) -> str:
        """Return the text of a field, or an empty string if absent."""
        value = self.fields.get(name)
        return value if isinstance(value, str) else ""


@dataclass(frozen=True, slots=True)
class FieldConfig:
    """A searchable field and its relative weight.

    Weights are relative and need not sum to 1. A weight of zero is allowed
    but disables the field.
    """

    name: str
    weight: float

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Field name must be non-empty")
        if not isinstance(self.weight, (int, float)) or isinstance(self.weight, bool):
            raise ConfigurationError(f"Weight for field '{self.name}' must be a number")
        if math.isnan(self.weight) or math.isinf(self.weight) or self.weight < 0:
            raise ConfigurationError(
                f"Weight for field '{self.name}' must be a finite number >= 0, got {self.weight}"
            )


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of matching one query against one field value.

    Attributes:
        distance: 0.0 is an exact match at the expected location, 1.0 is the worst
        spans: Ordered, non-overlapping [start, end) ranges that matched
    """

    distance: float
    spans: tuple[IndexRange, ...] = ()


@dataclass(frozen=True, slots=True)
class MatchSpan:
    """Highlighting metadata for one matched field.

    Attributes:
        field_name: Name of the matched field
        matched_text: The field value the ranges index into
        index_ranges: Ordered [start, end) ranges into matched_text
    """

    field_name: str
    matched_text: str
    index_ranges: tuple[IndexRange, ...]


@dataclass(frozen=True, slots=True)
class FieldMatch:
    """Per-field scoring detail: the field's own distance plus its span."""

    field_name: str
    distance: float
    span: MatchSpan


@dataclass(frozen=True, slots=True)
class FieldScore:
    """Composite score of one record across all matched fields."""

    composite: float
    per_field: tuple[FieldMatch, ...]


@dataclass(frozen=True, slots=True)
class ScoredResult:
    """A ranked search hit.

    Attributes:
        record: Reference to the indexed record (not a copy)
        composite_score: Weighted distance in [0, 1], lower is closer
        field_matches: Match spans in field-config order
        position: Position of the record in the snapshot, used for tie-breaks
    """

    record: Record
    composite_score: float
    field_matches: tuple[MatchSpan, ...]
    position: int

    @property
    def record_id(self) -> Hashable:
        """Identifier of the matched record."""
        return self.record.record_id


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """A validated search request.

    ``threshold`` is a maximum distance: 0.0 demands an exact match,
    1.0 accepts anything the matcher reports.
    """

    text: str
    limit: int = 10
    threshold: float = 0.3

    def validate(self) -> None:
        """Check the query contract.

        Raises:
            QueryValidationError: On empty text, non-positive limit or
                threshold outside [0, 1]
        """
        if not isinstance(self.text, str) or not self.text.strip():
            raise QueryValidationError("text", "Query text must be a non-empty string")
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise QueryValidationError("limit", "Limit must be an integer")
        if self.limit < 1:
            raise QueryValidationError("limit", f"Limit must be >= 1, got {self.limit}")
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
            raise QueryValidationError("threshold", "Threshold must be a number")
        if math.isnan(self.threshold) or not 0.0 <= self.threshold <= 1.0:
            raise QueryValidationError(
                "threshold", f"Threshold must be within [0, 1], got {self.threshold}"
            )
