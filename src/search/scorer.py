"""
Field Scorer

Combines per-field matcher results into one composite distance per record.

The composite is a weighted average over the fields that actually matched,
with weights renormalised over that subset. A record matching only its
genre therefore scores exactly its genre distance instead of being diluted
by implicit misses on title and author.

A field whose whole value equals the query (case-insensitive) pins the
composite to 0.0: fuzzy hits on its other fields do not push it behind
records that match one field exactly and nothing else.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.core.exceptions import ConfigurationError
from src.search.index import IndexedRecord
from src.search.matcher import Matcher, PreparedPattern
from src.search.models import FieldConfig, FieldMatch, FieldScore, MatchSpan, Record


def active_fields(field_configs: Sequence[FieldConfig]) -> tuple[FieldConfig, ...]:
    """Validate field configs and drop zero-weight entries.

    Raises:
        ConfigurationError: No configs, duplicate names, or no positive weight
    """
    if not field_configs:
        raise ConfigurationError("At least one field config is required")

    names = [fc.name for fc in field_configs]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate field configs: {', '.join(duplicates)}")

    active = tuple(fc for fc in field_configs if fc.weight > 0)
    if not active:
        raise ConfigurationError("At least one field config must have weight > 0")
    return active


class FieldScorer:
    """Weighted multi-field scorer.

    Attributes:
        fields: Active (positive-weight) field configs, in priority order
        matcher: Shared stateless matcher
        prefilter: Skip matcher calls that the character-set check rules out
    """

    def __init__(
        self,
        field_configs: Sequence[FieldConfig],
        matcher: Matcher | None = None,
        prefilter: bool = True,
    ) -> None:
        self.fields = active_fields(field_configs)
        self.matcher = matcher or Matcher()
        self.prefilter = prefilter

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(fc.name for fc in self.fields)

    def score(
        self,
        record: Record,
        query: str,
        threshold: float | None = None,
    ) -> FieldScore | None:
        """Score a bare record against ``query``.

        Convenience wrapper that folds the record on the fly; the engine uses
        score_entry() with data precomputed by the index.

        Returns:
            FieldScore, or None if no configured field matched
        """
        if not query:
            return None
        entry = IndexedRecord.from_record(record, 0, self.field_names)
        return self.score_entry(entry, self.matcher.prepare(query), threshold)

    def score_entry(
        self,
        entry: IndexedRecord,
        pattern: PreparedPattern,
        threshold: float | None = None,
    ) -> FieldScore | None:
        """Score an indexed record against a prepared query.

        Returns:
            FieldScore, or None if no configured field matched
        """
        limit = self.matcher.config.threshold if threshold is None else threshold
        matches: list[FieldMatch] = []
        weighted_sum = 0.0
        weight_total = 0.0
        verbatim = False

        for fc in self.fields:
            text = entry.folded.get(fc.name)
            if not text:
                continue
            if self.prefilter and not self.matcher.could_match(
                pattern, entry.charsets[fc.name], len(text), limit
            ):
                continue

            result = self.matcher.match_prepared(pattern, text, limit)
            if result is None:
                continue

            span = MatchSpan(
                field_name=fc.name,
                matched_text=entry.record.get_text(fc.name),
                index_ranges=result.spans,
            )
            matches.append(FieldMatch(field_name=fc.name, distance=result.distance, span=span))
            weighted_sum += fc.weight * result.distance
            weight_total += fc.weight
            verbatim = verbatim or text == pattern.text

        if not matches:
            return None

        if verbatim:
            composite = 0.0
        elif len(matches) == 1:
            composite = matches[0].distance
        else:
            composite = min(1.0, max(0.0, weighted_sum / weight_total))
        return FieldScore(composite=composite, per_field=tuple(matches))
