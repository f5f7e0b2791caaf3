"""
Search Index

Holds an immutable snapshot of the corpus plus per-field normalisation data
(case-folded text and character sets) so queries never re-fold the corpus.

Consistency:
- rebuild() builds a complete new IndexSnapshot off to the side and swaps a
  single reference. Queries grab the reference once and keep scoring against
  it, so they see either the old or the new snapshot in full, never a mix.
- There is no incremental update.

Patterns Applied:
- Copy-on-write snapshot swap instead of in-place mutation
- Protocol for the corpus provider (dependency injection, test doubles)
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from src.core.logging import get_logger
from src.core.tracing import get_tracer
from src.search.matcher import fold_case
from src.search.models import Record

logger = get_logger(__name__)
tracer = get_tracer(__name__)


# =============================================================================
# Protocol
# =============================================================================


@runtime_checkable
class CorpusProvider(Protocol):
    """Supplies the full current set of searchable records."""

    def get_records(self) -> Sequence[Record]:
        """Return every record currently in the catalog, in stable order."""
        ...


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True, slots=True)
class IndexedRecord:
    """A record plus the per-field data precomputed at build time.

    Attributes:
        record: The collaborator's record (reference, not a copy)
        position: Order of the record within its snapshot
        folded: Case-folded text per configured field (empty fields omitted)
        charsets: Distinct characters of each folded field
    """

    record: Record
    position: int
    folded: dict[str, str]
    charsets: dict[str, frozenset[str]]

    @classmethod
    def from_record(
        cls,
        record: Record,
        position: int,
        field_names: Iterable[str],
    ) -> IndexedRecord:
        folded: dict[str, str] = {}
        charsets: dict[str, frozenset[str]] = {}
        for name in field_names:
            text = record.get_text(name)
            if not text:
                continue
            folded[name] = fold_case(text)
            charsets[name] = frozenset(folded[name])
        return cls(record=record, position=position, folded=folded, charsets=charsets)


@dataclass(frozen=True, slots=True)
class IndexSnapshot:
    """Immutable point-in-time view of the corpus."""

    version: int
    entries: tuple[IndexedRecord, ...]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[IndexedRecord]:
        return iter(self.entries)


EMPTY_SNAPSHOT = IndexSnapshot(version=0, entries=())


# =============================================================================
# Index
# =============================================================================


class SearchIndex:
    """The current corpus snapshot, replaceable atomically.

    Example:
        >>> index = SearchIndex.build(records, field_names=["title", "author"])
        >>> [r.record_id for r in index.iterate()]
        [1, 2]
        >>> index.rebuild([])
        >>> list(index.iterate())
        []
    """

    def __init__(self, field_names: Iterable[str]) -> None:
        """Create an unbuilt index.

        Args:
            field_names: Fields whose text is precomputed per record
        """
        self._field_names: tuple[str, ...] = tuple(field_names)
        self._snapshot: IndexSnapshot = EMPTY_SNAPSHOT
        self._built = False
        self._lock = threading.Lock()

    @classmethod
    def build(cls, records: Iterable[Record], field_names: Iterable[str]) -> SearchIndex:
        """Create an index and ingest ``records``."""
        index = cls(field_names)
        index.rebuild(records)
        return index

    @property
    def field_names(self) -> tuple[str, ...]:
        return self._field_names

    @property
    def is_built(self) -> bool:
        """True once any build or rebuild has completed."""
        return self._built

    @property
    def version(self) -> int:
        return self._snapshot.version

    def snapshot(self) -> IndexSnapshot:
        """Return the current snapshot; hold it for the whole query."""
        return self._snapshot

    def rebuild(self, records: Iterable[Record]) -> IndexSnapshot:
        """Replace the whole corpus with ``records``.

        The new snapshot is fully built before it becomes visible.

        Returns:
            The snapshot now being served
        """
        with tracer.start_as_current_span("search_index.rebuild") as span:
            entries = tuple(
                IndexedRecord.from_record(record, position, self._field_names)
                for position, record in enumerate(records)
            )
            with self._lock:
                snapshot = IndexSnapshot(version=self._snapshot.version + 1, entries=entries)
                self._snapshot = snapshot
                self._built = True
            span.set_attribute("index.record_count", len(entries))
            span.set_attribute("index.version", snapshot.version)

        logger.info("index_rebuilt", record_count=len(entries), version=snapshot.version)
        return snapshot

    def iterate(self) -> Iterator[Record]:
        """Yield record references from the snapshot at the time of the call."""
        snapshot = self._snapshot
        return (entry.record for entry in snapshot.entries)

    def __len__(self) -> int:
        return len(self._snapshot)
