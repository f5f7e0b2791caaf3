"""
In-Memory Book Catalog

Stand-in for the catalog store. Implements the CorpusProvider protocol so the
search index can pull full snapshots, and bumps ``version`` on every mutation
so the search service knows when to rebuild.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from src.catalog.models import Book
from src.core.logging import get_logger
from src.search.models import Record

logger = get_logger(__name__)


class InMemoryBookCatalog:
    """Thread-safe, insertion-ordered book store."""

    def __init__(self, books: Iterable[Book] = ()) -> None:
        self._books: dict[str, Book] = {}
        self._version = 0
        self._lock = threading.Lock()
        for book in books:
            self._books[book.id] = book

    @property
    def version(self) -> int:
        return self._version

    def add(self, book: Book) -> None:
        """Insert or replace a book (replacement keeps its position)."""
        with self._lock:
            self._books[book.id] = book
            self._version += 1

    def remove(self, book_id: str) -> bool:
        with self._lock:
            removed = self._books.pop(book_id, None) is not None
            if removed:
                self._version += 1
        return removed

    def replace_all(self, books: Iterable[Book]) -> None:
        """Swap the whole catalog contents."""
        fresh = {book.id: book for book in books}
        with self._lock:
            self._books = fresh
            self._version += 1
        logger.info("catalog_replaced", book_count=len(fresh), version=self._version)

    def list_books(self) -> list[Book]:
        with self._lock:
            return list(self._books.values())

    def get_records(self) -> list[Record]:
        """Full snapshot of searchable records, in insertion order."""
        return [
            Record(record_id=book.id, fields=book.searchable_fields(), source=book)
            for book in self.list_books()
        ]

    def __len__(self) -> int:
        return len(self._books)
