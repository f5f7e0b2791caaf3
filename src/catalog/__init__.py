"""
Catalog Module

In-process catalog collaborator: book model, in-memory store, seed data.
"""

from src.catalog.models import Book
from src.catalog.seed import SAMPLE_BOOKS, seed_catalog
from src.catalog.store import InMemoryBookCatalog

__all__ = [
    "Book",
    "InMemoryBookCatalog",
    "SAMPLE_BOOKS",
    "seed_catalog",
]
