"""Catalog-Search-Service: fuzzy search over the book catalog.

This package provides:
- Approximate (typo tolerant) multi-field matching
- Weighted ranking with match spans for highlighting
- Search and autocomplete HTTP endpoints
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
