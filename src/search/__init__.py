"""
Fuzzy Search Module

Approximate multi-field text search over an in-memory corpus snapshot.
"""

from src.search.engine import EngineConfig, FuzzySearchEngine
from src.search.formatter import ResultFormatter
from src.search.index import CorpusProvider, IndexSnapshot, SearchIndex
from src.search.matcher import Matcher, MatcherConfig
from src.search.models import (
    FieldConfig,
    MatchResult,
    MatchSpan,
    Record,
    ScoredResult,
    SearchQuery,
)
from src.search.scorer import FieldScorer
from src.search.service import CatalogSearchService

__all__ = [
    "CatalogSearchService",
    "CorpusProvider",
    "EngineConfig",
    "FieldConfig",
    "FieldScorer",
    "FuzzySearchEngine",
    "IndexSnapshot",
    "MatchResult",
    "MatchSpan",
    "Matcher",
    "MatcherConfig",
    "Record",
    "ResultFormatter",
    "ScoredResult",
    "SearchIndex",
    "SearchQuery",
]
