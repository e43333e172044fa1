"""
Search Engine - current-version text and tag lookup.
"""

from paperflow.engines.search.search_service import SearchService
from paperflow.engines.search.text_match import (
    RelevanceScorer,
    ScoredDocument,
    query_tokens,
    tokenize,
)

__all__ = [
    "SearchService",
    "RelevanceScorer",
    "ScoredDocument",
    "query_tokens",
    "tokenize",
]
