"""Semantic search services."""

from integral_assistant.services.search.interface import (
    SearchError,
    SearchIndexInterface,
)
from integral_assistant.services.search.memory import (
    InMemorySearchIndex,
    cosine_similarity,
)

__all__ = [
    "InMemorySearchIndex",
    "SearchError",
    "SearchIndexInterface",
    "cosine_similarity",
]
