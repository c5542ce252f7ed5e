"""
Abstract Search Index Interface

The index stores embedded copies of the user's tasks, notes and journal
entries and answers nearest-neighbour queries over them.

DESIGN DECISION: The date filter is part of the search call rather than a
post-filter, so implementations can push it down into the vector store
and still return `limit` results inside the window.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from integral_assistant.models.retrieval import (
    DocumentMetadata,
    DocumentType,
    RetrievedDocument,
)


class SearchIndexInterface(ABC):
    """Vector search over the user's indexed records."""

    @abstractmethod
    async def search(
        self,
        embedding: list[float],
        threshold: float,
        limit: int,
        date_range: Optional[tuple[datetime, datetime]] = None,
    ) -> list[RetrievedDocument]:
        """
        Find documents similar to an embedding.

        Args:
            embedding: Query vector
            threshold: Minimum similarity to include a document
            limit: Maximum number of documents
            date_range: Inclusive (start, end); documents dated outside it
                are excluded

        Returns:
            Documents ordered by descending similarity

        Raises:
            SearchError: If the index cannot be queried
        """
        pass

    @abstractmethod
    async def add_document(
        self,
        content: str,
        embedding: list[float],
        metadata: DocumentMetadata,
    ) -> str:
        """
        Store a document.

        Returns:
            The document's ID in the index
        """
        pass

    @abstractmethod
    async def remove_documents(
        self,
        document_type: DocumentType,
        original_id: str,
    ) -> int:
        """
        Delete every indexed copy of a record.

        Returns:
            Number of documents removed
        """
        pass


class SearchError(Exception):
    """The search index rejected or failed a request."""
    pass
