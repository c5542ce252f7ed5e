"""
In-Memory Search Index

Brute-force cosine similarity over every stored vector. Fine for tests
and small personal datasets.

Documents are dated by entry_date (journal), then due_date (task), then
the time they were indexed.
"""

import math
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from integral_assistant.models.retrieval import (
    DocumentMetadata,
    DocumentType,
    RetrievedDocument,
)
from integral_assistant.services.search.interface import (
    SearchError,
    SearchIndexInterface,
)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine of the angle between two vectors (0.0 if either is zero)."""
    if len(a) != len(b):
        raise SearchError(f"Embedding size mismatch: {len(a)} vs {len(b)}")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class IndexedDocument(BaseModel):
    document_id: str = Field(default_factory=lambda: str(uuid4()))
    content: str
    embedding: list[float]
    metadata: DocumentMetadata
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def document_date(self) -> date:
        return self.metadata.effective_date or self.created_at.date()


class InMemorySearchIndex(SearchIndexInterface):

    def __init__(self):
        self._documents: list[IndexedDocument] = []

    def __len__(self) -> int:
        return len(self._documents)

    async def search(
        self,
        embedding: list[float],
        threshold: float,
        limit: int,
        date_range: Optional[tuple[datetime, datetime]] = None,
    ) -> list[RetrievedDocument]:
        candidates = self._documents
        if date_range is not None:
            start, end = date_range
            candidates = [
                doc for doc in candidates
                if start.date() <= doc.document_date <= end.date()
            ]

        scored = []
        for doc in candidates:
            similarity = cosine_similarity(embedding, doc.embedding)
            if similarity >= threshold:
                scored.append((similarity, doc))

        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [
            RetrievedDocument(
                content=doc.content,
                metadata=doc.metadata,
                similarity=max(-1.0, min(1.0, similarity)),
            )
            for similarity, doc in scored[:limit]
        ]

    async def add_document(
        self,
        content: str,
        embedding: list[float],
        metadata: DocumentMetadata,
    ) -> str:
        doc = IndexedDocument(content=content, embedding=embedding, metadata=metadata)
        self._documents.append(doc)
        return doc.document_id

    async def remove_documents(
        self,
        document_type: DocumentType,
        original_id: str,
    ) -> int:
        before = len(self._documents)
        self._documents = [
            doc for doc in self._documents
            if not (
                doc.metadata.type == document_type
                and doc.metadata.original_id == original_id
            )
        ]
        return before - len(self._documents)
