"""
Knowledge Indexer

Keeps the search index in step with the records the assistant creates.
Indexing is best effort: a record that cannot be indexed is still saved,
and the failure is audited rather than raised.
"""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from integral_assistant.audit import AuditLogger
from integral_assistant.models.retrieval import DocumentMetadata, DocumentType
from integral_assistant.services.llm import EmbedderInterface
from integral_assistant.services.search import SearchIndexInterface


logger = structlog.get_logger(__name__)


class KnowledgeIndexer:

    def __init__(
        self,
        embedder: EmbedderInterface,
        index: SearchIndexInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._embedder = embedder
        self._index = index
        self._audit_logger = audit_logger

    async def add(
        self,
        document_type: DocumentType,
        original_id: str,
        content: str,
        title: Optional[str] = None,
        due_date: Optional[date] = None,
        entry_date: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Embed and store a record.

        Returns:
            True if the record was indexed
        """
        text = f"{title}\n{content}" if title and title not in content else content
        try:
            embedding = await self._embedder.embed(text, document=True)
            if embedding is None:
                raise ValueError("embedder returned no vector")
            await self._index.add_document(
                content=content,
                embedding=embedding,
                metadata=DocumentMetadata(
                    type=document_type,
                    title=title,
                    due_date=due_date,
                    entry_date=entry_date,
                    original_id=original_id,
                ),
            )
        except Exception as e:
            logger.warning(
                "indexing_failed",
                document_type=document_type.value,
                original_id=original_id,
                error=str(e),
            )
            if self._audit_logger:
                await self._audit_logger.log_indexing_failed(
                    document_type.value, original_id, str(e), correlation_id
                )
            return False

        if self._audit_logger:
            await self._audit_logger.log_record_indexed(
                document_type.value, original_id, correlation_id
            )
        return True

    async def remove(self, document_type: DocumentType, original_id: str) -> int:
        """Drop every indexed copy of a record; returns how many were removed."""
        removed = await self._index.remove_documents(document_type, original_id)
        logger.info(
            "documents_removed",
            document_type=document_type.value,
            original_id=original_id,
            count=removed,
        )
        return removed
