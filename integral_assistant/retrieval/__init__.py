"""Question answering over the user's own records."""

from integral_assistant.retrieval.errors import RetrievalError
from integral_assistant.retrieval.indexer import KnowledgeIndexer
from integral_assistant.retrieval.pipeline import (
    SEARCH_FAILED_MESSAGE,
    AnswerStream,
    RetrievalPipeline,
    build_prompt,
    document_header,
)
from integral_assistant.retrieval.temporal import (
    extract_temporal_intent,
    format_date_range,
)

__all__ = [
    "AnswerStream",
    "KnowledgeIndexer",
    "RetrievalError",
    "RetrievalPipeline",
    "SEARCH_FAILED_MESSAGE",
    "build_prompt",
    "document_header",
    "extract_temporal_intent",
    "format_date_range",
]
