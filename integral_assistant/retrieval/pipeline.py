"""
Retrieval-Augmented Answering Pipeline

Answers questions about the user's own tasks, notes and journal entries.

FLOW:
1. Query -> temporal extraction (is the user asking about a time window?)
2. Embed the query (minus the time phrase, if one matched)
3. Vector search; narrowed to the window when there is one
4. Build a grounded prompt from the hits
5. Stream the model's answer back

CRITICAL BOUNDARIES:
- The model ONLY sees documents the search returned
- It is told to answer ONLY from them and to say so when nothing matched
- A date window widens the search (lower threshold, more results) because
  the date filter already does most of the narrowing
"""

import asyncio
from datetime import datetime
from typing import AsyncIterator, Callable, Optional
from uuid import UUID

import structlog

from integral_assistant.audit import AuditLogger
from integral_assistant.config import SearchSettings, get_settings
from integral_assistant.models.retrieval import (
    DocumentType,
    RetrievedDocument,
    TemporalIntent,
)
from integral_assistant.retrieval.errors import RetrievalError
from integral_assistant.retrieval.temporal import extract_temporal_intent, format_date_range
from integral_assistant.services.llm import EmbedderInterface, TextGeneratorInterface
from integral_assistant.services.search import SearchIndexInterface


logger = structlog.get_logger(__name__)

SEARCH_FAILED_MESSAGE = "Search failed. Please try again."
NO_CONTEXT_TEXT = "No relevant information found for this time period."

ANSWER_PROMPT = """You are an AI assistant helping to search through the user's journal entries and personal knowledge base.
User Question: "{query}"{date_context}

Relevant Information:
{context}

Instructions:
- Answer based ONLY on the information above
- If documents were found, provide a clear, organized summary
- If no information exists for the requested time period, politely explain: "I don't have any entries for {period}. {fallback}"
- Be concise and helpful"""


def _short_date(value) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def document_header(doc: RetrievedDocument) -> str:
    """Label line that tells the model what kind of record a hit is."""
    meta = doc.metadata
    if meta.type == DocumentType.TASK and meta.title:
        due = f" (Due: {_short_date(meta.due_date)})" if meta.due_date else ""
        return f"[Task: {meta.title}{due}]\n"
    if meta.type == DocumentType.JOURNAL and meta.entry_date:
        return f"[Journal Entry: {_short_date(meta.entry_date)}]\n"
    if meta.type == DocumentType.NOTE and meta.title:
        return f"[Note: {meta.title}]\n"
    return ""


def build_context(documents: list[RetrievedDocument]) -> str:
    return "\n\n".join(document_header(doc) + doc.content for doc in documents)


def build_prompt(
    query: str,
    temporal: TemporalIntent,
    documents: list[RetrievedDocument],
    now: Optional[datetime] = None,
) -> str:
    """Grounded answer prompt for one query."""
    date_context = ""
    if temporal.has_range:
        date_context = (
            f'\nTemporal Context: User is asking about "{temporal.type.label}" '
            f"({format_date_range(temporal.start_date, temporal.end_date, now)})"
        )
    fallback = (
        "Here are your most recent entries instead."
        if documents
        else "Your most recent entry is from a different date."
    )
    return ANSWER_PROMPT.format(
        query=query,
        date_context=date_context,
        context=build_context(documents) or NO_CONTEXT_TEXT,
        period=temporal.type.label,
        fallback=fallback,
    )


class AnswerStream:
    """
    An answer being streamed from the model.

    Iterate it to receive chunks as they arrive. `text` always holds what
    has been received so far, so a failure mid-stream keeps the partial
    answer. `cancel()` stops delivery at the next chunk boundary.

    The model's chunk generator is closed as soon as the stream finishes,
    whether it completed, failed or was cancelled. Call `aclose()` to
    abandon a stream that will not be iterated again.
    """

    def __init__(
        self,
        chunks: AsyncIterator[str],
        temporal: TemporalIntent,
        documents: list[RetrievedDocument],
        on_chunk: Optional[Callable[[str], None]] = None,
    ):
        self._chunks = chunks
        self._on_chunk = on_chunk
        self._parts: list[str] = []
        self.temporal = temporal
        self.documents = documents
        self.completed = False
        self.cancelled = False
        self.error: Optional[Exception] = None
        self._released = False

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def finished(self) -> bool:
        return self.completed or self.cancelled or self.error is not None

    def cancel(self) -> None:
        self.cancelled = True

    async def aclose(self) -> None:
        """Stop the stream now and close the model's chunk generator."""
        if not self.finished:
            self.cancelled = True
        await self._release()

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        close = getattr(self._chunks, "aclose", None)
        if close is None:
            return
        try:
            await close()
        except Exception as e:
            logger.warning("answer_stream_close_failed", error=str(e))

    def __aiter__(self) -> "AnswerStream":
        return self

    async def __anext__(self) -> str:
        if self.finished:
            await self._release()
            raise StopAsyncIteration
        try:
            chunk = await self._chunks.__anext__()
        except StopAsyncIteration:
            self.completed = True
            raise
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        except Exception as e:
            self.error = e
            logger.warning("answer_stream_failed", error=str(e), received=len(self.text))
            await self._release()
            raise StopAsyncIteration
        if self.cancelled:
            await self._release()
            raise StopAsyncIteration
        self._parts.append(chunk)
        if self._on_chunk is not None:
            self._on_chunk(self.text)
        return chunk

    async def collect(self) -> str:
        """
        Drain the stream.

        Returns:
            The full (or partial, after an error or cancel) answer

        Raises:
            RetrievalError: If the model failed before producing any text
        """
        try:
            async for _ in self:
                pass
        finally:
            await self._release()
        if self.error is not None and not self.text:
            raise RetrievalError(f"Answer generation failed: {self.error}") from self.error
        return self.text


class RetrievalPipeline:
    """
    Temporal-aware semantic search plus grounded answer generation.

    Usage:
        pipeline = RetrievalPipeline(embedder, index, generator)
        answer = await pipeline.answer("what did I write last week?")
    """

    def __init__(
        self,
        embedder: EmbedderInterface,
        index: SearchIndexInterface,
        generator: TextGeneratorInterface,
        settings: Optional[SearchSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._embedder = embedder
        self._index = index
        self._generator = generator
        self._settings = settings or get_settings().search
        self._audit_logger = audit_logger
        self._clock = clock

    async def retrieve(
        self,
        query: str,
        session_id: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> tuple[TemporalIntent, list[RetrievedDocument]]:
        """
        Steps 1-3: temporal extraction, embedding and search.

        Raises:
            RetrievalError: If embedding or search fails
        """
        try:
            temporal = extract_temporal_intent(query, now=self._clock())

            search_text = query
            if temporal.has_range and temporal.cleaned_query:
                search_text = temporal.cleaned_query

            embedding = await self._embedder.embed(search_text)
            if embedding is None:
                raise RetrievalError("Failed to process search query")

            if temporal.has_range:
                documents = await self._index.search(
                    embedding,
                    threshold=self._settings.dated_threshold,
                    limit=self._settings.dated_limit,
                    date_range=(temporal.start_date, temporal.end_date),
                )
            else:
                documents = await self._index.search(
                    embedding,
                    threshold=self._settings.default_threshold,
                    limit=self._settings.default_limit,
                )
        except RetrievalError as e:
            await self._log_failure(session_id, str(e), correlation_id)
            raise
        except Exception as e:
            await self._log_failure(session_id, str(e), correlation_id)
            raise RetrievalError(f"Search failed: {e}") from e

        if self._audit_logger:
            await self._audit_logger.log_search_executed(
                session_id=session_id,
                temporal_type=temporal.type.value,
                result_count=len(documents),
                correlation_id=correlation_id,
            )
        return temporal, documents

    async def stream(
        self,
        query: str,
        on_chunk: Optional[Callable[[str], None]] = None,
        session_id: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> AnswerStream:
        """
        Retrieve, build the prompt, and start streaming the answer.

        Raises:
            RetrievalError: If retrieval fails or the model cannot start
                an answer (nothing has been streamed)
        """
        temporal, documents = await self.retrieve(query, session_id, correlation_id)
        prompt = build_prompt(query, temporal, documents, now=self._clock())
        try:
            chunks = self._generator.generate(prompt).__aiter__()
        except Exception as e:
            await self._log_failure(session_id, str(e), correlation_id)
            raise RetrievalError(f"Answer generation failed: {e}") from e
        return AnswerStream(chunks, temporal, documents, on_chunk=on_chunk)

    async def answer(
        self,
        query: str,
        on_chunk: Optional[Callable[[str], None]] = None,
        session_id: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> str:
        """
        Full answer for a query.

        Raises:
            RetrievalError: On retrieval failure, or if the model produced
                no text at all
        """
        stream = await self.stream(query, on_chunk, session_id, correlation_id)
        return await stream.collect()

    async def _log_failure(
        self,
        session_id: str,
        message: str,
        correlation_id: Optional[UUID],
    ) -> None:
        logger.warning("retrieval_failed", error=message)
        if self._audit_logger:
            await self._audit_logger.log_search_failed(session_id, message, correlation_id)
