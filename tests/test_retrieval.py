"""
Tests for the knowledge indexer and the retrieval pipeline.
"""

import asyncio
import pytest
from datetime import date

from integral_assistant.models.audit import AuditEventType
from integral_assistant.models.retrieval import DocumentType, TemporalType
from integral_assistant.retrieval import (
    KnowledgeIndexer,
    RetrievalError,
    RetrievalPipeline,
)
from integral_assistant.retrieval.pipeline import NO_CONTEXT_TEXT
from integral_assistant.services.llm import LLMError, TextGeneratorInterface

from conftest import NOW, FakeEmbedder, FakeGenerator


def seed(indexer: KnowledgeIndexer) -> None:
    async def scenario():
        await indexer.add(
            DocumentType.JOURNAL,
            "j1",
            "Dentist appointment went fine",
            title="Dentist appointment went fine",
            entry_date=date(2026, 10, 17),
        )
        await indexer.add(
            DocumentType.TASK, "t1", "Prepare slides", title="Project meeting", due_date=date(2026, 10, 14)
        )
        await indexer.add(
            DocumentType.TASK, "t2", "Book room", title="Team meeting", due_date=date(2026, 10, 20)
        )

    asyncio.run(scenario())


def make_pipeline(embedder, search_index, generator, search_settings, audit_logger) -> RetrievalPipeline:
    return RetrievalPipeline(
        embedder,
        search_index,
        generator,
        settings=search_settings,
        audit_logger=audit_logger,
        clock=lambda: NOW,
    )


class TestKnowledgeIndexer:
    """Tests for best-effort indexing."""

    def test_title_embedded_with_content(self, indexer, embedder, search_index):
        """Test that a title not in the content is embedded too."""
        asyncio.run(indexer.add(DocumentType.TASK, "t1", "Prepare slides", title="Project meeting"))
        assert embedder.calls == [("Project meeting\nPrepare slides", True)]
        assert len(search_index) == 1

    def test_failure_is_swallowed_and_audited(self, search_index, audit_logger, audit_storage):
        """Test that an embedding outage never raises."""
        indexer = KnowledgeIndexer(FakeEmbedder(fail=True), search_index, audit_logger)
        assert asyncio.run(indexer.add(DocumentType.NOTE, "n1", "text")) is False
        assert len(search_index) == 0
        events = asyncio.run(audit_storage.get_recent_events())
        assert events[0].event_type == AuditEventType.INDEXING_FAILED

    def test_remove(self, indexer, search_index):
        """Test removing an indexed record."""
        seed(indexer)
        assert asyncio.run(indexer.remove(DocumentType.TASK, "t1")) == 1
        assert len(search_index) == 2


class TestRetrieve:
    """Tests for temporal-aware search."""

    def test_undated_query(self, indexer, embedder, search_index, search_settings, audit_logger):
        """Test a plain semantic search."""
        seed(indexer)
        pipeline = make_pipeline(embedder, search_index, FakeGenerator(), search_settings, audit_logger)
        temporal, documents = asyncio.run(pipeline.retrieve("how did the dentist visit go"))
        assert temporal.type == TemporalType.NONE
        assert [d.metadata.original_id for d in documents] == ["j1"]
        assert embedder.calls[-1] == ("how did the dentist visit go", False)

    def test_dated_query_uses_cleaned_text_and_window(
        self, indexer, embedder, search_index, search_settings, audit_logger, audit_storage
    ):
        """Test that the phrase is stripped and the window applied."""
        seed(indexer)
        pipeline = make_pipeline(embedder, search_index, FakeGenerator(), search_settings, audit_logger)
        temporal, documents = asyncio.run(pipeline.retrieve("meetings last week", session_id="s1"))
        assert temporal.type == TemporalType.LAST_WEEK
        assert embedder.calls[-1] == ("meetings", False)
        assert [d.metadata.original_id for d in documents] == ["t1"]
        events = asyncio.run(audit_storage.get_recent_events())
        assert events[0].event_type == AuditEventType.SEARCH_EXECUTED
        assert events[0].details["result_count"] == 1

    def test_phrase_only_query_embeds_original(self, embedder, search_index, search_settings, audit_logger):
        """Test that an empty cleaned query falls back to the original text."""
        pipeline = make_pipeline(embedder, search_index, FakeGenerator(), search_settings, audit_logger)
        asyncio.run(pipeline.retrieve("yesterday"))
        assert embedder.calls[-1] == ("yesterday", False)

    def test_no_embedding(self, search_index, search_settings, audit_logger, audit_storage):
        """Test that a missing vector is a retrieval failure."""
        pipeline = make_pipeline(FakeEmbedder(empty=True), search_index, FakeGenerator(), search_settings, audit_logger)
        with pytest.raises(RetrievalError, match="Failed to process search query"):
            asyncio.run(pipeline.retrieve("anything"))
        events = asyncio.run(audit_storage.get_recent_events())
        assert events[0].event_type == AuditEventType.SEARCH_FAILED

    def test_embedder_outage(self, search_index, search_settings, audit_logger):
        """Test that provider errors are wrapped."""
        pipeline = make_pipeline(FakeEmbedder(fail=True), search_index, FakeGenerator(), search_settings, audit_logger)
        with pytest.raises(RetrievalError):
            asyncio.run(pipeline.retrieve("anything"))


class TestAnswer:
    """Tests for prompt building and streamed answers."""

    def test_prompt_carries_context(self, indexer, embedder, search_index, search_settings, audit_logger):
        """Test the grounded prompt for a dated query."""
        seed(indexer)
        generator = FakeGenerator(["You had one meeting."])
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)
        answer = asyncio.run(pipeline.answer("meetings last week"))
        assert answer == "You had one meeting."
        prompt = generator.prompts[0]
        assert 'User Question: "meetings last week"' in prompt
        assert 'Temporal Context: User is asking about "last week" (Oct 11 - Oct 17)' in prompt
        assert "[Task: Project meeting (Due: 10/14/2026)]\nPrepare slides" in prompt
        assert "Here are your most recent entries instead." in prompt

    def test_prompt_without_documents(self, embedder, search_index, search_settings, audit_logger):
        """Test the fallback wording when nothing matched."""
        generator = FakeGenerator(["Nothing yet."])
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)
        asyncio.run(pipeline.answer("what did I do yesterday"))
        prompt = generator.prompts[0]
        assert NO_CONTEXT_TEXT in prompt
        assert "Your most recent entry is from a different date." in prompt

    def test_streaming_callback(self, embedder, search_index, search_settings, audit_logger):
        """Test that the callback sees the growing answer."""
        seen = []
        generator = FakeGenerator([["Hello", " world"]])
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)
        answer = asyncio.run(pipeline.answer("hi", on_chunk=seen.append))
        assert answer == "Hello world"
        assert seen == ["Hello", "Hello world"]

    def test_partial_answer_kept(self, embedder, search_index, search_settings, audit_logger):
        """Test that a mid-stream failure keeps what arrived."""
        generator = FakeGenerator([["Partial", " rest"]], fail_after=1)
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)

        async def scenario():
            stream = await pipeline.stream("hi")
            text = await stream.collect()
            return stream, text

        stream, text = asyncio.run(scenario())
        assert text == "Partial"
        assert stream.error is not None
        assert not stream.completed

    def test_failure_before_first_chunk(self, embedder, search_index, search_settings, audit_logger):
        """Test that an answer with no text at all is an error."""
        generator = FakeGenerator([LLMError("quota")])
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)
        with pytest.raises(RetrievalError):
            asyncio.run(pipeline.answer("hi"))

    def test_cancel(self, embedder, search_index, search_settings, audit_logger):
        """Test that a cancelled stream stops delivering."""
        generator = FakeGenerator([["one", "two"]])
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)

        async def scenario():
            stream = await pipeline.stream("hi")
            received = []
            async for chunk in stream:
                received.append(chunk)
                stream.cancel()
            return stream, received

        stream, received = asyncio.run(scenario())
        assert received == ["one"]
        assert stream.cancelled
        assert stream.text == "one"


class TrackingGenerator(TextGeneratorInterface):
    """Streams fixed chunks and records when its generator is closed."""

    def __init__(self, chunks):
        self.chunks = chunks
        self.closed = False

    async def generate(self, prompt: str):
        try:
            for chunk in self.chunks:
                yield chunk
        finally:
            self.closed = True


class UnstartableGenerator(TextGeneratorInterface):
    """Fails before returning a stream."""

    def generate(self, prompt: str):
        raise LLMError("client not configured")


class TestStreamLifecycle:
    """Tests for starting and releasing answer streams."""

    def test_generator_failing_to_start(self, embedder, search_index, search_settings, audit_logger, audit_storage):
        """Test that a model that cannot start is a retrieval failure."""
        pipeline = make_pipeline(embedder, search_index, UnstartableGenerator(), search_settings, audit_logger)
        with pytest.raises(RetrievalError, match="client not configured"):
            asyncio.run(pipeline.answer("hi"))
        events = asyncio.run(audit_storage.get_recent_events())
        assert events[0].event_type == AuditEventType.SEARCH_FAILED

    def test_cancel_closes_generator(self, embedder, search_index, search_settings, audit_logger):
        """Test that cancelling releases the model stream."""
        generator = TrackingGenerator(["one", "two", "three"])
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)

        async def scenario():
            stream = await pipeline.stream("hi")
            async for _ in stream:
                stream.cancel()
            return stream

        stream = asyncio.run(scenario())
        assert stream.text == "one"
        assert generator.closed

    def test_aclose_mid_stream(self, embedder, search_index, search_settings, audit_logger):
        """Test that a half-read stream can be abandoned."""
        generator = TrackingGenerator(["one", "two"])
        pipeline = make_pipeline(embedder, search_index, generator, search_settings, audit_logger)

        async def scenario():
            stream = await pipeline.stream("hi")
            await anext(stream)
            await stream.aclose()
            return stream, [chunk async for chunk in stream]

        stream, rest = asyncio.run(scenario())
        assert stream.cancelled
        assert rest == []
        assert generator.closed
