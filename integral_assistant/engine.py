"""
Assistant Engine

Ties the components together and defines the flow of one chat turn:

1. Log the user turn
2. Pending action open → the dialogue manager consumes the reply
3. Otherwise classify → search, chat, or execute a mutating intent
4. Store the new pending action, log the reply, send a toast

DESIGN DECISION: The engine enforces the boundaries:
- Turns of one session never interleave (session lock)
- No exception reaches the app shell; every turn ends in a message
- Every step is audited under one correlation ID per turn

This is the "glue" that keeps the widget behaving sensibly even when a
model or a store misbehaves.
"""

from typing import Awaitable, Callable, Optional
from uuid import UUID

import structlog

from integral_assistant.audit import AuditLogger, create_correlation_id
from integral_assistant.config import Settings, get_settings
from integral_assistant.conversation import SessionContext
from integral_assistant.intents import GENERIC_FAILURE_MESSAGE, DialogueManager, IntentExecutor
from integral_assistant.models.conversation import (
    ClassifiedIntent,
    IntentTag,
    OutcomeStatus,
    PendingAction,
    TurnResult,
    TurnRole,
)
from integral_assistant.retrieval import (
    SEARCH_FAILED_MESSAGE,
    KnowledgeIndexer,
    RetrievalError,
    RetrievalPipeline,
)
from integral_assistant.services.llm import (
    GeminiClient,
    GeminiIntentClassifier,
    IntentClassifierInterface,
    TextGeneratorInterface,
)
from integral_assistant.services.notifications import (
    LoggingNotificationSink,
    NotificationSinkInterface,
    notify,
)
from integral_assistant.services.search import InMemorySearchIndex, SearchIndexInterface
from integral_assistant.services.storage import (
    AuditStorageInterface,
    DomainStoreInterface,
    InMemoryDomainStore,
)


logger = structlog.get_logger(__name__)

CLASSIFIER_FAILED_MESSAGE = "My brain hurts... try again?"
CHAT_FAILED_MESSAGE = "Sorry, I couldn't come up with a reply. Please try again."

CHAT_PROMPT = (
    "You are an AI Assistant. Respond to the following prompt in a helpful, "
    "concise way. Keep it brief (under 3 sentences). Prompt: {prompt}"
)

# Receives the answer text accumulated so far
ChunkCallback = Callable[[str], None]


class AssistantEngine:
    """
    Entry point for the chat widget.

    Usage:
        engine = create_engine(store=my_store)
        session = engine.new_session()
        result = await engine.handle_message(session, "@budget groceries 400 monthly")
        show(result.message)
    """

    def __init__(
        self,
        classifier: IntentClassifierInterface,
        executor: IntentExecutor,
        dialogue: DialogueManager,
        pipeline: RetrievalPipeline,
        generator: TextGeneratorInterface,
        notifier: Optional[NotificationSinkInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._classifier = classifier
        self._executor = executor
        self._dialogue = dialogue
        self._pipeline = pipeline
        self._generator = generator
        self._notifier = notifier or LoggingNotificationSink()
        self._audit_logger = audit_logger

        # Intents that read rather than write
        self._routes: dict[
            IntentTag,
            Callable[[ClassifiedIntent, SessionContext, UUID, Optional[ChunkCallback]], Awaitable[TurnResult]],
        ] = {
            IntentTag.SEARCH_KNOWLEDGE: self._search,
            IntentTag.GENERAL_CHAT: self._chat,
        }

    def new_session(self, session_id: Optional[str] = None) -> SessionContext:
        return SessionContext(session_id)

    async def handle_message(
        self,
        session: SessionContext,
        text: str,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> TurnResult:
        """
        Process one user message.

        Turns of the same session queue on the session lock, so the log
        always reads in submission order.

        Args:
            session: The chat session
            text: What the user typed
            on_chunk: Called as a search or chat answer streams in, with
                the text received so far

        Returns:
            TurnResult; session.pending_action is updated to match
        """
        async with session.lock:
            correlation_id = create_correlation_id()
            user_turn = session.log.append(TurnRole.USER, text)
            if self._audit_logger:
                await self._audit_logger.log_turn_received(
                    session.session_id, user_turn.sequence, correlation_id
                )

            try:
                result = await self._continue_pending(session, text, correlation_id)
                if result is None:
                    result = await self._start(session, text, correlation_id, on_chunk)
            except Exception as e:
                logger.error("turn_failed", session_id=session.session_id, error=str(e), exc_info=True)
                if self._audit_logger:
                    await self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                        details={"session_id": session.session_id},
                        correlation_id=correlation_id,
                    )
                # The pending action is dropped; it may be half-updated
                result = TurnResult(message=GENERIC_FAILURE_MESSAGE)

            session.pending_action = result.pending_action
            session.log.append(result.role, result.message)

            if result.outcome is not None and result.outcome.status != OutcomeStatus.INCOMPLETE:
                await notify(self._notifier, result.message, ok=result.outcome.succeeded)
            return result

    # =========================================================================
    # TURN ROUTING
    # =========================================================================

    async def _continue_pending(
        self,
        session: SessionContext,
        text: str,
        correlation_id: UUID,
    ) -> Optional[TurnResult]:
        pending = session.pending_action
        if pending is None:
            return None
        if not self._dialogue.expects_secret(pending) and self._dialogue.is_context_switch(text):
            await self._dialogue.abandon(pending, "context_switch", session.session_id, correlation_id)
            session.pending_action = None
            return None
        return await self._dialogue.handle_turn(text, pending, session.session_id, correlation_id)

    async def _start(
        self,
        session: SessionContext,
        text: str,
        correlation_id: UUID,
        on_chunk: Optional[ChunkCallback],
    ) -> TurnResult:
        try:
            classified = await self._classifier.classify(text)
        except Exception as e:
            logger.error("classification_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="classifier",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return TurnResult(message=CLASSIFIER_FAILED_MESSAGE)

        if self._audit_logger:
            await self._audit_logger.log_intent_classified(
                session.session_id, classified.intent.value, classified.params, correlation_id
            )

        route = self._routes.get(classified.intent)
        if route is not None:
            return await route(classified, session, correlation_id, on_chunk)
        return await self._execute(classified, session, correlation_id)

    async def _execute(
        self,
        classified: ClassifiedIntent,
        session: SessionContext,
        correlation_id: UUID,
    ) -> TurnResult:
        # Credentials are only ever collected field by field from the user
        params = {} if classified.intent == IntentTag.CREATE_ACCOUNT else classified.params

        outcome = await self._executor.execute(
            classified.intent,
            params,
            session_id=session.session_id,
            correlation_id=correlation_id,
            opening=True,
        )
        if outcome.status == OutcomeStatus.INCOMPLETE:
            return TurnResult(
                message=outcome.message,
                pending_action=PendingAction(
                    intent=outcome.intent,
                    params=outcome.params,
                    missing_fields=outcome.missing_fields,
                ),
                outcome=outcome,
            )
        return TurnResult(
            message=outcome.message,
            role=TurnRole.CONFIRMATION if outcome.succeeded else TurnRole.ASSISTANT,
            outcome=outcome,
        )

    async def _search(
        self,
        classified: ClassifiedIntent,
        session: SessionContext,
        correlation_id: UUID,
        on_chunk: Optional[ChunkCallback],
    ) -> TurnResult:
        try:
            answer = await self._pipeline.answer(
                classified.original_query,
                on_chunk=on_chunk,
                session_id=session.session_id,
                correlation_id=correlation_id,
            )
        except RetrievalError:
            return TurnResult(message=SEARCH_FAILED_MESSAGE)
        return TurnResult(message=answer)

    async def _chat(
        self,
        classified: ClassifiedIntent,
        session: SessionContext,
        correlation_id: UUID,
        on_chunk: Optional[ChunkCallback],
    ) -> TurnResult:
        parts: list[str] = []
        try:
            async for chunk in self._generator.generate(
                CHAT_PROMPT.format(prompt=classified.original_query)
            ):
                parts.append(chunk)
                if on_chunk:
                    on_chunk("".join(parts))
        except Exception as e:
            logger.warning("chat_generation_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_external_service_error(
                    service="generator",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            if not parts:
                return TurnResult(message=CHAT_FAILED_MESSAGE)
        reply = "".join(parts).strip()
        return TurnResult(message=reply or CHAT_FAILED_MESSAGE)


# =============================================================================
# FACTORY
# =============================================================================

def create_engine(
    store: Optional[DomainStoreInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    notifier: Optional[NotificationSinkInterface] = None,
    search_index: Optional[SearchIndexInterface] = None,
    settings: Optional[Settings] = None,
) -> AssistantEngine:
    """
    Factory function to create a fully wired engine.

    Args:
        store: The app's data store. Defaults to an in-memory store,
            which is only useful for demos and tests.
        audit_storage: Where audit events are persisted. If None,
            audit events are only logged locally.
        notifier: Toast sink. Defaults to logging the toasts.
        search_index: Knowledge index. Defaults to an in-memory index.
        settings: Defaults to get_settings()

    Returns:
        AssistantEngine backed by Gemini for classification, embeddings
        and generation
    """
    settings = settings or get_settings()
    store = store or InMemoryDomainStore()
    search_index = search_index or InMemorySearchIndex()
    audit_logger = AuditLogger(audit_storage)

    gemini = GeminiClient(settings.gemini)
    indexer = KnowledgeIndexer(gemini, search_index, audit_logger)
    executor = IntentExecutor(
        store,
        settings=settings.assistant,
        indexer=indexer,
        audit_logger=audit_logger,
    )

    return AssistantEngine(
        classifier=GeminiIntentClassifier(gemini),
        executor=executor,
        dialogue=DialogueManager(executor, settings.assistant, audit_logger),
        pipeline=RetrievalPipeline(
            gemini,
            search_index,
            gemini,
            settings=settings.search,
            audit_logger=audit_logger,
        ),
        generator=gemini,
        notifier=notifier,
        audit_logger=audit_logger,
    )
