"""
Slot-Filling Dialogue Manager

Drives a PendingAction to completion one user reply at a time.

Each reply is taken verbatim as the value of the first missing field.
When nothing is missing the executor runs; if it finds a value unusable
it hands the field back as missing and the dialogue keeps asking.

Notes and journal entries are open-ended: once their content is known,
later replies are appended to it until the user says a closing phrase
("done", "save it", ...).

DESIGN DECISION: A reply that matches an abort phrase, or starts with an
@mention, is never consumed as a field value. Abort is handled here;
an @mention is reported back so the engine can start the new intent.

CRITICAL: While a secret field (the password) is being asked for, the
reply is ALWAYS the value. It is never checked against abort phrases or
mentions, so a secret can never reach the classifier or the model.
"""

from typing import Optional
from uuid import UUID

import structlog

from integral_assistant.audit import AuditLogger, create_correlation_id
from integral_assistant.config import AssistantSettings, get_settings
from integral_assistant.intents.executor import IntentExecutor
from integral_assistant.intents.prompts import CONTINUE_PROMPTS, field_prompt
from integral_assistant.models.conversation import (
    SECRET_FIELDS,
    OutcomeStatus,
    PendingAction,
    TurnResult,
    TurnRole,
)
from integral_assistant.services.llm import parse_mention


logger = structlog.get_logger(__name__)

ABORT_MESSAGE = "Okay, I've cancelled that."


class DialogueManager:
    """
    Consumes replies to an open PendingAction.

    Usage:
        dialogue = DialogueManager(executor)
        result = await dialogue.handle_turn("Groceries", session.pending_action)
        session.pending_action = result.pending_action
    """

    def __init__(
        self,
        executor: IntentExecutor,
        settings: Optional[AssistantSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._executor = executor
        self._settings = settings or get_settings().assistant
        self._audit_logger = audit_logger

    # =========================================================================
    # REPLY CLASSIFICATION
    # =========================================================================

    def is_abort(self, text: str) -> bool:
        return text.strip().lower() in self._settings.abort_phrases_list

    def is_closing(self, text: str) -> bool:
        return text.strip().lower() in self._settings.closing_phrases_list

    def is_context_switch(self, text: str) -> bool:
        """True when the reply starts a different command with an @mention."""
        return parse_mention(text) is not None

    @staticmethod
    def expects_secret(pending: PendingAction) -> bool:
        """True when the next reply is a secret and must be taken verbatim."""
        return pending.next_field in SECRET_FIELDS

    @staticmethod
    def is_continuation(pending: PendingAction) -> bool:
        """Content known, waiting for more text or a closing phrase."""
        return pending.is_complete and pending.intent in CONTINUE_PROMPTS

    # =========================================================================
    # TURN HANDLING
    # =========================================================================

    async def handle_turn(
        self,
        text: str,
        pending: PendingAction,
        session_id: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> TurnResult:
        """
        Apply one user reply to the pending action.

        Returns:
            TurnResult whose pending_action is the action still open after
            this turn (None once it completed, failed or was cancelled)
        """
        correlation_id = correlation_id or create_correlation_id()
        pending = pending.model_copy(deep=True)

        if not self.expects_secret(pending) and self.is_abort(text):
            await self.abandon(pending, "user_cancelled", session_id, correlation_id)
            return TurnResult(message=ABORT_MESSAGE)

        if self.is_continuation(pending):
            if self.is_closing(text):
                return await self._execute(pending, session_id, correlation_id)
            pending.params["content"] = f"{pending.params.get('content', '')}\n\n{text}"
            return TurnResult(
                message=CONTINUE_PROMPTS[pending.intent],
                pending_action=pending,
            )

        field_name = pending.fill_next(text)
        if self._audit_logger:
            await self._audit_logger.log_slot_filled(
                session_id,
                pending.intent.value,
                field_name,
                list(pending.missing_fields),
                correlation_id,
            )

        if pending.is_complete and pending.intent in CONTINUE_PROMPTS:
            return TurnResult(
                message=CONTINUE_PROMPTS[pending.intent],
                pending_action=pending,
            )

        if not pending.is_complete:
            return TurnResult(
                message=field_prompt(pending.intent, pending.next_field, pending.params),
                pending_action=pending,
            )

        return await self._execute(pending, session_id, correlation_id)

    async def abandon(
        self,
        pending: PendingAction,
        reason: str,
        session_id: str = "",
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Record that a pending action was dropped without executing."""
        logger.info("pending_action_dropped", intent=pending.intent.value, reason=reason)
        if self._audit_logger:
            await self._audit_logger.log_pending_action_aborted(
                session_id,
                pending.intent.value,
                reason,
                correlation_id or create_correlation_id(),
            )

    async def _execute(
        self,
        pending: PendingAction,
        session_id: str,
        correlation_id: UUID,
    ) -> TurnResult:
        outcome = await self._executor.execute(
            pending.intent,
            pending.params,
            session_id=session_id,
            correlation_id=correlation_id,
            opening=False,
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
