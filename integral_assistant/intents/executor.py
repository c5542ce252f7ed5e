"""
Intent Executor

Runs one mutating intent against the domain store and turns whatever
happens into an ExecutionOutcome:

- COMPLETE: records were written, message confirms them
- INCOMPLETE: required fields are missing or unusable, message asks
  for the first one
- FAILED: a named entity was not found, funds were short, or a
  collaborator failed; nothing was written

DESIGN DECISION: The executor is the error boundary for intents. No
exception from a handler or the store escapes execute(); each becomes
one user-facing message plus an audit event.
"""

from datetime import date
from typing import Any, Callable, Optional
from uuid import UUID

import structlog

from integral_assistant.audit import AuditLogger, create_correlation_id
from integral_assistant.config import AssistantSettings, get_settings
from integral_assistant.intents.errors import (
    EntityNotFoundError,
    ExecutionError,
    InsufficientFundsError,
    ParamsValidationError,
    SameAccountError,
)
from integral_assistant.intents.handlers import (
    HANDLERS,
    ExecutionContext,
    IntentHandler,
    default_account_resolver,
    default_goal_resolver,
)
from integral_assistant.intents.parsing import format_money
from integral_assistant.intents.prompts import field_prompt, opening_prompt, retry_prompt
from integral_assistant.intents.resolver import EntityResolver
from integral_assistant.models.conversation import (
    ExecutionOutcome,
    IntentTag,
    OutcomeStatus,
)
from integral_assistant.models.records import FinancialAccount, Goal
from integral_assistant.retrieval.indexer import KnowledgeIndexer
from integral_assistant.services.storage import DomainStoreInterface, StorageError


logger = structlog.get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Sorry, something went wrong."


class IntentExecutor:
    """
    Validates parameters and carries out mutating intents.

    Usage:
        executor = IntentExecutor(store)
        outcome = await executor.execute(IntentTag.CREATE_BUDGET, {"name": "Food"})
        if outcome.status == OutcomeStatus.INCOMPLETE:
            ask(outcome.message)
    """

    def __init__(
        self,
        store: DomainStoreInterface,
        settings: Optional[AssistantSettings] = None,
        indexer: Optional[KnowledgeIndexer] = None,
        audit_logger: Optional[AuditLogger] = None,
        account_resolver: Optional[EntityResolver[FinancialAccount]] = None,
        goal_resolver: Optional[EntityResolver[Goal]] = None,
        clock: Callable[[], date] = date.today,
    ):
        self._store = store
        self._settings = settings or get_settings().assistant
        self._indexer = indexer
        self._audit_logger = audit_logger
        self._account_resolver = account_resolver or default_account_resolver(
            self._settings.prefer_exact_entity_match
        )
        self._goal_resolver = goal_resolver or default_goal_resolver()
        self._clock = clock

    def handler_for(self, intent: IntentTag) -> IntentHandler:
        if intent not in HANDLERS:
            raise ValueError(f"{intent.value} does not change any records")
        return HANDLERS[intent]

    def required_fields(self, intent: IntentTag) -> list[str]:
        return self.handler_for(intent).required_fields

    async def execute(
        self,
        intent: IntentTag,
        params: dict[str, Any],
        session_id: str = "",
        correlation_id: Optional[UUID] = None,
        opening: bool = True,
    ) -> ExecutionOutcome:
        """
        Execute an intent with whatever parameters are known so far.

        Args:
            intent: A mutating intent
            params: Raw parameter values
            opening: Prefix the first question with the intent's opening
                line (only for the first ask of a new action)

        Raises:
            ValueError: If the intent is not a mutating one
        """
        handler = self.handler_for(intent)
        correlation_id = correlation_id or create_correlation_id()
        ctx = ExecutionContext(
            store=self._store,
            settings=self._settings,
            today=self._clock(),
            account_resolver=self._account_resolver,
            goal_resolver=self._goal_resolver,
            indexer=self._indexer,
            audit_logger=self._audit_logger,
            session_id=session_id,
            correlation_id=correlation_id,
        )

        try:
            values = handler.validate(params, ctx)
        except ParamsValidationError as e:
            return await self._incomplete(intent, params, e, opening, session_id, correlation_id)

        try:
            result = await self._run(handler, values, ctx)
        except EntityNotFoundError as e:
            message = f'Could not find {e.kind} "{e.name}". Please check the {e.kind} name.'
            return await self._failed(intent, params, "entity_not_found", message, e, session_id, correlation_id)
        except InsufficientFundsError as e:
            message = (
                f"Insufficient balance in {e.account_name}. Current balance: "
                f"{format_money(e.balance, self._settings.currency_symbol)}"
            )
            return await self._failed(intent, params, "insufficient_funds", message, e, session_id, correlation_id)
        except SameAccountError as e:
            message = f"{e} - please pick two different accounts."
            return await self._failed(intent, params, "same_account", message, e, session_id, correlation_id)
        except Exception as e:
            logger.error("intent_execution_failed", intent=intent.value, error=str(e), exc_info=True)
            if handler.atomic and self._audit_logger:
                await self._audit_logger.log_transaction_rolled_back(
                    session_id, intent.value, str(e), correlation_id
                )
            return await self._failed(
                intent, params, type(e).__name__, GENERIC_FAILURE_MESSAGE, e, session_id, correlation_id
            )

        if self._audit_logger:
            await self._audit_logger.log_intent_executed(
                session_id, intent.value, result.record_ids, correlation_id
            )
        return ExecutionOutcome(
            status=OutcomeStatus.COMPLETE,
            message=result.message,
            intent=intent,
            params=params,
            record_ids=result.record_ids,
        )

    @staticmethod
    async def _run(handler: IntentHandler, values: dict[str, Any], ctx: ExecutionContext):
        try:
            return await handler.run(values, ctx)
        except StorageError as e:
            raise ExecutionError(f"Store rejected {handler.intent.value}: {e}") from e

    async def _incomplete(
        self,
        intent: IntentTag,
        params: dict[str, Any],
        error: ParamsValidationError,
        opening: bool,
        session_id: str,
        correlation_id: UUID,
    ) -> ExecutionOutcome:
        # A missing field must not keep a value, or it could never be re-asked
        kept = {k: v for k, v in params.items() if k not in error.missing_fields}
        first = error.missing_fields[0]
        if first in error.invalid_fields:
            message = retry_prompt(intent, first, kept)
        elif opening:
            message = opening_prompt(intent, first, kept)
        else:
            message = field_prompt(intent, first, kept)

        if self._audit_logger:
            await self._audit_logger.log_pending_action_started(
                session_id, intent.value, error.missing_fields, correlation_id
            )
        return ExecutionOutcome(
            status=OutcomeStatus.INCOMPLETE,
            message=message,
            intent=intent,
            params=kept,
            missing_fields=error.missing_fields,
        )

    async def _failed(
        self,
        intent: IntentTag,
        params: dict[str, Any],
        error_code: str,
        message: str,
        error: Exception,
        session_id: str,
        correlation_id: UUID,
    ) -> ExecutionOutcome:
        if self._audit_logger:
            await self._audit_logger.log_intent_failed(
                session_id, intent.value, error_code, str(error), correlation_id
            )
        return ExecutionOutcome(
            status=OutcomeStatus.FAILED,
            message=message,
            intent=intent,
            params=params,
        )
