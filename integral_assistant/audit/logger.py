"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of records the assistant touched
2. Debugging capability
3. A history of what each session asked for

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the turn if logging fails)
- Supports correlation IDs to trace the events of one turn
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from integral_assistant.models.audit import AuditEvent, AuditEventBuilder
from integral_assistant.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_turn_received(
        self,
        session_id: str,
        sequence: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.turn_received(session_id, sequence, correlation_id))

    async def log_intent_classified(
        self,
        session_id: str,
        intent: str,
        params: dict,
        correlation_id: UUID,
    ) -> None:
        """Log classifier output (secret params redacted)."""
        await self.log(
            AuditEventBuilder.intent_classified(session_id, intent, params, correlation_id)
        )

    async def log_pending_action_started(
        self,
        session_id: str,
        intent: str,
        missing_fields: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.pending_action_started(
                session_id, intent, missing_fields, correlation_id
            )
        )

    async def log_slot_filled(
        self,
        session_id: str,
        intent: str,
        field_name: str,
        remaining: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log which field was filled. The value itself is never logged."""
        await self.log(
            AuditEventBuilder.slot_filled(
                session_id, intent, field_name, remaining, correlation_id
            )
        )

    async def log_pending_action_aborted(
        self,
        session_id: str,
        intent: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.pending_action_aborted(session_id, intent, reason, correlation_id)
        )

    async def log_intent_executed(
        self,
        session_id: str,
        intent: str,
        record_ids: list[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.intent_executed(session_id, intent, record_ids, correlation_id)
        )

    async def log_intent_failed(
        self,
        session_id: str,
        intent: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.intent_failed(
                session_id, intent, error_code, error_message, correlation_id
            )
        )

    async def log_funds_transferred(
        self,
        session_id: str,
        from_account: str,
        to_account: str,
        amount: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.funds_transferred(
                session_id, from_account, to_account, amount, correlation_id
            )
        )

    async def log_goal_contributed(
        self,
        session_id: str,
        goal: str,
        amount: str,
        from_account: Optional[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.goal_contributed(
                session_id, goal, amount, from_account, correlation_id
            )
        )

    async def log_transaction_rolled_back(
        self,
        session_id: str,
        intent: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.transaction_rolled_back(
                session_id, intent, error_message, correlation_id
            )
        )

    async def log_search_executed(
        self,
        session_id: str,
        temporal_type: str,
        result_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(
            AuditEventBuilder.search_executed(
                session_id, temporal_type, result_count, correlation_id
            )
        )

    async def log_search_failed(
        self,
        session_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.search_failed(session_id, error_message, correlation_id))

    async def log_record_indexed(
        self,
        document_type: str,
        original_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.record_indexed(document_type, original_id, correlation_id)
        )

    async def log_indexing_failed(
        self,
        document_type: str,
        original_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.indexing_failed(
                document_type, original_id, error_message, correlation_id
            )
        )

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user turn.
    Pass it through all subsequent operations.
    """
    return uuid4()
