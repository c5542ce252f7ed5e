"""
Audit Models for Integral Assistant

Every significant step of a conversation turn is logged for audit purposes:
classification, slot filling, execution, money movement and search.
This provides:
1. Traceability of every record the assistant created or changed
2. Debugging information when a turn goes wrong
3. A way to reconstruct a session after the fact

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
Secret parameters are redacted before an event is built.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from integral_assistant.models.conversation import redact_params


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each stage of a turn has its own event type.
    """
    # Conversation
    TURN_RECEIVED = "turn_received"
    INTENT_CLASSIFIED = "intent_classified"

    # Slot filling
    PENDING_ACTION_STARTED = "pending_action_started"
    SLOT_FILLED = "slot_filled"
    PENDING_ACTION_ABORTED = "pending_action_aborted"

    # Execution
    INTENT_EXECUTED = "intent_executed"
    INTENT_FAILED = "intent_failed"
    FUNDS_TRANSFERRED = "funds_transferred"
    GOAL_CONTRIBUTED = "goal_contributed"
    TRANSACTION_ROLLED_BACK = "transaction_rolled_back"

    # Retrieval
    SEARCH_EXECUTED = "search_executed"
    SEARCH_FAILED = "search_failed"
    RECORD_INDEXED = "record_indexed"
    INDEXING_FAILED = "indexing_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    session_id: Optional[str] = Field(
        default=None,
        description="Chat session the event belongs to"
    )
    intent: Optional[str] = Field(
        default=None,
        description="Intent tag involved, if any"
    )

    # Correlation - all events of one turn share an ID
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one turn)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user message?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "session_id": self.session_id,
            "intent": self.intent,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.intent_classified("s1", "create_task", {}, correlation_id)
        event = AuditEventBuilder.funds_transferred("s1", "Checking", "Savings", "200.00", correlation_id)
    """

    @staticmethod
    def turn_received(
        session_id: str,
        sequence: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        # Message text is deliberately left out: it may hold a password reply.
        return AuditEvent(
            event_type=AuditEventType.TURN_RECEIVED,
            session_id=session_id,
            correlation_id=correlation_id,
            description=f"User turn #{sequence} received",
            details={"sequence": sequence},
            is_user_action=True,
        )

    @staticmethod
    def intent_classified(
        session_id: str,
        intent: str,
        params: dict,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTENT_CLASSIFIED,
            session_id=session_id,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Message classified as {intent}",
            details={"params": redact_params(params)},
        )

    @staticmethod
    def pending_action_started(
        session_id: str,
        intent: str,
        missing_fields: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PENDING_ACTION_STARTED,
            session_id=session_id,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Waiting for {len(missing_fields)} field(s) for {intent}",
            details={"missing_fields": missing_fields},
        )

    @staticmethod
    def slot_filled(
        session_id: str,
        intent: str,
        field_name: str,
        remaining: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SLOT_FILLED,
            session_id=session_id,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Field '{field_name}' filled for {intent}",
            details={"field": field_name, "remaining": remaining},
            is_user_action=True,
        )

    @staticmethod
    def pending_action_aborted(
        session_id: str,
        intent: str,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PENDING_ACTION_ABORTED,
            session_id=session_id,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Pending {intent} abandoned: {reason}",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def intent_executed(
        session_id: str,
        intent: str,
        record_ids: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTENT_EXECUTED,
            session_id=session_id,
            intent=intent,
            correlation_id=correlation_id,
            description=f"{intent} executed",
            details={"record_ids": record_ids},
        )

    @staticmethod
    def intent_failed(
        session_id: str,
        intent: str,
        error_code: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INTENT_FAILED,
            severity=AuditSeverity.WARNING,
            session_id=session_id,
            intent=intent,
            correlation_id=correlation_id,
            description=f"{intent} failed: {error_code}",
            error_code=error_code,
            error_message=error_message,
        )

    @staticmethod
    def funds_transferred(
        session_id: str,
        from_account: str,
        to_account: str,
        amount: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FUNDS_TRANSFERRED,
            session_id=session_id,
            intent="transfer_funds",
            correlation_id=correlation_id,
            description=f"Transferred {amount} from {from_account} to {to_account}",
            details={
                "from_account": from_account,
                "to_account": to_account,
                "amount": amount,
            },
        )

    @staticmethod
    def goal_contributed(
        session_id: str,
        goal: str,
        amount: str,
        from_account: Optional[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CONTRIBUTED,
            session_id=session_id,
            intent="contribute_goal",
            correlation_id=correlation_id,
            description=f"Contributed {amount} to goal {goal}",
            details={
                "goal": goal,
                "amount": amount,
                "from_account": from_account,
            },
        )

    @staticmethod
    def transaction_rolled_back(
        session_id: str,
        intent: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ROLLED_BACK,
            severity=AuditSeverity.ERROR,
            session_id=session_id,
            intent=intent,
            correlation_id=correlation_id,
            description=f"Store transaction for {intent} rolled back",
            error_message=error_message,
        )

    @staticmethod
    def search_executed(
        session_id: str,
        temporal_type: str,
        result_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SEARCH_EXECUTED,
            session_id=session_id,
            intent="search_knowledge",
            correlation_id=correlation_id,
            description=f"Search ({temporal_type}) returned {result_count} documents",
            details={
                "temporal_type": temporal_type,
                "result_count": result_count,
            },
        )

    @staticmethod
    def search_failed(
        session_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SEARCH_FAILED,
            severity=AuditSeverity.WARNING,
            session_id=session_id,
            intent="search_knowledge",
            correlation_id=correlation_id,
            description="Knowledge search failed",
            error_message=error_message,
        )

    @staticmethod
    def record_indexed(
        document_type: str,
        original_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_INDEXED,
            correlation_id=correlation_id,
            description=f"Indexed {document_type} {original_id}",
            details={"type": document_type, "original_id": original_id},
        )

    @staticmethod
    def indexing_failed(
        document_type: str,
        original_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INDEXING_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Could not index {document_type} {original_id}",
            error_message=error_message,
            details={"type": document_type, "original_id": original_id},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
            correlation_id=correlation_id,
        )
