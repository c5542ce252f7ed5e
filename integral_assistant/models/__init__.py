"""
Data Models Package

This package contains all Pydantic models used in Integral Assistant.
All data flowing through the system must conform to these schemas.
"""

from integral_assistant.models.conversation import (
    ClassifiedIntent,
    ConversationTurn,
    ExecutionOutcome,
    IntentTag,
    OutcomeStatus,
    PendingAction,
    TurnResult,
    TurnRole,
    redact_params,
)
from integral_assistant.models.records import (
    AccountType,
    Budget,
    BudgetFields,
    BudgetPeriod,
    Category,
    CategoryFields,
    CategoryType,
    CredentialFields,
    FinancialAccount,
    FinancialAccountFields,
    Folder,
    FolderKind,
    Goal,
    GoalFields,
    JournalFields,
    LiabilityFields,
    LiabilityType,
    NoteFields,
    RecurrenceFrequency,
    RecurringFields,
    TaskFields,
    TaskPriority,
    TransactionFields,
    TransactionType,
)
from integral_assistant.models.retrieval import (
    DocumentMetadata,
    DocumentType,
    RetrievedDocument,
    TemporalIntent,
    TemporalType,
)
from integral_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Conversation models
    "ClassifiedIntent",
    "ConversationTurn",
    "ExecutionOutcome",
    "IntentTag",
    "OutcomeStatus",
    "PendingAction",
    "TurnResult",
    "TurnRole",
    "redact_params",
    # Domain records
    "AccountType",
    "Budget",
    "BudgetFields",
    "BudgetPeriod",
    "Category",
    "CategoryFields",
    "CategoryType",
    "CredentialFields",
    "FinancialAccount",
    "FinancialAccountFields",
    "Folder",
    "FolderKind",
    "Goal",
    "GoalFields",
    "JournalFields",
    "LiabilityFields",
    "LiabilityType",
    "NoteFields",
    "RecurrenceFrequency",
    "RecurringFields",
    "TaskFields",
    "TaskPriority",
    "TransactionFields",
    "TransactionType",
    # Retrieval models
    "DocumentMetadata",
    "DocumentType",
    "RetrievedDocument",
    "TemporalIntent",
    "TemporalType",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
