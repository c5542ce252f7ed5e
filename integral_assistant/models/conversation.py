"""
Conversation Models for Integral Assistant

These models describe one chat session: the turns the user and the
assistant exchange, the intent each user turn resolves to, and the
single action that may be waiting for more information.

DESIGN DECISION: A PendingAction is the only mutable piece of dialogue
state. Turns are frozen once created; the conversation log owns them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TurnRole(str, Enum):
    """Who produced a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"
    CONFIRMATION = "confirmation"  # Assistant turn reporting a completed action


class IntentTag(str, Enum):
    """
    Every command the assistant understands.

    CRITICAL: This set is closed. Adding a value here requires adding a
    handler in integral_assistant.intents.handlers (checked at import time).
    """
    CREATE_TASK = "create_task"
    CREATE_NOTE = "create_note"
    CREATE_JOURNAL = "create_journal"
    CREATE_TRANSACTION = "create_transaction"
    CREATE_RECURRING = "create_recurring"
    CREATE_BUDGET = "create_budget"
    CREATE_CATEGORY = "create_category"
    CREATE_FINANCIAL_ACCOUNT = "create_financial_account"
    CREATE_GOAL = "create_goal"
    CONTRIBUTE_GOAL = "contribute_goal"
    CREATE_LIABILITY = "create_liability"
    TRANSFER_FUNDS = "transfer_funds"
    CREATE_ACCOUNT = "create_account"  # Stored credentials, not a money account
    SEARCH_KNOWLEDGE = "search_knowledge"
    GENERAL_CHAT = "general_chat"

    @property
    def is_mutating(self) -> bool:
        """True for intents that create or change records."""
        return self not in (IntentTag.SEARCH_KNOWLEDGE, IntentTag.GENERAL_CHAT)

    @property
    def label(self) -> str:
        """Human-readable name, e.g. 'financial account'."""
        return self.value.split("_", 1)[-1].replace("_", " ")


class OutcomeStatus(str, Enum):
    """Result of trying to execute an intent."""
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"  # Fields still missing, keep asking
    FAILED = "failed"


# Fields whose values are never logged or sent back to a model
SECRET_FIELDS = frozenset({"password"})


# =============================================================================
# TURNS
# =============================================================================

class ConversationTurn(BaseModel):
    """
    A single message in a session.

    Frozen: once appended to the log a turn is never changed.
    """

    model_config = ConfigDict(frozen=True)

    turn_id: UUID = Field(default_factory=uuid4)
    sequence: int = Field(
        ...,
        ge=0,
        description="Position in the session log, assigned by the log"
    )
    role: TurnRole
    text: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# INTENTS AND PENDING ACTIONS
# =============================================================================

class ClassifiedIntent(BaseModel):
    """
    What the classifier made of a user message.

    Params are raw and unvalidated; the executor decides what is usable.
    """

    intent: IntentTag
    params: dict[str, Any] = Field(default_factory=dict)
    confirmation_message: str = ""
    original_query: str


class PendingAction(BaseModel):
    """
    An intent waiting for the user to supply more fields.

    At most one exists per session. The dialogue manager fills
    missing_fields[0] with each user reply, then pops it.
    """

    intent: IntentTag
    params: dict[str, Any] = Field(default_factory=dict)
    missing_fields: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_filled_not_missing(self) -> "PendingAction":
        """A field cannot be both filled and still requested."""
        overlap = [
            name for name in self.missing_fields
            if self.params.get(name) not in (None, "")
        ]
        if overlap:
            raise ValueError(f"Fields already filled but listed as missing: {overlap}")
        return self

    @property
    def next_field(self) -> Optional[str]:
        return self.missing_fields[0] if self.missing_fields else None

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields

    def fill_next(self, value: Any) -> str:
        """
        Write value into the first missing field and drop it from the list.

        Returns:
            The name of the field that was filled

        Raises:
            ValueError: If nothing is missing
        """
        if not self.missing_fields:
            raise ValueError("No missing field to fill")
        field_name = self.missing_fields.pop(0)
        self.params[field_name] = value
        return field_name

    def redacted_params(self) -> dict[str, Any]:
        """Params safe to put in a log line."""
        return redact_params(self.params)


def redact_params(params: dict[str, Any]) -> dict[str, Any]:
    """Replace secret values with a mask."""
    return {
        key: ("***" if key in SECRET_FIELDS and value else value)
        for key, value in params.items()
    }


# =============================================================================
# RESULTS
# =============================================================================

class ExecutionOutcome(BaseModel):
    """Result of running an intent against the domain collaborators."""

    status: OutcomeStatus
    message: str
    intent: IntentTag
    params: dict[str, Any] = Field(default_factory=dict)
    missing_fields: list[str] = Field(default_factory=list)
    record_ids: list[str] = Field(
        default_factory=list,
        description="IDs of records created or changed"
    )

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.COMPLETE


class TurnResult(BaseModel):
    """
    What one user turn produced.

    pending_action is the session's state after the turn (None when
    nothing is waiting).
    """

    message: str
    role: TurnRole = TurnRole.ASSISTANT
    pending_action: Optional[PendingAction] = None
    outcome: Optional[ExecutionOutcome] = None
