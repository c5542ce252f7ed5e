"""
Tests for Integral Assistant

Test strategy:
1. Unit tests for individual components (models, parsers, resolver)
2. Integration tests for flows (with fake model services)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from integral_assistant.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from integral_assistant.models.conversation import (
    ConversationTurn,
    IntentTag,
    PendingAction,
    TurnRole,
    redact_params,
)
from integral_assistant.models.records import (
    CredentialFields,
    FinancialAccountFields,
    Goal,
    NoteFields,
    TransactionFields,
)
from integral_assistant.models.retrieval import (
    DocumentMetadata,
    DocumentType,
    RetrievedDocument,
    TemporalIntent,
    TemporalType,
)


class TestConversationModels:
    """Tests for turns, intents and pending actions."""

    def test_turn_is_frozen(self):
        """Test that a logged turn cannot be changed."""
        turn = ConversationTurn(sequence=0, role=TurnRole.USER, text="hi")
        with pytest.raises(ValueError):
            turn.text = "changed"

    def test_turn_rejects_negative_sequence(self):
        """Test that sequence numbers start at zero."""
        with pytest.raises(ValueError):
            ConversationTurn(sequence=-1, role=TurnRole.USER, text="hi")

    def test_only_search_and_chat_are_read_only(self):
        """Test is_mutating across the closed intent set."""
        read_only = {tag for tag in IntentTag if not tag.is_mutating}
        assert read_only == {IntentTag.SEARCH_KNOWLEDGE, IntentTag.GENERAL_CHAT}
        assert len(IntentTag) == 15

    def test_intent_label(self):
        """Test human-readable intent labels."""
        assert IntentTag.CREATE_FINANCIAL_ACCOUNT.label == "financial account"
        assert IntentTag.TRANSFER_FUNDS.label == "funds"

    def test_pending_action_fill_next(self):
        """Test that fill_next consumes the first missing field."""
        pending = PendingAction(
            intent=IntentTag.CREATE_BUDGET,
            params={"name": "Food"},
            missing_fields=["amount", "period"],
        )
        assert pending.next_field == "amount"
        assert pending.fill_next("400") == "amount"
        assert pending.params["amount"] == "400"
        assert pending.missing_fields == ["period"]
        assert not pending.is_complete

    def test_pending_action_fill_when_complete(self):
        """Test that filling a complete action is an error."""
        pending = PendingAction(intent=IntentTag.CREATE_NOTE, params={"content": "x"})
        with pytest.raises(ValueError, match="No missing field"):
            pending.fill_next("more")

    def test_pending_action_rejects_filled_missing_field(self):
        """Test that a field cannot be both filled and requested."""
        with pytest.raises(ValueError, match="already filled"):
            PendingAction(
                intent=IntentTag.CREATE_BUDGET,
                params={"name": "Food"},
                missing_fields=["name"],
            )

    def test_redact_params_masks_password(self):
        """Test that secret values never reach logs."""
        redacted = redact_params({"platform": "GitHub", "password": "hunter2"})
        assert redacted == {"platform": "GitHub", "password": "***"}


class TestRecordModels:
    """Tests for store input models."""

    def test_fields_strip_whitespace(self):
        """Test that text fields are stripped."""
        note = NoteFields(title="  Ideas  ", content=" buy milk ")
        assert note.title == "Ideas"
        assert note.content == "buy milk"

    def test_transaction_rejects_zero_amount(self):
        """Test that amounts must be positive."""
        with pytest.raises(ValueError):
            TransactionFields(amount=Decimal("0"), description="x", transaction_date=date(2026, 1, 1))

    def test_account_allows_zero_balance(self):
        """Test that a new account may start empty."""
        account = FinancialAccountFields(name="Wallet", balance=Decimal("0"), icon="FaWallet")
        assert account.balance == Decimal("0")

    def test_account_rejects_negative_balance(self):
        """Test that opening balances cannot be negative."""
        with pytest.raises(ValueError):
            FinancialAccountFields(name="Wallet", balance=Decimal("-1"), icon="FaWallet")

    def test_credential_password_hidden_from_repr(self):
        """Test that the password is not part of the repr."""
        credential = CredentialFields(
            platform="GitHub", title="Work GitHub", email="me@example.com", password="hunter2"
        )
        assert "hunter2" not in repr(credential)

    def test_goal_progress_percent(self):
        """Test rounded progress towards a goal."""
        goal = Goal(id="g1", name="Car", target_amount=Decimal("3000"), current_amount=Decimal("1000"))
        assert goal.progress_percent == 33


class TestRetrievalModels:
    """Tests for temporal intents and search results."""

    def test_none_intent_has_no_dates(self):
        """Test that a NONE intent carries no window."""
        intent = TemporalIntent(original_query="q", cleaned_query="q")
        assert intent.type == TemporalType.NONE
        assert not intent.has_range

    def test_dates_required_for_typed_intent(self):
        """Test that a typed intent must carry both dates."""
        with pytest.raises(ValueError):
            TemporalIntent(type=TemporalType.TODAY, original_query="q", cleaned_query="q")

    def test_start_after_end_rejected(self):
        """Test that the window cannot run backwards."""
        with pytest.raises(ValueError):
            TemporalIntent(
                type=TemporalType.TODAY,
                start_date=datetime(2026, 10, 19),
                end_date=datetime(2026, 10, 18),
                original_query="q",
                cleaned_query="q",
            )

    def test_effective_date_prefers_entry_date(self):
        """Test which date a document is filed under."""
        meta = DocumentMetadata(
            type=DocumentType.TASK, due_date=date(2026, 10, 20), entry_date=date(2026, 10, 1)
        )
        assert meta.effective_date == date(2026, 10, 1)
        assert DocumentMetadata(type=DocumentType.NOTE).effective_date is None

    def test_similarity_bounds(self):
        """Test that similarity stays within [-1, 1]."""
        with pytest.raises(ValueError):
            RetrievedDocument(
                content="x", metadata=DocumentMetadata(type=DocumentType.NOTE), similarity=1.5
            )


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TURN_RECEIVED,
            description="Turn received",
        )
        assert event.event_type == AuditEventType.TURN_RECEIVED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.FUNDS_TRANSFERRED,
            description="Funds moved",
            details={"amount": "200"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "funds_transferred"
        assert log_dict["details"]["amount"] == "200"

    def test_intent_classified_redacts_params(self):
        """Test that classification events never carry a password."""
        event = AuditEventBuilder.intent_classified(
            "s1", "create_account", {"password": "hunter2"}, uuid4()
        )
        assert event.details["params"]["password"] == "***"

    def test_turn_received_omits_text(self):
        """Test that the raw message is not part of the event."""
        correlation_id = uuid4()
        event = AuditEventBuilder.turn_received("s1", 3, correlation_id)
        assert event.correlation_id == correlation_id
        assert event.details == {"sequence": 3}
        assert event.is_user_action is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
