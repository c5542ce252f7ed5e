"""
Tests for slot filling.
"""

import asyncio

from integral_assistant.intents import ABORT_MESSAGE, DialogueManager, IntentExecutor
from integral_assistant.models.audit import AuditEventType
from integral_assistant.models.conversation import (
    IntentTag,
    OutcomeStatus,
    PendingAction,
    TurnRole,
)

from conftest import TODAY, RecordingStore, add_account


def start(executor, intent, params=None) -> PendingAction:
    outcome = asyncio.run(executor.execute(intent, params or {}))
    assert outcome.status == OutcomeStatus.INCOMPLETE
    return PendingAction(intent=outcome.intent, params=outcome.params, missing_fields=outcome.missing_fields)


def reply(dialogue, pending, text):
    return asyncio.run(dialogue.handle_turn(text, pending, session_id="s1"))


class TestSlotFilling:
    """Tests for consuming replies one field at a time."""

    def test_three_fields_take_three_turns(self, executor, dialogue, store):
        """Test that each reply fills exactly the first missing field."""
        pending = start(executor, IntentTag.CREATE_BUDGET)
        assert pending.missing_fields == ["name", "amount", "period"]

        first = reply(dialogue, pending, "Groceries")
        assert first.message == "What's the budget amount? (just the number)"
        assert first.pending_action.missing_fields == ["amount", "period"]

        second = reply(dialogue, first.pending_action, "400")
        assert second.message == "What's the time period? (monthly, weekly, yearly)"

        third = reply(dialogue, second.pending_action, "monthly")
        assert third.pending_action is None
        assert third.role == TurnRole.CONFIRMATION
        assert third.message == "Budget created: Groceries ($400 monthly)"
        assert len(asyncio.run(store.list_budgets())) == 1

    def test_pending_action_not_mutated(self, executor, dialogue):
        """Test that the caller's pending action is left as it was."""
        pending = start(executor, IntentTag.CREATE_BUDGET)
        reply(dialogue, pending, "Groceries")
        assert pending.missing_fields == ["name", "amount", "period"]
        assert "name" not in pending.params

    def test_unusable_reply_asked_again(self, executor, dialogue, store):
        """Test that a bad amount keeps the action open on the same field."""
        pending = start(executor, IntentTag.CREATE_TRANSACTION, {"description": "Coffee"})
        retry = reply(dialogue, pending, "a lot")
        assert retry.pending_action is not None
        assert retry.pending_action.missing_fields == ["amount"]
        assert retry.message.startswith("Sorry, that doesn't look like a valid amount.")
        assert retry.outcome.status == OutcomeStatus.INCOMPLETE

        done = reply(dialogue, retry.pending_action, "3.20")
        assert done.pending_action is None
        assert done.message.startswith("Expense tracked: Coffee ($3.20)")

    def test_domain_failure_clears_pending(self, executor, dialogue, store):
        """Test that a failed transfer ends the action with a message."""
        asyncio.run(add_account(store, "Checking", "500"))
        pending = start(executor, IntentTag.TRANSFER_FUNDS, {"amount": "50", "from_account": "checking"})
        result = reply(dialogue, pending, "xyz")
        assert result.pending_action is None
        assert result.role == TurnRole.ASSISTANT
        assert result.outcome.status == OutcomeStatus.FAILED
        assert result.message == 'Could not find account "xyz". Please check the account name.'

    def test_slot_filled_audited_without_value(self, executor, dialogue, audit_storage):
        """Test that slot events carry the field name only."""
        pending = start(executor, IntentTag.CREATE_ACCOUNT)
        reply(dialogue, pending, "GitHub")
        events = asyncio.run(audit_storage.get_recent_events())
        slot_events = [e for e in events if e.event_type == AuditEventType.SLOT_FILLED]
        assert slot_events[0].details == {
            "field": "platform",
            "remaining": ["title", "email", "password"],
        }


class TestCredentialFlow:
    """Tests for collecting stored credentials."""

    def test_no_store_call_until_all_fields(self, assistant_settings):
        """Test that four replies are needed before anything is written."""
        store = RecordingStore()
        executor = IntentExecutor(store, settings=assistant_settings, clock=lambda: TODAY)
        dialogue = DialogueManager(executor, assistant_settings)

        pending = start(executor, IntentTag.CREATE_ACCOUNT)
        for answer in ("GitHub", "Work GitHub", "me@example.com"):
            result = reply(dialogue, pending, answer)
            pending = result.pending_action
            assert store.calls == []
        assert pending.missing_fields == ["password"]

        result = reply(dialogue, pending, "hunter2")
        assert result.pending_action is None
        assert "create_credential" in store.calls
        assert result.message == 'Account "Work GitHub" saved securely in Integral Assistant folder!'

    def test_abort_phrase_accepted_as_password(self, dialogue, store):
        """Test that "stop" is stored when it is the password."""
        pending = PendingAction(
            intent=IntentTag.CREATE_ACCOUNT,
            params={"platform": "GitHub", "title": "Work GitHub", "email": "me@example.com"},
            missing_fields=["password"],
        )
        assert dialogue.expects_secret(pending)
        result = reply(dialogue, pending, "stop")
        assert result.message != ABORT_MESSAGE
        assert result.pending_action is None
        credentials = list(store.tables["credentials"].values())
        assert [c.password for c in credentials] == ["stop"]

    def test_abort_still_works_before_password(self, executor, dialogue):
        """Test that cancel works while a non-secret field is asked."""
        pending = start(executor, IntentTag.CREATE_ACCOUNT)
        assert not dialogue.expects_secret(pending)
        assert reply(dialogue, pending, "cancel").message == ABORT_MESSAGE


class TestContinuation:
    """Tests for open-ended notes and journal entries."""

    def test_note_appends_until_done(self, executor, dialogue, store):
        """Test that replies are appended with a blank line."""
        pending = start(executor, IntentTag.CREATE_NOTE)

        first = reply(dialogue, pending, "Shopping list")
        assert first.message == 'Added! Want to add more? (say "done" when finished)'
        assert first.pending_action.is_complete

        second = reply(dialogue, first.pending_action, "milk and eggs")
        assert second.pending_action.params["content"] == "Shopping list\n\nmilk and eggs"

        done = reply(dialogue, second.pending_action, "Done")
        assert done.pending_action is None
        assert done.message == 'Note saved: "Shopping list"'
        notes = list(store.tables["notes"].values())
        assert notes[0].content == "Shopping list\n\nmilk and eggs"

    def test_journal_closing_phrase(self, executor, dialogue, store):
        """Test that "that's all" saves the entry."""
        pending = PendingAction(intent=IntentTag.CREATE_JOURNAL, params={"content": "Long day"})
        more = reply(dialogue, pending, "but a good one")
        assert more.message == 'Added! Anything else to add? (say "done" when finished)'

        done = reply(dialogue, more.pending_action, "  that's all ")
        assert done.message == 'Journal entry created: "Long day"'
        entry = list(store.tables["journal_entries"].values())[0]
        assert entry.content == "Long day\n\nbut a good one"


class TestAbortAndSwitch:
    """Tests for leaving a pending action."""

    def test_abort_phrase(self, executor, dialogue, store, audit_storage):
        """Test that cancel drops the action without writing."""
        pending = start(executor, IntentTag.CREATE_GOAL, {"name": "Boat"})
        result = reply(dialogue, pending, "Never mind")
        assert result.pending_action is None
        assert result.message == ABORT_MESSAGE
        assert asyncio.run(store.list_goals()) == []
        events = asyncio.run(audit_storage.get_recent_events())
        assert events[0].event_type == AuditEventType.PENDING_ACTION_ABORTED

    def test_context_switch_detection(self, dialogue):
        """Test that only a known @mention switches context."""
        assert dialogue.is_context_switch("@task call mom")
        assert not dialogue.is_context_switch("my email is a@b.com")
        assert not dialogue.is_context_switch("400")

    def test_abort_not_used_as_value(self, executor, dialogue):
        """Test that "stop" is not stored as a budget name."""
        pending = start(executor, IntentTag.CREATE_BUDGET)
        result = reply(dialogue, pending, "stop")
        assert result.pending_action is None
        assert result.outcome is None
