"""
Tests for intent classification.
"""

import asyncio
import pytest

from integral_assistant.models.conversation import IntentTag
from integral_assistant.services.llm import (
    GeminiIntentClassifier,
    LLMError,
    parse_json_reply,
    parse_mention,
    strip_mention,
)

from conftest import FakeGenerator


class TestMentions:
    """Tests for @mention shortcuts."""

    @pytest.mark.parametrize("text,expected", [
        ("@task buy milk", IntentTag.CREATE_TASK),
        ("@Tasks buy milk", IntentTag.CREATE_TASK),
        ("@budget food 400", IntentTag.CREATE_BUDGET),
        ("@goal add 500 to car", IntentTag.CONTRIBUTE_GOAL),
        ("@goal new car 5000", IntentTag.CREATE_GOAL),
        ("@finance new account with 500 balance", IntentTag.CREATE_FINANCIAL_ACCOUNT),
        ("@finance coffee 5", IntentTag.CREATE_TRANSACTION),
        ("@transfer 100 from a to b", IntentTag.TRANSFER_FUNDS),
        ("@debt car loan", IntentTag.CREATE_LIABILITY),
        ("@account netflix", IntentTag.CREATE_ACCOUNT),
    ])
    def test_parse_mention(self, text, expected):
        """Test mention prefixes."""
        assert parse_mention(text) == expected

    def test_unknown_mention(self):
        """Test that unknown mentions and plain text give nothing."""
        assert parse_mention("@someone hello") is None
        assert parse_mention("buy milk") is None

    def test_strip_mention(self):
        """Test that only the leading mention is removed."""
        assert strip_mention("  @task call @bob") == "call @bob"


class TestParseJsonReply:
    """Tests for lenient JSON extraction."""

    def test_fenced_json(self):
        """Test that code fences are ignored."""
        assert parse_json_reply('```json\n{"amount": 5}\n```') == {"amount": 5}

    def test_chatter_around_object(self):
        """Test that text around the object is ignored."""
        assert parse_json_reply('Sure! {"name": "Food"} Hope that helps') == {"name": "Food"}

    @pytest.mark.parametrize("reply", [None, "", "no json here", "{broken", "[1, 2]"])
    def test_unusable(self, reply):
        """Test replies without an object."""
        assert parse_json_reply(reply) is None


class TestGeminiIntentClassifier:
    """Tests for classification with a scripted model."""

    def test_task_mention_with_generated_description(self):
        """Test that a task without description gets one."""
        generator = FakeGenerator(['{"title": "Buy milk", "priority": "high"}', "Grab two litres."])
        result = asyncio.run(GeminiIntentClassifier(generator).classify("@task buy milk"))
        assert result.intent == IntentTag.CREATE_TASK
        assert result.params == {"title": "Buy milk", "priority": "high", "description": "Grab two litres."}
        assert '"buy milk"' in generator.prompts[0]
        assert result.original_query == "@task buy milk"

    def test_note_takes_text_verbatim(self):
        """Test that notes never go through the model."""
        generator = FakeGenerator()
        result = asyncio.run(GeminiIntentClassifier(generator).classify("@note door code is 1234"))
        assert result.params == {"content": "door code is 1234"}
        assert generator.prompts == []

    def test_credentials_never_extracted(self):
        """Test that credential text is not sent for extraction."""
        generator = FakeGenerator()
        result = asyncio.run(GeminiIntentClassifier(generator).classify("@account netflix pw hunter2"))
        assert result.intent == IntentTag.CREATE_ACCOUNT
        assert result.params == {}
        assert generator.prompts == []

    def test_model_classification_drops_nulls(self):
        """Test the two-step model path."""
        generator = FakeGenerator([
            "transfer_funds\n",
            '```json\n{"amount": 200, "from_account": "checking", "to_account": null}\n```',
        ])
        result = asyncio.run(GeminiIntentClassifier(generator).classify("move 200 out of checking"))
        assert result.intent == IntentTag.TRANSFER_FUNDS
        assert result.params == {"amount": 200, "from_account": "checking"}

    def test_unknown_intent_is_chat(self):
        """Test that an unrecognised reply becomes general chat."""
        generator = FakeGenerator(["dance"])
        result = asyncio.run(GeminiIntentClassifier(generator).classify("let's dance"))
        assert result.intent == IntentTag.GENERAL_CHAT
        assert result.params == {}

    def test_unparseable_transaction_params(self):
        """Test the fallback when extraction returns junk."""
        generator = FakeGenerator(["create_transaction", "I think it was coffee"])
        result = asyncio.run(GeminiIntentClassifier(generator).classify("coffee this morning"))
        assert result.params == {"description": "coffee this morning"}

    def test_provider_failure_propagates(self):
        """Test that a dead provider surfaces as LLMError."""
        generator = FakeGenerator([LLMError("quota exceeded")])
        with pytest.raises(LLMError):
            asyncio.run(GeminiIntentClassifier(generator).classify("hello"))
