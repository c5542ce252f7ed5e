"""
Shared fixtures for Integral Assistant tests.

No real API calls in tests: the model, embedder and classifier are
scripted fakes, and the store is the in-memory reference store.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import pytest

from integral_assistant.audit import AuditLogger
from integral_assistant.config import AssistantSettings, SearchSettings
from integral_assistant.intents import DialogueManager, IntentExecutor
from integral_assistant.models.conversation import ClassifiedIntent, IntentTag
from integral_assistant.models.records import (
    AccountType,
    FinancialAccountFields,
    GoalFields,
    TransactionFields,
)
from integral_assistant.retrieval import KnowledgeIndexer
from integral_assistant.services.llm import (
    EmbedderInterface,
    IntentClassifierInterface,
    LLMError,
    TextGeneratorInterface,
)
from integral_assistant.services.search import InMemorySearchIndex
from integral_assistant.services.storage import (
    InMemoryAuditStorage,
    InMemoryDomainStore,
    StorageError,
)


# A Sunday
TODAY = date(2026, 10, 18)
NOW = datetime(2026, 10, 18, 14, 30)


# =============================================================================
# FAKES
# =============================================================================

class FakeGenerator(TextGeneratorInterface):
    """
    Replays scripted replies in order.

    A reply given as a list is streamed chunk by chunk. fail_after makes
    the stream raise after that many chunks.
    """

    def __init__(
        self,
        replies: Optional[list[Any]] = None,
        default: str = "",
        fail_after: Optional[int] = None,
    ):
        self.replies = list(replies or [])
        self.default = default
        self.fail_after = fail_after
        self.prompts: list[str] = []

    async def generate(self, prompt: str):
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        chunks = reply if isinstance(reply, list) else [reply]
        for index, chunk in enumerate(chunks):
            if self.fail_after is not None and index >= self.fail_after:
                raise LLMError("stream interrupted")
            yield chunk


VOCABULARY = ["groceries", "meeting", "dentist", "project", "vacation", "budget"]


class FakeEmbedder(EmbedderInterface):
    """One dimension per vocabulary word present in the text."""

    def __init__(self, fail: bool = False, empty: bool = False):
        self.fail = fail
        self.empty = empty
        self.calls: list[tuple[str, bool]] = []

    async def embed(self, text: str, document: bool = False) -> Optional[list[float]]:
        self.calls.append((text, document))
        if self.fail:
            raise LLMError("embedding service unavailable")
        if self.empty:
            return None
        lower = text.lower()
        return [1.0 if word in lower else 0.0 for word in VOCABULARY]


class FakeClassifier(IntentClassifierInterface):
    """Looks replies up by exact text; anything else is general chat."""

    def __init__(self, mapping: Optional[dict[str, tuple[IntentTag, dict]]] = None, fail: bool = False):
        self.mapping = mapping or {}
        self.fail = fail
        self.calls: list[str] = []

    async def classify(self, text: str) -> ClassifiedIntent:
        self.calls.append(text)
        if self.fail:
            raise LLMError("quota exceeded")
        intent, params = self.mapping.get(text, (IntentTag.GENERAL_CHAT, {}))
        return ClassifiedIntent(intent=intent, params=dict(params), original_query=text)


class FailingTransactionStore(InMemoryDomainStore):
    """Store whose transaction records cannot be written."""

    def __init__(self):
        super().__init__()
        self.create_calls = 0

    async def create_transaction(self, fields: TransactionFields) -> str:
        self.create_calls += 1
        raise StorageError("transactions table unavailable")


class RecordingStore(InMemoryDomainStore):
    """Store that counts every create call."""

    def __init__(self):
        super().__init__()
        self.calls: list[str] = []

    async def create_credential(self, fields):
        self.calls.append("create_credential")
        return await super().create_credential(fields)

    async def find_or_create_folder(self, name, kind, color=None):
        self.calls.append("find_or_create_folder")
        return await super().find_or_create_folder(name, kind, color)


# =============================================================================
# HELPERS
# =============================================================================

async def add_account(store: InMemoryDomainStore, name: str, balance: str, account_type=AccountType.BANK):
    return await store.create_financial_account(
        FinancialAccountFields(name=name, type=account_type, balance=Decimal(balance), icon="FaUniversity")
    )


async def add_goal(store: InMemoryDomainStore, name: str, target: str, current: str = "0"):
    return await store.create_goal(
        GoalFields(
            name=name,
            target_amount=Decimal(target),
            current_amount=Decimal(current),
            target_date=date(2027, 10, 18),
        )
    )


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def assistant_settings() -> AssistantSettings:
    return AssistantSettings()


@pytest.fixture
def search_settings() -> SearchSettings:
    return SearchSettings()


@pytest.fixture
def store() -> InMemoryDomainStore:
    return InMemoryDomainStore()


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def search_index() -> InMemorySearchIndex:
    return InMemorySearchIndex()


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def indexer(embedder, search_index, audit_logger) -> KnowledgeIndexer:
    return KnowledgeIndexer(embedder, search_index, audit_logger)


@pytest.fixture
def executor(store, assistant_settings, indexer, audit_logger) -> IntentExecutor:
    return IntentExecutor(
        store,
        settings=assistant_settings,
        indexer=indexer,
        audit_logger=audit_logger,
        clock=lambda: TODAY,
    )


@pytest.fixture
def dialogue(executor, assistant_settings, audit_logger) -> DialogueManager:
    return DialogueManager(executor, assistant_settings, audit_logger)
