"""Services package."""

from integral_assistant.services.llm import (
    EmbedderInterface,
    GeminiClient,
    GeminiIntentClassifier,
    IntentClassifierInterface,
    LLMError,
    TextGeneratorInterface,
)
from integral_assistant.services.notifications import (
    LoggingNotificationSink,
    NotificationSinkInterface,
    notify,
)
from integral_assistant.services.search import (
    InMemorySearchIndex,
    SearchError,
    SearchIndexInterface,
)
from integral_assistant.services.storage import (
    AuditStorageInterface,
    ConcurrentModificationError,
    DomainStoreInterface,
    InMemoryAuditStorage,
    InMemoryDomainStore,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Language model services
    "EmbedderInterface",
    "GeminiClient",
    "GeminiIntentClassifier",
    "IntentClassifierInterface",
    "LLMError",
    "TextGeneratorInterface",
    # Notifications
    "LoggingNotificationSink",
    "NotificationSinkInterface",
    "notify",
    # Search services
    "InMemorySearchIndex",
    "SearchError",
    "SearchIndexInterface",
    # Storage services
    "AuditStorageInterface",
    "ConcurrentModificationError",
    "DomainStoreInterface",
    "InMemoryAuditStorage",
    "InMemoryDomainStore",
    "NotFoundError",
    "StorageError",
]
