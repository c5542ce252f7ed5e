"""
Storage Services Package

Provides abstract interfaces and an in-memory implementation for data storage.
The app shell supplies its own DomainStoreInterface for the real data store.
"""

from integral_assistant.services.storage.interface import (
    AuditStorageInterface,
    ConcurrentModificationError,
    DomainStoreInterface,
    NotFoundError,
    StorageError,
)
from integral_assistant.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryDomainStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "DomainStoreInterface",
    # Exceptions
    "ConcurrentModificationError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryDomainStore",
]
