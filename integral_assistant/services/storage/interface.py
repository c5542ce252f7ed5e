"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Plug in whatever managed data store the app shell uses
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the operations the assistant needs: one create call per record kind,
the lookups used for name resolution, and balance/goal updates.

CRITICAL: Balance and goal updates accept an expected current value.
Implementations MUST reject the write (ConcurrentModificationError) when
the stored value differs, so a stale read can never overwrite a newer one.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import AsyncContextManager, Optional
from uuid import UUID

from integral_assistant.models.audit import AuditEvent
from integral_assistant.models.records import (
    Budget,
    BudgetFields,
    Category,
    CategoryFields,
    CredentialFields,
    FinancialAccount,
    FinancialAccountFields,
    Folder,
    FolderKind,
    Goal,
    GoalFields,
    JournalFields,
    LiabilityFields,
    NoteFields,
    RecurringFields,
    TaskFields,
    TransactionFields,
)


class DomainStoreInterface(ABC):
    """
    Abstract interface for the productivity app's data store.

    Every create method returns the new record's ID (or the record itself
    for kinds the assistant later looks up by name).
    """

    # -------------------------------------------------------------------------
    # Create operations
    # -------------------------------------------------------------------------

    @abstractmethod
    async def create_task(self, fields: TaskFields) -> str:
        pass

    @abstractmethod
    async def create_note(self, fields: NoteFields) -> str:
        pass

    @abstractmethod
    async def create_journal_entry(self, fields: JournalFields) -> str:
        pass

    @abstractmethod
    async def create_transaction(self, fields: TransactionFields) -> str:
        """
        Record a ledger entry.

        Does NOT change any account balance; callers pair it with
        update_account_balance inside a transaction() block.
        """
        pass

    @abstractmethod
    async def create_recurring_transaction(self, fields: RecurringFields) -> str:
        pass

    @abstractmethod
    async def create_budget(self, fields: BudgetFields) -> str:
        pass

    @abstractmethod
    async def create_category(self, fields: CategoryFields) -> Category:
        pass

    @abstractmethod
    async def create_financial_account(
        self,
        fields: FinancialAccountFields,
    ) -> FinancialAccount:
        pass

    @abstractmethod
    async def create_goal(self, fields: GoalFields) -> Goal:
        pass

    @abstractmethod
    async def create_liability(self, fields: LiabilityFields) -> str:
        pass

    @abstractmethod
    async def create_credential(self, fields: CredentialFields) -> str:
        """
        Store a platform login.

        Implementations are responsible for encrypting the password at rest.
        """
        pass

    @abstractmethod
    async def find_or_create_folder(
        self,
        name: str,
        kind: FolderKind,
        color: Optional[str] = None,
    ) -> Folder:
        """
        Return the folder of this kind with this name, creating it if needed.
        """
        pass

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    @abstractmethod
    async def update_account_balance(
        self,
        account_id: str,
        new_balance: Decimal,
        expected_balance: Optional[Decimal] = None,
    ) -> FinancialAccount:
        """
        Set an account's balance.

        Args:
            account_id: Account to update
            new_balance: Balance after the update
            expected_balance: If given, the write only happens when the
                stored balance still equals this value

        Returns:
            The updated account

        Raises:
            NotFoundError: If the account doesn't exist
            ConcurrentModificationError: If expected_balance is stale
        """
        pass

    @abstractmethod
    async def update_goal_amount(
        self,
        goal_id: str,
        new_amount: Decimal,
        expected_amount: Optional[Decimal] = None,
    ) -> Goal:
        """
        Set a goal's current amount (same contract as update_account_balance).
        """
        pass

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @abstractmethod
    async def list_accounts(self) -> list[FinancialAccount]:
        """All financial accounts, in creation order."""
        pass

    @abstractmethod
    async def get_account(self, account_id: str) -> FinancialAccount:
        """
        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass

    @abstractmethod
    async def list_goals(self) -> list[Goal]:
        pass

    @abstractmethod
    async def get_goal(self, goal_id: str) -> Goal:
        pass

    @abstractmethod
    async def list_budgets(self) -> list[Budget]:
        pass

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        pass

    # -------------------------------------------------------------------------
    # Atomicity
    # -------------------------------------------------------------------------

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """
        Group writes into one all-or-nothing unit.

        Usage:
            async with store.transaction():
                await store.update_account_balance(...)
                await store.create_transaction(...)

        If the block raises, every write made inside it is undone and the
        exception propagates.
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one conversation turn).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConcurrentModificationError(StorageError):
    """A compare-and-swap write found a different value than expected."""
    pass
