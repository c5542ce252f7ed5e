"""
In-Memory Storage Implementation

Reference implementation of the storage interfaces. Used by the tests and
by shells that have not wired a real data store yet.

Transactions keep an undo log. Each write made inside a transaction()
block registers how to reverse itself; if the block raises, the undo
steps run newest-first. The log lives in a ContextVar so writes from
other sessions running concurrently are never rolled back by mistake.
"""

import asyncio
from contextlib import asynccontextmanager
from contextvars import ContextVar
from decimal import Decimal
from typing import Any, AsyncIterator, Callable, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel

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
from integral_assistant.services.storage.interface import (
    AuditStorageInterface,
    ConcurrentModificationError,
    DomainStoreInterface,
    NotFoundError,
)


UndoStep = Callable[[], None]

_undo_log: ContextVar[Optional[list[UndoStep]]] = ContextVar(
    "integral_assistant_undo_log", default=None
)


def _new_id() -> str:
    return str(uuid4())


class InMemoryDomainStore(DomainStoreInterface):
    """
    Dict-backed domain store.

    Plain created records (tasks, notes, ...) are kept per table as
    {id: fields}. Accounts, goals, budgets, categories and folders are
    kept as their stored-record models.
    """

    def __init__(self):
        self.tables: dict[str, dict[str, BaseModel]] = {
            "tasks": {},
            "notes": {},
            "journal_entries": {},
            "transactions": {},
            "recurring_transactions": {},
            "liabilities": {},
            "credentials": {},
        }
        self._accounts: dict[str, FinancialAccount] = {}
        self._goals: dict[str, Goal] = {}
        self._budgets: dict[str, Budget] = {}
        self._categories: dict[str, Category] = {}
        self._folders: dict[str, Folder] = {}
        self._transaction_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Undo bookkeeping
    # -------------------------------------------------------------------------

    def _record_undo(self, step: UndoStep) -> None:
        log = _undo_log.get()
        if log is not None:
            log.append(step)

    def _insert(self, table: dict[str, Any], record_id: str, record: Any) -> None:
        table[record_id] = record
        self._record_undo(lambda: table.pop(record_id, None))

    def _replace(self, table: dict[str, Any], record_id: str, record: Any) -> None:
        previous = table[record_id]
        table[record_id] = record

        def undo() -> None:
            table[record_id] = previous

        self._record_undo(undo)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if _undo_log.get() is not None:
            # Nested block joins the outer transaction
            yield
            return

        async with self._transaction_lock:
            log: list[UndoStep] = []
            token = _undo_log.set(log)
            try:
                yield
            except BaseException:
                for step in reversed(log):
                    step()
                raise
            finally:
                _undo_log.reset(token)

    # -------------------------------------------------------------------------
    # Create operations
    # -------------------------------------------------------------------------

    async def _create(self, table: str, fields: BaseModel) -> str:
        record_id = _new_id()
        self._insert(self.tables[table], record_id, fields)
        return record_id

    async def create_task(self, fields: TaskFields) -> str:
        return await self._create("tasks", fields)

    async def create_note(self, fields: NoteFields) -> str:
        return await self._create("notes", fields)

    async def create_journal_entry(self, fields: JournalFields) -> str:
        return await self._create("journal_entries", fields)

    async def create_transaction(self, fields: TransactionFields) -> str:
        return await self._create("transactions", fields)

    async def create_recurring_transaction(self, fields: RecurringFields) -> str:
        return await self._create("recurring_transactions", fields)

    async def create_liability(self, fields: LiabilityFields) -> str:
        return await self._create("liabilities", fields)

    async def create_credential(self, fields: CredentialFields) -> str:
        return await self._create("credentials", fields)

    async def create_budget(self, fields: BudgetFields) -> str:
        budget = Budget(
            id=_new_id(),
            name=fields.name,
            amount=fields.amount,
            period=fields.period,
        )
        self._insert(self._budgets, budget.id, budget)
        return budget.id

    async def create_category(self, fields: CategoryFields) -> Category:
        category = Category(id=_new_id(), name=fields.name, type=fields.type)
        self._insert(self._categories, category.id, category)
        return category

    async def create_financial_account(
        self,
        fields: FinancialAccountFields,
    ) -> FinancialAccount:
        account = FinancialAccount(
            id=_new_id(),
            name=fields.name,
            type=fields.type,
            balance=fields.balance,
            icon=fields.icon,
        )
        self._insert(self._accounts, account.id, account)
        return account

    async def create_goal(self, fields: GoalFields) -> Goal:
        goal = Goal(
            id=_new_id(),
            name=fields.name,
            target_amount=fields.target_amount,
            current_amount=fields.current_amount,
            target_date=fields.target_date,
        )
        self._insert(self._goals, goal.id, goal)
        return goal

    async def find_or_create_folder(
        self,
        name: str,
        kind: FolderKind,
        color: Optional[str] = None,
    ) -> Folder:
        for folder in self._folders.values():
            if folder.kind == kind and folder.name == name:
                return folder
        folder = Folder(id=_new_id(), name=name, kind=kind, color=color)
        self._insert(self._folders, folder.id, folder)
        return folder

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    async def update_account_balance(
        self,
        account_id: str,
        new_balance: Decimal,
        expected_balance: Optional[Decimal] = None,
    ) -> FinancialAccount:
        current = await self.get_account(account_id)
        if expected_balance is not None and current.balance != expected_balance:
            raise ConcurrentModificationError(
                f"Balance of account {account_id} changed: "
                f"expected {expected_balance}, found {current.balance}"
            )
        updated = current.model_copy(update={"balance": new_balance})
        self._replace(self._accounts, account_id, updated)
        return updated

    async def update_goal_amount(
        self,
        goal_id: str,
        new_amount: Decimal,
        expected_amount: Optional[Decimal] = None,
    ) -> Goal:
        current = await self.get_goal(goal_id)
        if expected_amount is not None and current.current_amount != expected_amount:
            raise ConcurrentModificationError(
                f"Goal {goal_id} changed: "
                f"expected {expected_amount}, found {current.current_amount}"
            )
        updated = current.model_copy(update={"current_amount": new_amount})
        self._replace(self._goals, goal_id, updated)
        return updated

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    async def list_accounts(self) -> list[FinancialAccount]:
        return list(self._accounts.values())

    async def get_account(self, account_id: str) -> FinancialAccount:
        try:
            return self._accounts[account_id]
        except KeyError:
            raise NotFoundError(f"Account {account_id} not found")

    async def list_goals(self) -> list[Goal]:
        return list(self._goals.values())

    async def get_goal(self, goal_id: str) -> Goal:
        try:
            return self._goals[goal_id]
        except KeyError:
            raise NotFoundError(f"Goal {goal_id} not found")

    async def list_budgets(self) -> list[Budget]:
        return list(self._budgets.values())

    async def list_categories(self) -> list[Category]:
        return list(self._categories.values())

    async def list_folders(self) -> list[Folder]:
        return list(self._folders.values())


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
