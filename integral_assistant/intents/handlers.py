"""
Intent Handlers

One handler per mutating IntentTag. Each handler declares the fields it
needs (in the order the user will be asked for them) and how to parse
each one, then performs its store calls and formats a confirmation.

DESIGN DECISION: The handler table is closed and checked at import time.
Adding an IntentTag without a handler is an ImportError, not a silent
fall-through to "something went wrong" at runtime.

CRITICAL: Handlers that move money (transfer_funds, contribute_goal)
do every balance write and the derived record inside ONE store
transaction, re-read balances inside it, and write with compare-and-swap.
Either every write lands or none does.
"""

from abc import ABC, abstractmethod
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable, ClassVar, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from integral_assistant.audit import AuditLogger
from integral_assistant.config import AssistantSettings
from integral_assistant.intents.errors import (
    InsufficientFundsError,
    ParamsValidationError,
    SameAccountError,
)
from integral_assistant.intents.parsing import (
    account_icon,
    add_months,
    format_money,
    is_blank,
    normalize_account_type,
    parse_choice,
    parse_date,
    parse_due_date,
    parse_non_negative_amount,
    parse_positive_amount,
    title_from_content,
)
from integral_assistant.intents.resolver import (
    ACCOUNT_STOPWORDS,
    EntityResolver,
    RankedContainmentStrategy,
)
from integral_assistant.models.conversation import IntentTag
from integral_assistant.models.records import (
    BudgetFields,
    BudgetPeriod,
    CategoryFields,
    CategoryType,
    CredentialFields,
    FinancialAccount,
    FinancialAccountFields,
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
from integral_assistant.models.retrieval import DocumentType
from integral_assistant.retrieval.indexer import KnowledgeIndexer
from integral_assistant.services.storage import DomainStoreInterface


# =============================================================================
# CONTEXT AND FIELD DECLARATIONS
# =============================================================================

class ExecutionContext:
    """Everything a handler may use for one execution."""

    def __init__(
        self,
        store: DomainStoreInterface,
        settings: AssistantSettings,
        today: date,
        account_resolver: EntityResolver[FinancialAccount],
        goal_resolver: EntityResolver[Goal],
        indexer: Optional[KnowledgeIndexer] = None,
        audit_logger: Optional[AuditLogger] = None,
        session_id: str = "",
        correlation_id: Optional[UUID] = None,
    ):
        self.store = store
        self.settings = settings
        self.today = today
        self.account_resolver = account_resolver
        self.goal_resolver = goal_resolver
        self.indexer = indexer
        self.audit_logger = audit_logger
        self.session_id = session_id
        self.correlation_id = correlation_id

    def money(self, amount: Decimal) -> str:
        return format_money(amount, self.settings.currency_symbol)

    @property
    def tags(self) -> list[str]:
        return [self.settings.record_tag]


Parser = Callable[[Any, ExecutionContext], Any]


def text_value(value: Any, ctx: ExecutionContext) -> Optional[str]:
    return None if is_blank(value) else str(value).strip()


def positive_amount(value: Any, ctx: ExecutionContext) -> Optional[Decimal]:
    return parse_positive_amount(value)


def non_negative_amount(value: Any, ctx: ExecutionContext) -> Optional[Decimal]:
    return parse_non_negative_amount(value)


_LEDGER_ALIASES = {
    "expenses": TransactionType.EXPENSE,
    "spending": TransactionType.EXPENSE,
    "spent": TransactionType.EXPENSE,
    "earning": TransactionType.INCOME,
    "earnings": TransactionType.INCOME,
    "salary": TransactionType.INCOME,
}

_FREQUENCY_ALIASES = {
    "day": RecurrenceFrequency.DAILY,
    "week": RecurrenceFrequency.WEEKLY,
    "month": RecurrenceFrequency.MONTHLY,
    "year": RecurrenceFrequency.YEARLY,
    "annual": RecurrenceFrequency.YEARLY,
    "annually": RecurrenceFrequency.YEARLY,
}

_PERIOD_ALIASES = {
    "week": BudgetPeriod.WEEKLY,
    "month": BudgetPeriod.MONTHLY,
    "quarter": BudgetPeriod.QUARTERLY,
    "year": BudgetPeriod.YEARLY,
    "annual": BudgetPeriod.YEARLY,
    "annually": BudgetPeriod.YEARLY,
}

_CATEGORY_ALIASES = {
    "expenses": CategoryType.EXPENSE,
    "spending": CategoryType.EXPENSE,
    "earning": CategoryType.INCOME,
    "earnings": CategoryType.INCOME,
}


def ledger_type(value: Any, ctx: ExecutionContext) -> Optional[TransactionType]:
    """Expense or income; transfers are not created from chat text."""
    choice = parse_choice(value, TransactionType, _LEDGER_ALIASES)
    return None if choice == TransactionType.TRANSFER else choice


class FieldSpec(BaseModel):
    """One parameter a handler reads."""

    name: str
    parser: Parser
    required: bool = True
    default: Any = None
    description: str = Field(default="", description="What the field holds")

    def parse(self, params: dict[str, Any], ctx: ExecutionContext) -> Any:
        raw = params.get(self.name)
        if is_blank(raw):
            return None
        return self.parser(raw, ctx)


class HandlerResult(BaseModel):
    message: str
    record_ids: list[str] = Field(default_factory=list)


# =============================================================================
# BASE HANDLER
# =============================================================================

class IntentHandler(ABC):
    """
    Validates parameters for one intent and carries it out.
    """

    intent: ClassVar[IntentTag]
    fields: ClassVar[list[FieldSpec]] = []
    # True when run() writes inside a store transaction
    atomic: ClassVar[bool] = False

    @property
    def required_fields(self) -> list[str]:
        return [field.name for field in self.fields if field.required]

    def validate(self, params: dict[str, Any], ctx: ExecutionContext) -> dict[str, Any]:
        """
        Parse every declared field.

        Returns:
            Parsed values; optional fields that are absent or unusable
            get their default

        Raises:
            ParamsValidationError: Listing required fields that are
                missing or unusable, in declaration order
        """
        values: dict[str, Any] = {}
        missing: list[str] = []
        invalid: list[str] = []
        for field in self.fields:
            value = field.parse(params, ctx)
            if value is None:
                if field.required:
                    missing.append(field.name)
                    if not is_blank(params.get(field.name)):
                        invalid.append(field.name)
                    continue
                value = field.default
            values[field.name] = value
        if missing:
            raise ParamsValidationError(missing, invalid)
        return values

    @abstractmethod
    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        pass


async def _index(
    ctx: ExecutionContext,
    document_type: DocumentType,
    record_id: str,
    content: str,
    title: Optional[str] = None,
    due_date: Optional[date] = None,
    entry_date: Optional[date] = None,
) -> None:
    if ctx.indexer is None:
        return
    await ctx.indexer.add(
        document_type,
        record_id,
        content,
        title=title,
        due_date=due_date,
        entry_date=entry_date,
        correlation_id=ctx.correlation_id,
    )


# =============================================================================
# PRODUCTIVITY
# =============================================================================

class CreateTaskHandler(IntentHandler):
    intent = IntentTag.CREATE_TASK
    fields = [
        FieldSpec(name="title", parser=text_value),
        FieldSpec(
            name="due_date",
            parser=lambda v, ctx: parse_due_date(v, ctx.today, ctx.settings.default_task_due_days),
        ),
        FieldSpec(name="description", parser=text_value, required=False, default=""),
        FieldSpec(
            name="priority",
            parser=lambda v, ctx: parse_choice(v, TaskPriority),
            required=False,
            default=TaskPriority.MEDIUM,
        ),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        fields = TaskFields(
            title=values["title"],
            description=values["description"],
            priority=values["priority"],
            due_date=values["due_date"],
            project=ctx.settings.folder_name,
            tags=ctx.tags,
        )
        task_id = await ctx.store.create_task(fields)
        await _index(
            ctx,
            DocumentType.TASK,
            task_id,
            fields.description or fields.title,
            title=fields.title,
            due_date=fields.due_date,
        )
        return HandlerResult(
            message=(
                f'Task created: "{fields.title}" due {fields.due_date.isoformat()} '
                f"in {ctx.settings.folder_name} project!"
            ),
            record_ids=[task_id],
        )


class CreateNoteHandler(IntentHandler):
    intent = IntentTag.CREATE_NOTE
    fields = [FieldSpec(name="content", parser=text_value)]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        folder = await ctx.store.find_or_create_folder(
            ctx.settings.folder_name, FolderKind.NOTE, ctx.settings.folder_color
        )
        content = values["content"]
        title = title_from_content(content, "Quick Note")
        note_id = await ctx.store.create_note(
            NoteFields(title=title, content=content, folder_id=folder.id, tags=ctx.tags)
        )
        await _index(ctx, DocumentType.NOTE, note_id, content, title=title)
        return HandlerResult(message=f'Note saved: "{title}"', record_ids=[note_id])


class CreateJournalHandler(IntentHandler):
    intent = IntentTag.CREATE_JOURNAL
    fields = [FieldSpec(name="content", parser=text_value)]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        content = values["content"]
        title = title_from_content(content, "Journal Entry")
        entry_id = await ctx.store.create_journal_entry(
            JournalFields(
                title=title,
                content=content,
                entry_date=ctx.today,
                mood=3,
                tags=ctx.tags,
            )
        )
        await _index(ctx, DocumentType.JOURNAL, entry_id, content, title=title, entry_date=ctx.today)
        return HandlerResult(message=f'Journal entry created: "{title}"', record_ids=[entry_id])


class CreateCredentialHandler(IntentHandler):
    """Stored login for an external platform (IntentTag.CREATE_ACCOUNT)."""

    intent = IntentTag.CREATE_ACCOUNT
    fields = [
        FieldSpec(name="platform", parser=text_value),
        FieldSpec(name="title", parser=text_value),
        FieldSpec(name="email", parser=text_value),
        FieldSpec(name="password", parser=lambda v, ctx: None if is_blank(v) else str(v)),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        folder = await ctx.store.find_or_create_folder(
            ctx.settings.folder_name, FolderKind.ACCOUNT, ctx.settings.folder_color
        )
        credential_id = await ctx.store.create_credential(
            CredentialFields(
                platform=values["platform"],
                title=values["title"],
                email=values["email"],
                password=values["password"],
                folder_id=folder.id,
            )
        )
        return HandlerResult(
            message=(
                f'Account "{values["title"]}" saved securely in '
                f"{ctx.settings.folder_name} folder!"
            ),
            record_ids=[credential_id],
        )


# =============================================================================
# LEDGER
# =============================================================================

class CreateTransactionHandler(IntentHandler):
    intent = IntentTag.CREATE_TRANSACTION
    fields = [
        FieldSpec(name="amount", parser=positive_amount),
        FieldSpec(name="description", parser=text_value),
        FieldSpec(name="category", parser=text_value, required=False, default="Other"),
        FieldSpec(name="type", parser=ledger_type, required=False, default=TransactionType.EXPENSE),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        budgets = await ctx.store.list_budgets()
        budget_id = budgets[0].id if budgets else None
        transaction_type: TransactionType = values["type"]

        transaction_id = await ctx.store.create_transaction(
            TransactionFields(
                amount=values["amount"],
                description=values["description"],
                category=values["category"],
                type=transaction_type,
                transaction_date=ctx.today,
                budget_id=budget_id,
                tags=ctx.tags,
            )
        )
        label = "Expense" if transaction_type == TransactionType.EXPENSE else "Income"
        message = f"{label} tracked: {values['description']} ({ctx.money(values['amount'])})"
        if budget_id is None:
            message += " (Note: Created without a budget - please assign one later)"
        return HandlerResult(message=message, record_ids=[transaction_id])


class CreateRecurringHandler(IntentHandler):
    intent = IntentTag.CREATE_RECURRING
    fields = [
        FieldSpec(name="description", parser=text_value),
        FieldSpec(name="amount", parser=positive_amount),
        FieldSpec(
            name="frequency",
            parser=lambda v, ctx: parse_choice(v, RecurrenceFrequency, _FREQUENCY_ALIASES),
        ),
        FieldSpec(name="type", parser=ledger_type),
        FieldSpec(name="category", parser=text_value, required=False, default="Other"),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        fields = RecurringFields(
            description=values["description"],
            amount=values["amount"],
            frequency=values["frequency"],
            type=values["type"],
            category=values["category"],
            start_date=ctx.today,
            next_date=ctx.today,
        )
        recurring_id = await ctx.store.create_recurring_transaction(fields)
        return HandlerResult(
            message=(
                f"Recurring {fields.type.value}: {fields.description} "
                f"({ctx.money(fields.amount)} {fields.frequency.value})"
            ),
            record_ids=[recurring_id],
        )


class CreateBudgetHandler(IntentHandler):
    intent = IntentTag.CREATE_BUDGET
    fields = [
        FieldSpec(name="name", parser=text_value),
        FieldSpec(name="amount", parser=positive_amount),
        FieldSpec(name="period", parser=lambda v, ctx: parse_choice(v, BudgetPeriod, _PERIOD_ALIASES)),
    ]

    @staticmethod
    def period_end(start: date, period: BudgetPeriod) -> date:
        if period == BudgetPeriod.WEEKLY:
            return start + timedelta(days=7)
        if period == BudgetPeriod.QUARTERLY:
            return add_months(start, 3)
        if period == BudgetPeriod.YEARLY:
            return add_months(start, 12)
        return add_months(start, 1)

    async def _assistant_category_id(self, ctx: ExecutionContext) -> str:
        name = ctx.settings.folder_name
        for category in await ctx.store.list_categories():
            if category.name == name and category.type == CategoryType.EXPENSE:
                return category.id
        category = await ctx.store.create_category(
            CategoryFields(name=name, type=CategoryType.EXPENSE, color=ctx.settings.folder_color)
        )
        return category.id

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        period: BudgetPeriod = values["period"]
        category_id = await self._assistant_category_id(ctx)
        budget_id = await ctx.store.create_budget(
            BudgetFields(
                name=values["name"],
                amount=values["amount"],
                period=period,
                start_date=ctx.today,
                end_date=self.period_end(ctx.today, period),
                category_id=category_id,
            )
        )
        return HandlerResult(
            message=f"Budget created: {values['name']} ({ctx.money(values['amount'])} {period.value})",
            record_ids=[budget_id],
        )


class CreateCategoryHandler(IntentHandler):
    intent = IntentTag.CREATE_CATEGORY
    fields = [
        FieldSpec(name="name", parser=text_value),
        FieldSpec(name="type", parser=lambda v, ctx: parse_choice(v, CategoryType, _CATEGORY_ALIASES)),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        category = await ctx.store.create_category(
            CategoryFields(name=values["name"], type=values["type"], color=ctx.settings.folder_color)
        )
        return HandlerResult(
            message=f"Category created: {category.name} ({category.type.value})",
            record_ids=[category.id],
        )


# =============================================================================
# ACCOUNTS, GOALS AND LIABILITIES
# =============================================================================

class CreateFinancialAccountHandler(IntentHandler):
    intent = IntentTag.CREATE_FINANCIAL_ACCOUNT
    fields = [
        FieldSpec(name="name", parser=text_value),
        FieldSpec(name="type", parser=lambda v, ctx: normalize_account_type(v)),
        FieldSpec(name="balance", parser=non_negative_amount),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        account_type = values["type"]
        account = await ctx.store.create_financial_account(
            FinancialAccountFields(
                name=values["name"],
                type=account_type,
                balance=values["balance"],
                icon=account_icon(account_type),
            )
        )
        label = account_type.value.replace("_", " ").title()
        return HandlerResult(
            message=f'{label} account "{account.name}" created with {ctx.money(account.balance)} balance.',
            record_ids=[account.id],
        )


class CreateGoalHandler(IntentHandler):
    intent = IntentTag.CREATE_GOAL
    fields = [
        FieldSpec(name="name", parser=text_value),
        FieldSpec(name="target_amount", parser=positive_amount),
        FieldSpec(name="current_amount", parser=non_negative_amount, required=False, default=Decimal("0")),
        FieldSpec(name="target_date", parser=lambda v, ctx: parse_date(v, ctx.today), required=False),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        target_date = values["target_date"] or (
            ctx.today + timedelta(days=ctx.settings.default_goal_horizon_days)
        )
        goal = await ctx.store.create_goal(
            GoalFields(
                name=values["name"],
                target_amount=values["target_amount"],
                current_amount=values["current_amount"],
                target_date=target_date,
            )
        )
        return HandlerResult(
            message=f'Financial goal "{goal.name}" created with target of {ctx.money(goal.target_amount)}.',
            record_ids=[goal.id],
        )


class ContributeGoalHandler(IntentHandler):
    intent = IntentTag.CONTRIBUTE_GOAL
    atomic = True
    fields = [
        FieldSpec(name="goal_name", parser=text_value),
        FieldSpec(name="amount", parser=positive_amount),
        FieldSpec(name="from_account", parser=text_value, required=False),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        amount: Decimal = values["amount"]
        goal = ctx.goal_resolver.resolve(values["goal_name"], await ctx.store.list_goals())

        account: Optional[FinancialAccount] = None
        if values["from_account"]:
            account = ctx.account_resolver.resolve(
                values["from_account"], await ctx.store.list_accounts()
            )
            if account.balance < amount:
                raise InsufficientFundsError(account.name, account.balance, amount)

        async with ctx.store.transaction():
            goal = await ctx.store.get_goal(goal.id)
            if account is not None:
                account = await ctx.store.get_account(account.id)
                if account.balance < amount:
                    raise InsufficientFundsError(account.name, account.balance, amount)
                await ctx.store.update_account_balance(
                    account.id, account.balance - amount, expected_balance=account.balance
                )
            updated_goal = await ctx.store.update_goal_amount(
                goal.id, goal.current_amount + amount, expected_amount=goal.current_amount
            )

        if ctx.audit_logger:
            await ctx.audit_logger.log_goal_contributed(
                ctx.session_id,
                goal.name,
                str(amount),
                account.name if account else None,
                ctx.correlation_id,
            )

        money = ctx.money
        progress = (
            f"{money(goal.current_amount)} → {money(updated_goal.current_amount)} "
            f"({updated_goal.progress_percent}% of {money(goal.target_amount)})"
        )
        record_ids = [goal.id]
        if account is not None:
            record_ids.append(account.id)
            message = (
                f'Added {money(amount)} to "{goal.name}" from {account.name}.\n\n'
                f"Goal Progress: {progress}\n\n"
                f"{account.name}: {money(account.balance)} → {money(account.balance - amount)}"
            )
        else:
            message = f'Added {money(amount)} to "{goal.name}".\n\nProgress: {progress}'
        return HandlerResult(message=message, record_ids=record_ids)


class CreateLiabilityHandler(IntentHandler):
    intent = IntentTag.CREATE_LIABILITY
    fields = [
        FieldSpec(name="name", parser=text_value),
        FieldSpec(name="amount", parser=positive_amount),
        FieldSpec(
            name="type",
            parser=lambda v, ctx: parse_choice(v, LiabilityType),
            required=False,
            default=LiabilityType.OTHER,
        ),
        FieldSpec(name="interest_rate", parser=non_negative_amount, required=False, default=Decimal("0")),
        FieldSpec(name="minimum_payment", parser=non_negative_amount, required=False, default=Decimal("0")),
        FieldSpec(name="due_date", parser=lambda v, ctx: parse_date(v, ctx.today), required=False),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        due_date = values["due_date"] or (
            ctx.today + timedelta(days=ctx.settings.default_liability_due_days)
        )
        fields = LiabilityFields(
            name=values["name"],
            type=values["type"],
            amount=values["amount"],
            interest_rate=values["interest_rate"],
            minimum_payment=values["minimum_payment"],
            due_date=due_date,
            icon="CreditCard",
        )
        liability_id = await ctx.store.create_liability(fields)
        return HandlerResult(
            message=f'Liability "{fields.name}" tracked ({fields.type.value}, {ctx.money(fields.amount)}).',
            record_ids=[liability_id],
        )


class TransferFundsHandler(IntentHandler):
    intent = IntentTag.TRANSFER_FUNDS
    atomic = True
    fields = [
        FieldSpec(name="amount", parser=positive_amount),
        FieldSpec(name="from_account", parser=text_value),
        FieldSpec(name="to_account", parser=text_value),
    ]

    async def run(self, values: dict[str, Any], ctx: ExecutionContext) -> HandlerResult:
        amount: Decimal = values["amount"]
        accounts = await ctx.store.list_accounts()
        source = ctx.account_resolver.resolve(values["from_account"], accounts)
        destination = ctx.account_resolver.resolve(values["to_account"], accounts)
        if source.id == destination.id:
            raise SameAccountError(source.name)
        if source.balance < amount:
            raise InsufficientFundsError(source.name, source.balance, amount)

        async with ctx.store.transaction():
            # Re-read inside the transaction; the lists above may be stale
            source = await ctx.store.get_account(source.id)
            destination = await ctx.store.get_account(destination.id)
            if source.balance < amount:
                raise InsufficientFundsError(source.name, source.balance, amount)

            await ctx.store.update_account_balance(
                source.id, source.balance - amount, expected_balance=source.balance
            )
            await ctx.store.update_account_balance(
                destination.id, destination.balance + amount, expected_balance=destination.balance
            )
            transaction_id = await ctx.store.create_transaction(
                TransactionFields(
                    amount=amount,
                    description=f"Transfer: {source.name} → {destination.name}",
                    category="Transfer",
                    type=TransactionType.TRANSFER,
                    transaction_date=ctx.today,
                    account_id=source.id,
                    to_account_id=destination.id,
                    tags=ctx.tags + ["transfer"],
                )
            )

        if ctx.audit_logger:
            await ctx.audit_logger.log_funds_transferred(
                ctx.session_id, source.name, destination.name, str(amount), ctx.correlation_id
            )

        money = ctx.money
        return HandlerResult(
            message=(
                f"Transferred {money(amount)} from {source.name} to {destination.name}.\n\n"
                f"{source.name}: {money(source.balance)} → {money(source.balance - amount)}\n"
                f"{destination.name}: {money(destination.balance)} → "
                f"{money(destination.balance + amount)}"
            ),
            record_ids=[transaction_id, source.id, destination.id],
        )


# =============================================================================
# REGISTRY
# =============================================================================

HANDLERS: dict[IntentTag, IntentHandler] = {
    handler.intent: handler
    for handler in (
        CreateTaskHandler(),
        CreateNoteHandler(),
        CreateJournalHandler(),
        CreateCredentialHandler(),
        CreateTransactionHandler(),
        CreateRecurringHandler(),
        CreateBudgetHandler(),
        CreateCategoryHandler(),
        CreateFinancialAccountHandler(),
        CreateGoalHandler(),
        ContributeGoalHandler(),
        CreateLiabilityHandler(),
        TransferFundsHandler(),
    )
}

_unhandled = {tag for tag in IntentTag if tag.is_mutating} - set(HANDLERS)
if _unhandled:
    raise ImportError(f"No handler for intents: {sorted(t.value for t in _unhandled)}")


def default_account_resolver(prefer_exact: bool = False) -> EntityResolver[FinancialAccount]:
    strategy = RankedContainmentStrategy() if prefer_exact else None
    return EntityResolver("account", ACCOUNT_STOPWORDS, strategy)


def default_goal_resolver() -> EntityResolver[Goal]:
    return EntityResolver("goal")
