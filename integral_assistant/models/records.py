"""
Domain Record Models for Integral Assistant

The assistant creates and updates records owned by the productivity
app's data store: tasks, notes, journal entries, ledger entries,
budgets, goals and so on.

Two kinds of model live here:
1. *Fields* models - validated input for one store call
2. Stored records - what the store hands back when asked to list things

DESIGN DECISION: Money is always Decimal. Amounts that move money must be
strictly positive; opening balances may be zero.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class CategoryType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class AccountType(str, Enum):
    """Kinds of money-holding account."""
    CASH = "cash"
    BANK = "bank"
    CREDIT_CARD = "credit_card"
    DIGITAL_WALLET = "digital_wallet"
    INVESTMENT = "investment"
    SAVINGS = "savings"


class LiabilityType(str, Enum):
    LOAN = "loan"
    CREDIT_CARD = "credit_card"
    MORTGAGE = "mortgage"
    OTHER = "other"


class FolderKind(str, Enum):
    """Which part of the app a folder groups."""
    NOTE = "note"
    ACCOUNT = "account"


# =============================================================================
# INPUT FIELDS - one model per store call
# =============================================================================

class _Fields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class TaskFields(_Fields):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: date
    project: str
    tags: list[str] = Field(default_factory=list)


class NoteFields(_Fields):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    folder_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class JournalFields(_Fields):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    entry_date: date
    mood: int = Field(default=3, ge=1, le=5)
    tags: list[str] = Field(default_factory=list)


class TransactionFields(_Fields):
    """A single ledger entry. Transfers carry both account ids."""

    amount: Decimal = Field(..., gt=0, decimal_places=2)
    description: str = Field(..., min_length=1)
    category: str = "Other"
    type: TransactionType = TransactionType.EXPENSE
    transaction_date: date
    budget_id: Optional[str] = None
    account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)


class RecurringFields(_Fields):
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    frequency: RecurrenceFrequency
    type: TransactionType
    category: str = "Other"
    start_date: date
    next_date: date
    is_active: bool = True


class BudgetFields(_Fields):
    name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: date
    end_date: date
    category_id: Optional[str] = None


class CategoryFields(_Fields):
    name: str = Field(..., min_length=1)
    type: CategoryType = CategoryType.EXPENSE
    color: Optional[str] = None


class FinancialAccountFields(_Fields):
    name: str = Field(..., min_length=1)
    type: AccountType = AccountType.BANK
    balance: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    icon: str


class GoalFields(_Fields):
    name: str = Field(..., min_length=1)
    target_amount: Decimal = Field(..., gt=0, decimal_places=2)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    target_date: date
    color: str = "#10B981"
    icon: str = "Target"


class LiabilityFields(_Fields):
    name: str = Field(..., min_length=1)
    type: LiabilityType = LiabilityType.OTHER
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    interest_rate: Decimal = Field(default=Decimal("0"), ge=0)
    minimum_payment: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    due_date: date
    color: str = "#EF4444"
    icon: str


class CredentialFields(_Fields):
    """
    Saved login for an external platform.

    CRITICAL: password must never appear in logs or prompts.
    """

    platform: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, repr=False)
    folder_id: Optional[str] = None
    usage_type: str = "custom"
    reset_period: str = "never"


# =============================================================================
# STORED RECORDS - returned by the store
# =============================================================================

class FinancialAccount(BaseModel):
    id: str
    name: str
    type: AccountType = AccountType.BANK
    balance: Decimal = Decimal("0")
    icon: str = "FaWallet"


class Goal(BaseModel):
    id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    target_date: Optional[date] = None

    @property
    def progress_percent(self) -> int:
        """Progress towards the target, rounded to a whole percent."""
        if self.target_amount <= 0:
            return 0
        return round(self.current_amount / self.target_amount * 100)


class Budget(BaseModel):
    id: str
    name: str
    amount: Decimal
    period: BudgetPeriod = BudgetPeriod.MONTHLY


class Category(BaseModel):
    id: str
    name: str
    type: CategoryType = CategoryType.EXPENSE


class Folder(BaseModel):
    id: str
    name: str
    kind: FolderKind
    color: Optional[str] = None
