"""
Field Parsing

Turns raw slot values (classifier JSON or whatever the user typed) into
typed values. Every parser returns None for input it cannot use, so the
executor can put that field back on the missing list and ask again.
"""

import calendar
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional, TypeVar

import dateparser

from integral_assistant.models.records import AccountType


E = TypeVar("E", bound=Enum)

TITLE_MAX_LENGTH = 50

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")

DEFAULT_DATE_WORDS = frozenset({"default", "skip", "none", "no", "whatever"})

ACCOUNT_ICONS: dict[AccountType, str] = {
    AccountType.SAVINGS: "FaPiggyBank",
    AccountType.CREDIT_CARD: "FaCreditCard",
    AccountType.INVESTMENT: "FaChartLine",
    AccountType.BANK: "FaUniversity",
    AccountType.DIGITAL_WALLET: "FaMobileAlt",
    AccountType.CASH: "FaMoneyBillWave",
}
DEFAULT_ACCOUNT_ICON = "FaWallet"

# Checked in order; first keyword found wins
_ACCOUNT_TYPE_KEYWORDS: list[tuple[tuple[str, ...], AccountType]] = [
    (("cash",), AccountType.CASH),
    (("bank", "checking", "current"), AccountType.BANK),
    (("credit",), AccountType.CREDIT_CARD),
    (("digital", "wallet", "paypal", "venmo"), AccountType.DIGITAL_WALLET),
    (("invest",), AccountType.INVESTMENT),
    (("saving",), AccountType.SAVINGS),
]


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Parse a money amount, rounded to cents.

    Accepts numbers and strings like "1,200", "$15.99" or "about 300".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    else:
        match = _NUMBER.search(str(value).replace(",", ""))
        if not match:
            return None
        raw = match.group()
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_positive_amount(value: Any) -> Optional[Decimal]:
    amount = parse_amount(value)
    return amount if amount is not None and amount > 0 else None


def parse_non_negative_amount(value: Any) -> Optional[Decimal]:
    amount = parse_amount(value)
    return amount if amount is not None and amount >= 0 else None


def parse_date(value: Any, today: date) -> Optional[date]:
    """
    Parse an ISO date or free text such as "next friday" or "in 3 days".
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_blank(value):
        return None
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    parsed = dateparser.parse(
        text,
        settings={
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": datetime.combine(today, datetime.min.time()),
            "RETURN_AS_TIMEZONE_AWARE": False,
        },
    )
    return parsed.date() if parsed else None


def parse_due_date(value: Any, today: date, default_days: int) -> Optional[date]:
    """Due date, where "default" (or "skip") means today + default_days."""
    if isinstance(value, str) and value.strip().lower() in DEFAULT_DATE_WORDS:
        return today + timedelta(days=default_days)
    return parse_date(value, today)


def parse_choice(value: Any, enum_type: type[E], aliases: Optional[dict[str, E]] = None) -> Optional[E]:
    """
    Match free text to an enum member.

    Tries the exact value, then aliases, then any member value or alias
    appearing as a word in the text ("it's monthly" -> MONTHLY).
    """
    if is_blank(value):
        return None
    if isinstance(value, enum_type):
        return value
    text = str(value).strip().lower()
    normalized = text.replace(" ", "_")
    for member in enum_type:
        if member.value == normalized:
            return member
    aliases = aliases or {}
    if text in aliases:
        return aliases[text]
    words = set(re.findall(r"[a-z_]+", normalized)) | set(re.findall(r"[a-z]+", text))
    for member in enum_type:
        if member.value in words:
            return member
    for alias, member in aliases.items():
        if alias in words:
            return member
    return None


def normalize_account_type(value: Any) -> AccountType:
    """
    Best guess at an account type from free text; bank when unsure.
    """
    if isinstance(value, AccountType):
        return value
    text = "" if value is None else str(value).strip().lower()
    for member in AccountType:
        if text == member.value:
            return member
    for keywords, account_type in _ACCOUNT_TYPE_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return account_type
    return AccountType.BANK


def account_icon(account_type: AccountType) -> str:
    return ACCOUNT_ICONS.get(account_type, DEFAULT_ACCOUNT_ICON)


def title_from_content(content: str, fallback: str) -> str:
    """First line of the content, cut to 50 characters plus an ellipsis."""
    first_line = content.strip().split("\n")[0].strip()
    if not first_line:
        return fallback
    if len(first_line) > TITLE_MAX_LENGTH:
        return first_line[:TITLE_MAX_LENGTH] + "..."
    return first_line


def format_money(amount: Decimal, symbol: str) -> str:
    """Symbol plus the amount, dropping a trailing .00 (e.g. "$1,200", "$15.99")."""
    if amount == amount.to_integral_value():
        return f"{symbol}{int(amount):,}"
    return f"{symbol}{amount:,.2f}"


def add_months(day: date, months: int) -> date:
    """Same day-of-month N months later, clamped to the month's last day."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
