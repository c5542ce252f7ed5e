"""
Intent Execution Errors

Every failure an intent can hit maps to one of these. The executor
catches them at its boundary and turns each into a single chat message;
none of them ever reaches the app shell.

- ParamsValidationError: a field is missing or unusable -> keep asking
- EntityNotFoundError: a named account/goal does not exist -> stop
- InsufficientFundsError: the source account is short -> stop
- ExecutionError: a collaborator rejected the call -> stop, generic message
"""

from decimal import Decimal
from typing import Optional


class IntentError(Exception):
    """Base exception for intent execution."""
    pass


class ParamsValidationError(IntentError):
    """
    One or more fields are missing or could not be parsed.

    Attributes:
        missing_fields: Fields to ask the user for, in asking order
        invalid_fields: Subset of missing_fields that had a value which
            could not be used
    """

    def __init__(self, missing_fields: list[str], invalid_fields: Optional[list[str]] = None):
        self.missing_fields = list(missing_fields)
        self.invalid_fields = list(invalid_fields or [])
        super().__init__(f"Missing or invalid fields: {', '.join(self.missing_fields)}")


class EntityNotFoundError(IntentError):
    """A name given by the user matched no record."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"Could not find {kind} \"{name}\"")


class InsufficientFundsError(IntentError):
    """The source account's balance is below the requested amount."""

    def __init__(self, account_name: str, balance: Decimal, requested: Decimal):
        self.account_name = account_name
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient balance in {account_name}: {balance} < {requested}"
        )


class ExecutionError(IntentError):
    """A domain collaborator failed or rejected the operation."""
    pass


class SameAccountError(IntentError):
    """A transfer named the same account as source and destination."""

    def __init__(self, account_name: str):
        self.account_name = account_name
        super().__init__(f"Cannot transfer from {account_name} to itself")
