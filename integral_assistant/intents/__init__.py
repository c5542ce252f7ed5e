"""
Intents Package

Everything that turns a classified intent into records:
- Handlers: per-intent field declarations and store calls
- Executor: validation, execution and the error boundary
- Dialogue: slot filling for pending actions
- Resolver: loose name matching for accounts and goals
"""

from integral_assistant.intents.dialogue import ABORT_MESSAGE, DialogueManager
from integral_assistant.intents.errors import (
    EntityNotFoundError,
    ExecutionError,
    InsufficientFundsError,
    IntentError,
    ParamsValidationError,
    SameAccountError,
)
from integral_assistant.intents.executor import GENERIC_FAILURE_MESSAGE, IntentExecutor
from integral_assistant.intents.handlers import (
    HANDLERS,
    ExecutionContext,
    FieldSpec,
    HandlerResult,
    IntentHandler,
)
from integral_assistant.intents.resolver import (
    ACCOUNT_STOPWORDS,
    ContainmentStrategy,
    EntityResolver,
    RankedContainmentStrategy,
    ResolutionStrategy,
    normalize_name,
)

__all__ = [
    # Dialogue
    "ABORT_MESSAGE",
    "DialogueManager",
    # Execution
    "GENERIC_FAILURE_MESSAGE",
    "HANDLERS",
    "ExecutionContext",
    "FieldSpec",
    "HandlerResult",
    "IntentExecutor",
    "IntentHandler",
    # Resolution
    "ACCOUNT_STOPWORDS",
    "ContainmentStrategy",
    "EntityResolver",
    "RankedContainmentStrategy",
    "ResolutionStrategy",
    "normalize_name",
    # Errors
    "EntityNotFoundError",
    "ExecutionError",
    "InsufficientFundsError",
    "IntentError",
    "ParamsValidationError",
    "SameAccountError",
]
