"""
Slot-Filling Prompts

The question the assistant asks for each (intent, field) pair, plus an
optional opening line used the first time an intent asks for anything.
"""

from typing import Any

from integral_assistant.models.conversation import IntentTag


ACCOUNT_TYPE_CHOICES = (
    "\n\nCash\nBank\nCredit Card\nDigital Wallet\nInvestment\nSavings"
    '\n\nJust reply with the type (e.g., "bank" or "savings")'
)

FIELD_PROMPTS: dict[tuple[IntentTag, str], str] = {
    # Tasks
    (IntentTag.CREATE_TASK, "title"): "What should I name this task?",
    (IntentTag.CREATE_TASK, "due_date"):
        'When should "{title}" be due? (or say "default" for 7 days from now)',

    # Notes and journal
    (IntentTag.CREATE_NOTE, "content"): "What would you like the note to say?",
    (IntentTag.CREATE_JOURNAL, "content"): "What's on your mind today?",

    # Ledger
    (IntentTag.CREATE_TRANSACTION, "amount"): "How much was it? (just the number)",
    (IntentTag.CREATE_TRANSACTION, "description"): "What was it for?",
    (IntentTag.CREATE_RECURRING, "description"):
        "What's the description? (e.g., Netflix subscription, Rent)",
    (IntentTag.CREATE_RECURRING, "amount"):
        "How much is the payment? (just the number, e.g., 15.99)",
    (IntentTag.CREATE_RECURRING, "frequency"): "How often? (daily, weekly, monthly, or yearly)",
    (IntentTag.CREATE_RECURRING, "type"): "Is this an expense or income?",

    # Budgets and categories
    (IntentTag.CREATE_BUDGET, "name"):
        "What should I call this budget? (e.g., Groceries, Entertainment)",
    (IntentTag.CREATE_BUDGET, "amount"): "What's the budget amount? (just the number)",
    (IntentTag.CREATE_BUDGET, "period"): "What's the time period? (monthly, weekly, yearly)",
    (IntentTag.CREATE_CATEGORY, "name"):
        "What's the category name? (e.g., Entertainment, Transportation)",
    (IntentTag.CREATE_CATEGORY, "type"): "Is this for expenses or income?",

    # Accounts
    (IntentTag.CREATE_FINANCIAL_ACCOUNT, "name"):
        "What would you like to name this account?\n\n"
        'Examples: "HDFC Savings", "Emergency Fund", "Chase Checking", "Investment Portfolio"',
    (IntentTag.CREATE_FINANCIAL_ACCOUNT, "type"):
        'What type of account is "{name}"?' + ACCOUNT_TYPE_CHOICES,
    (IntentTag.CREATE_FINANCIAL_ACCOUNT, "balance"):
        "What's the current balance? (just the number)",

    # Goals and liabilities
    (IntentTag.CREATE_GOAL, "name"): "What are you saving for?",
    (IntentTag.CREATE_GOAL, "target_amount"): "How much do you want to save? (just the number)",
    (IntentTag.CONTRIBUTE_GOAL, "goal_name"): "Which goal should I add to?",
    (IntentTag.CONTRIBUTE_GOAL, "amount"): "How much do you want to add? (just the number)",
    (IntentTag.CREATE_LIABILITY, "name"):
        "What should I call this liability? (e.g., Car Loan, Credit Card)",
    (IntentTag.CREATE_LIABILITY, "amount"): "How much do you owe? (just the number)",

    # Transfers
    (IntentTag.TRANSFER_FUNDS, "amount"): "How much do you want to transfer? (just the number)",
    (IntentTag.TRANSFER_FUNDS, "from_account"): "Which account should the money come from?",
    (IntentTag.TRANSFER_FUNDS, "to_account"): "Which account should it go to?",

    # Stored credentials
    (IntentTag.CREATE_ACCOUNT, "platform"):
        "What platform is this for? (e.g., Netflix, GitHub, Google)",
    (IntentTag.CREATE_ACCOUNT, "title"):
        "What should I call this account? (e.g., 'Personal Netflix', 'Work GitHub')",
    (IntentTag.CREATE_ACCOUNT, "email"): "What's the email or username for this account?",
    (IntentTag.CREATE_ACCOUNT, "password"):
        "Please enter the password (this will be encrypted and stored securely):",
}

OPENING_LINES: dict[IntentTag, str] = {
    IntentTag.CREATE_RECURRING: "I'll help you set up a recurring payment.",
    IntentTag.CREATE_BUDGET: "I'll help you create a budget.",
    IntentTag.CREATE_CATEGORY: "I'll help you create a category.",
    IntentTag.CREATE_FINANCIAL_ACCOUNT: "I'll help you create a financial account.",
    IntentTag.CREATE_GOAL: "I'll help you set up a savings goal.",
    IntentTag.CONTRIBUTE_GOAL: "I'll help you contribute to a goal.",
    IntentTag.CREATE_LIABILITY: "I'll help you track a liability.",
    IntentTag.TRANSFER_FUNDS: "I'll help you transfer funds.",
    IntentTag.CREATE_ACCOUNT: "I'll help you save account credentials securely.",
}

CONTINUE_PROMPTS: dict[IntentTag, str] = {
    IntentTag.CREATE_NOTE: 'Added! Want to add more? (say "done" when finished)',
    IntentTag.CREATE_JOURNAL: 'Added! Anything else to add? (say "done" when finished)',
}


class _KeepMissing(dict):
    def __missing__(self, key: str) -> str:
        return key.replace("_", " ")


def field_prompt(intent: IntentTag, field_name: str, params: dict[str, Any]) -> str:
    """Question asking for one field, with a generic fallback."""
    template = FIELD_PROMPTS.get((intent, field_name))
    if template is None:
        return f"Got it! Now, what's the {field_name.replace('_', ' ')}?"
    return template.format_map(_KeepMissing({k: v for k, v in params.items() if v is not None}))


def opening_prompt(intent: IntentTag, field_name: str, params: dict[str, Any]) -> str:
    """First question of a new pending action."""
    question = FIELD_PROMPTS.get((intent, field_name))
    if question is None:
        question = f"What's the {field_name.replace('_', ' ')}?"
    else:
        question = field_prompt(intent, field_name, params)
    opening = OPENING_LINES.get(intent)
    return f"{opening} {question}" if opening else question


def retry_prompt(intent: IntentTag, field_name: str, params: dict[str, Any]) -> str:
    """Question repeated after an unusable answer."""
    label = field_name.replace("_", " ")
    return f"Sorry, that doesn't look like a valid {label}. {field_prompt(intent, field_name, params)}"
