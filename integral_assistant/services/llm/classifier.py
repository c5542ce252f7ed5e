"""
Intent Classifier

Turns a chat message into a ClassifiedIntent in two steps:

1. MENTIONS: a leading @mention ("@task buy milk") picks the intent
   directly and is stripped from the text.
2. LLM: otherwise the model picks one intent name from a fixed list.
   Anything it returns outside that list becomes general_chat.

Then, for intents that carry structured data, a second prompt asks the
model for a JSON object of parameters. The LLM is a TRANSLATOR here:
whatever it returns is treated as untrusted, unvalidated input. The
executor decides what is usable and asks the user for the rest.

CRITICAL: create_account (stored credentials) never gets a parameter
extraction call. Credentials are collected one field at a time from the
user and never pass through a model.
"""

import json
import re
from typing import Any, Optional

import structlog

from integral_assistant.models.conversation import ClassifiedIntent, IntentTag
from integral_assistant.services.llm.interface import (
    IntentClassifierInterface,
    TextGeneratorInterface,
)


logger = structlog.get_logger(__name__)

MENTION_PATTERN = re.compile(r"^@\w+\s*")

# Simple mentions; @goal and @finance need a look at the rest of the text
_MENTIONS: list[tuple[tuple[str, ...], IntentTag]] = [
    (("@task",), IntentTag.CREATE_TASK),
    (("@note",), IntentTag.CREATE_NOTE),
    (("@journal",), IntentTag.CREATE_JOURNAL),
    (("@transaction",), IntentTag.CREATE_TRANSACTION),
    (("@recurring",), IntentTag.CREATE_RECURRING),
    (("@budget",), IntentTag.CREATE_BUDGET),
    (("@category",), IntentTag.CREATE_CATEGORY),
]

_CONTRIBUTION_WORDS = ("add", "contribute", "deposit")


def parse_mention(text: str) -> Optional[IntentTag]:
    """
    Intent named by a leading @mention, if any.

    Matching is by prefix on the lowercased text, so "@tasks" still
    means create_task.
    """
    lower = text.strip().lower()
    if not lower.startswith("@"):
        return None

    for prefixes, intent in _MENTIONS:
        if lower.startswith(prefixes):
            return intent

    if lower.startswith("@goal"):
        if any(word in lower for word in _CONTRIBUTION_WORDS):
            return IntentTag.CONTRIBUTE_GOAL
        return IntentTag.CREATE_GOAL
    if lower.startswith(("@contribute", "@deposit")):
        return IntentTag.CONTRIBUTE_GOAL
    if lower.startswith(("@liability", "@debt")):
        return IntentTag.CREATE_LIABILITY
    if lower.startswith("@transfer"):
        return IntentTag.TRANSFER_FUNDS
    if lower.startswith(("@account", "@credential")):
        return IntentTag.CREATE_ACCOUNT
    if lower.startswith("@finance"):
        if "account" in lower or "balance" in lower:
            return IntentTag.CREATE_FINANCIAL_ACCOUNT
        return IntentTag.CREATE_TRANSACTION
    return None


def strip_mention(text: str) -> str:
    return MENTION_PATTERN.sub("", text.strip(), count=1)


def parse_json_reply(text: Optional[str]) -> Optional[dict[str, Any]]:
    """
    Pull the first JSON object out of a model reply.

    Tolerates ```json fences and chatter around the object.

    Returns:
        The parsed object, or None if no valid object was found
    """
    if not text:
        return None
    cleaned = text.replace("```json", "").replace("```", "").strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}") + 1
    if start < 0 or end <= start:
        return None
    try:
        data = json.loads(cleaned[start:end])
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


# =============================================================================
# PROMPTS
# =============================================================================

CLASSIFICATION_PROMPT = """Classify the user's intent from this text: "{query}"
Possible intents:
- create_task (e.g., "remind me to...", "add task...", "buy milk")
- create_note (e.g., "note that...", "save idea...", "remember to")
- create_journal (e.g., "dear diary...", "today I...", "I felt...")
- create_transaction (e.g., "spent $50...", "bought pizza...", "paid rent")
- create_recurring (e.g., "monthly subscription", "recurring payment", "auto-pay rent")
- create_budget (e.g., "create budget", "set budget for groceries", "monthly budget")
- create_category (e.g., "add category", "new expense category", "create category for...")
- create_financial_account (e.g., "open a savings account with 5000", "add my HDFC bank account")
- create_goal (e.g., "save for vacation", "goal to buy laptop", "emergency fund target")
- contribute_goal (e.g., "add 5000 to vacation goal", "contribute to emergency fund", "deposit 2000 to laptop goal")
- create_liability (e.g., "track loan", "add mortgage", "credit card debt")
- transfer_funds (e.g., "transfer money", "move funds", "transfer $100 from...")
- create_account (e.g., "save my Netflix login", "store my GitHub credentials", "add account for...")
- search_knowledge (e.g., "what did I do...", "search for...", "find...", "show me...", "when did I...", "list my...", "do I have...", "where is...")
- general_chat (e.g., "hello", "tell me a joke", "how are you", "what is the capital of...")

Return ONLY the intent name."""

PARAM_PROMPTS: dict[IntentTag, str] = {
    IntentTag.CREATE_TASK: """Extract task parameters from: "{query}"

Return ONLY valid JSON in this exact format:
{{ "title": string, "description": string, "priority": "low"|"medium"|"high" }}

Do NOT include a due_date field. Just extract the title and priority.""",

    IntentTag.CREATE_TRANSACTION: """Extract transaction parameters from: "{query}"
Return JSON: {{ "amount": number, "description": string, "category": string (guess one), "type": "expense"|"income" }}""",

    IntentTag.CREATE_BUDGET: """Extract budget parameters from: "{query}"
Return JSON: {{ "name": string, "amount": number, "period": "weekly"|"monthly"|"yearly" }}
If period not mentioned, use "monthly". Example: "set 500 for haircut" -> {{"name": "haircut", "amount": 500, "period": "monthly"}}""",

    IntentTag.CREATE_RECURRING: """Extract recurring payment parameters from: "{query}"
Return JSON: {{ "description": string, "amount": number, "frequency": "daily"|"weekly"|"monthly"|"yearly", "type": "expense"|"income" }}""",

    IntentTag.CREATE_CATEGORY: """Extract category parameters from: "{query}"
Return JSON: {{ "name": string, "type": "expense"|"income" }}""",

    IntentTag.CREATE_FINANCIAL_ACCOUNT: """Extract financial account parameters from: "{query}"
Return JSON: {{ "name": string, "type": "cash"|"bank"|"credit_card"|"digital_wallet"|"investment"|"savings", "balance": number }}
Rules:
- Extract a specific account name if mentioned (e.g., "HDFC Bank", "Chase Savings", "Emergency Fund")
- If NO specific name is mentioned, return "name": null
- If type not mentioned, use "bank"
Examples:
- "create HDFC savings account with 50000" -> {{"name": "HDFC Savings", "type": "savings", "balance": 50000}}
- "create account with 50000 balance" -> {{"name": null, "type": "bank", "balance": 50000}}""",

    IntentTag.CREATE_GOAL: """Extract financial goal parameters from: "{query}"
Return JSON: {{ "name": string, "target_amount": number, "current_amount": number, "target_date": string }}
Rules:
- Extract goal name/purpose
- Extract target amount
- Current amount defaults to 0 if not mentioned
- Target date in YYYY-MM-DD format (null if not mentioned)""",

    IntentTag.CONTRIBUTE_GOAL: """Extract goal contribution parameters from: "{query}"
Return JSON: {{ "goal_name": string, "amount": number, "from_account": string }}
Rules:
- Extract the goal name (partial match is ok)
- Extract the contribution amount
- Extract source account name if mentioned (optional)
Examples:
- "add 5000 to vacation goal from savings" -> {{"goal_name": "vacation", "amount": 5000, "from_account": "savings"}}
- "contribute 2000 to emergency fund" -> {{"goal_name": "emergency", "amount": 2000, "from_account": null}}""",

    IntentTag.CREATE_LIABILITY: """Extract liability parameters from: "{query}"
Return JSON: {{ "name": string, "type": "loan"|"credit_card"|"mortgage"|"other", "amount": number, "interest_rate": number, "minimum_payment": number, "due_date": string }}
Rules:
- Extract liability name
- Detect type (loan, credit card, mortgage, other)
- Extract amount owed
- Interest rate (default 0 if not mentioned)
- Minimum payment (default 0 if not mentioned)
- Due date in YYYY-MM-DD format (null if not mentioned)""",

    IntentTag.TRANSFER_FUNDS: """Extract transfer parameters from: "{query}"
Return JSON: {{ "amount": number, "from_account": string, "to_account": string }}
Examples:
- "transfer 1000 from savings to checking" -> {{"amount": 1000, "from_account": "savings", "to_account": "checking"}}
- "move 500 from NIC to HDFC" -> {{"amount": 500, "from_account": "NIC", "to_account": "HDFC"}}""",
}

TASK_DESCRIPTION_PROMPT = (
    'Generate a brief, helpful description (1-2 sentences) for this task: "{title}"'
)


def confirmation_for(intent: IntentTag, params: dict[str, Any]) -> str:
    """Short message acknowledging what the assistant is about to do."""
    if intent == IntentTag.CREATE_TASK and params.get("title"):
        return f'I\'ll create a task: "{params["title"]}".'
    if intent == IntentTag.CREATE_NOTE:
        return "I'll save this note."
    if intent == IntentTag.CREATE_JOURNAL:
        return "I'll add this to your journal."
    if intent == IntentTag.TRANSFER_FUNDS and all(
        params.get(k) for k in ("amount", "from_account", "to_account")
    ):
        return (
            f"I'll transfer {params['amount']} from {params['from_account']} "
            f"to {params['to_account']}."
        )
    if intent == IntentTag.CONTRIBUTE_GOAL and params.get("goal_name"):
        source = f" from {params['from_account']}" if params.get("from_account") else ""
        return f"I'll add {params.get('amount')} to your {params['goal_name']} goal{source}."
    if intent == IntentTag.SEARCH_KNOWLEDGE:
        return "Searching your knowledge base..."
    if intent == IntentTag.GENERAL_CHAT:
        return ""
    return f"I'll help you with that {intent.label}."


class GeminiIntentClassifier(IntentClassifierInterface):
    """
    Classifier backed by any TextGeneratorInterface (Gemini in production).
    """

    def __init__(self, generator: TextGeneratorInterface):
        self._generator = generator

    async def classify(self, text: str) -> ClassifiedIntent:
        intent = parse_mention(text)
        clean_query = text.strip()

        if intent is not None:
            clean_query = strip_mention(text)
        else:
            intent = await self._classify_with_model(text)

        params = await self._extract_params(intent, clean_query)

        logger.debug(
            "intent_classified",
            intent=intent.value,
            via_mention=text.strip().startswith("@"),
            param_keys=sorted(params),
        )
        return ClassifiedIntent(
            intent=intent,
            params=params,
            confirmation_message=confirmation_for(intent, params),
            original_query=text,
        )

    async def _classify_with_model(self, text: str) -> IntentTag:
        reply = await self._generator.complete(CLASSIFICATION_PROMPT.format(query=text))
        name = (reply or "").strip().strip("`'\".").lower()
        try:
            return IntentTag(name)
        except ValueError:
            logger.info("intent_unrecognised", reply=name[:50])
            return IntentTag.GENERAL_CHAT

    async def _extract_params(self, intent: IntentTag, clean_query: str) -> dict[str, Any]:
        if intent in (IntentTag.CREATE_NOTE, IntentTag.CREATE_JOURNAL):
            return {"content": clean_query} if clean_query else {}
        if intent not in PARAM_PROMPTS:
            return {}

        reply = await self._generator.complete(PARAM_PROMPTS[intent].format(query=clean_query))
        parsed = parse_json_reply(reply)
        if parsed is None:
            logger.info("param_extraction_unparseable", intent=intent.value)
            if intent == IntentTag.CREATE_TASK and clean_query:
                return {"title": clean_query}
            if intent == IntentTag.CREATE_TRANSACTION and clean_query:
                return {"description": clean_query}
            return {}

        params = {key: value for key, value in parsed.items() if value not in (None, "")}

        if intent == IntentTag.CREATE_TASK and params.get("title") and not params.get("description"):
            description = await self._generator.complete(
                TASK_DESCRIPTION_PROMPT.format(title=params["title"])
            )
            if description:
                params["description"] = description.strip()

        return params
