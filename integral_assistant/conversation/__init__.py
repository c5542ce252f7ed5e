"""Session state: conversation log and pending action."""

from integral_assistant.conversation.log import ConversationLog, SessionContext

__all__ = [
    "ConversationLog",
    "SessionContext",
]
