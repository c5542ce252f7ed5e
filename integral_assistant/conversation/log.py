"""
Conversation Log and Session State

A session is one chat window: an append-only log of turns, at most one
pending action, and a lock that makes turns of the session run one at
a time.
"""

import asyncio
from typing import Iterator, Optional
from uuid import uuid4

from integral_assistant.models.conversation import (
    ConversationTurn,
    PendingAction,
    TurnRole,
)


class ConversationLog:
    """
    Append-only list of turns.

    Sequence numbers are assigned here, so log order is the order in
    which turns were appended.
    """

    def __init__(self):
        self._turns: list[ConversationTurn] = []

    def append(self, role: TurnRole, text: str) -> ConversationTurn:
        turn = ConversationTurn(sequence=len(self._turns), role=role, text=text)
        self._turns.append(turn)
        return turn

    @property
    def turns(self) -> list[ConversationTurn]:
        return list(self._turns)

    def last(self, role: Optional[TurnRole] = None) -> Optional[ConversationTurn]:
        for turn in reversed(self._turns):
            if role is None or turn.role == role:
                return turn
        return None

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(list(self._turns))


class SessionContext:
    """
    Per-session state owned by the engine.

    Attributes:
        session_id: Identifier used in audit events
        pending_action: The action waiting for fields, if any
        log: Every turn of the session
        lock: Held for the whole of one turn
    """

    def __init__(self, session_id: Optional[str] = None):
        self.session_id = session_id or str(uuid4())
        self.pending_action: Optional[PendingAction] = None
        self.log = ConversationLog()
        self.lock = asyncio.Lock()
