"""
Entity Resolution

Maps a loosely-typed name from the user ("savings", "my hdfc acct") onto
one of the user's records ("HDFC Savings Account").

DESIGN DECISION: Matching is a pluggable strategy. The default is plain
two-way substring containment after normalisation, which is what users
of the chat widget already rely on. RankedContainmentStrategy is an
opt-in hardening that prefers exact and then shortest matches when
several records contain the query; an edit-distance strategy can be
dropped in the same way without touching callers.
"""

import re
from abc import ABC, abstractmethod
from typing import Generic, Optional, Protocol, Sequence, TypeVar

from integral_assistant.intents.errors import EntityNotFoundError


class Named(Protocol):
    name: str


T = TypeVar("T", bound=Named)

ACCOUNT_STOPWORDS = ("account", "acct", "acc")

_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str, stopwords: Sequence[str] = ()) -> str:
    """
    Lowercase, drop whole-word stopwords and collapse whitespace.

    >>> normalize_name("My Savings  Account", ACCOUNT_STOPWORDS)
    'my savings'
    """
    text = name.lower()
    if stopwords:
        pattern = r"\b(" + "|".join(re.escape(word) for word in stopwords) + r")\b"
        text = re.sub(pattern, "", text)
    return _WHITESPACE.sub(" ", text).strip()


class ResolutionStrategy(ABC):
    """Chooses one candidate for a normalised query."""

    @abstractmethod
    def select(self, query: str, candidates: list[tuple[str, T]]) -> Optional[T]:
        """
        Args:
            query: Normalised query (never empty)
            candidates: (normalised name, record) pairs in the caller's order

        Returns:
            The chosen record, or None
        """
        pass


def _contains_either_way(query: str, name: str) -> bool:
    if not name:
        return False
    return query in name or name in query


class ContainmentStrategy(ResolutionStrategy):
    """First candidate whose name contains the query, or vice versa."""

    def select(self, query: str, candidates: list[tuple[str, T]]) -> Optional[T]:
        for name, record in candidates:
            if _contains_either_way(query, name):
                return record
        return None


class RankedContainmentStrategy(ResolutionStrategy):
    """Among containment matches, prefer an exact match, then the shortest name."""

    def select(self, query: str, candidates: list[tuple[str, T]]) -> Optional[T]:
        matches = [
            (name, index, record)
            for index, (name, record) in enumerate(candidates)
            if _contains_either_way(query, name)
        ]
        if not matches:
            return None
        for name, _, record in matches:
            if name == query:
                return record
        # Ties on length keep list order
        return min(matches, key=lambda m: (len(m[0]), m[1]))[2]


class EntityResolver(Generic[T]):
    """
    Resolves names for one kind of record.

    Usage:
        accounts = EntityResolver("account", ACCOUNT_STOPWORDS)
        source = accounts.resolve("savings", await store.list_accounts())
    """

    def __init__(
        self,
        kind: str,
        stopwords: Sequence[str] = (),
        strategy: Optional[ResolutionStrategy] = None,
    ):
        self.kind = kind
        self._stopwords = tuple(stopwords)
        self._strategy = strategy or ContainmentStrategy()

    def resolve(self, query_name: str, candidates: Sequence[T]) -> T:
        """
        Raises:
            EntityNotFoundError: If nothing matches (an empty query never matches)
        """
        query = normalize_name(str(query_name), self._stopwords)
        if query:
            normalized = [
                (normalize_name(candidate.name, self._stopwords), candidate)
                for candidate in candidates
            ]
            match = self._strategy.select(query, normalized)
            if match is not None:
                return match
        raise EntityNotFoundError(self.kind, str(query_name))
