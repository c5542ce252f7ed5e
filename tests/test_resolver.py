"""
Tests for entity resolution.
"""

import pytest
from decimal import Decimal

from integral_assistant.intents.errors import EntityNotFoundError
from integral_assistant.intents.resolver import (
    ACCOUNT_STOPWORDS,
    EntityResolver,
    RankedContainmentStrategy,
    normalize_name,
)
from integral_assistant.models.records import FinancialAccount, Goal


def account(name: str) -> FinancialAccount:
    return FinancialAccount(id=name.lower().replace(" ", "-"), name=name, balance=Decimal("100"))


class TestNormalizeName:
    """Tests for normalize_name."""

    def test_lowercases_and_drops_stopwords(self):
        """Test that account words are removed."""
        assert normalize_name("My Savings Account", ACCOUNT_STOPWORDS) == "my savings"

    def test_collapses_whitespace(self):
        """Test that gaps left by stopwords collapse."""
        assert normalize_name("HDFC  acct   Main", ACCOUNT_STOPWORDS) == "hdfc main"

    def test_only_whole_words_removed(self):
        """Test that stopwords inside other words survive."""
        assert normalize_name("Accumulator", ACCOUNT_STOPWORDS) == "accumulator"

    def test_no_stopwords(self):
        """Test plain normalisation."""
        assert normalize_name("  New Car ") == "new car"


class TestEntityResolver:
    """Tests for the default containment resolver."""

    def test_query_contained_in_name(self):
        """Test that "savings" finds "My Savings Account"."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS)
        match = resolver.resolve("savings", [account("Checking"), account("My Savings Account")])
        assert match.name == "My Savings Account"

    def test_name_contained_in_query(self):
        """Test the reverse containment direction."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS)
        match = resolver.resolve("my hdfc salary acct", [account("HDFC")])
        assert match.name == "HDFC"

    def test_unknown_name(self):
        """Test that "xyz" resolves to nothing."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS)
        with pytest.raises(EntityNotFoundError) as exc_info:
            resolver.resolve("xyz", [account("My Savings Account")])
        assert exc_info.value.kind == "account"
        assert exc_info.value.name == "xyz"

    def test_empty_query_never_matches(self):
        """Test that a query made only of stopwords fails."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS)
        with pytest.raises(EntityNotFoundError):
            resolver.resolve("account", [account("Savings Account")])

    def test_first_match_wins(self):
        """Test that list order decides between several matches."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS)
        match = resolver.resolve("savings", [account("Old Savings"), account("Savings")])
        assert match.name == "Old Savings"

    def test_goals_use_no_stopwords(self):
        """Test goal resolution keeps every word."""
        resolver = EntityResolver("goal")
        goals = [Goal(id="g1", name="Emergency Account Fund", target_amount=Decimal("1000"))]
        assert resolver.resolve("account fund", goals).id == "g1"


class TestRankedContainmentStrategy:
    """Tests for the exact-then-shortest strategy."""

    def test_exact_match_preferred(self):
        """Test that an exact name beats an earlier partial match."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS, RankedContainmentStrategy())
        match = resolver.resolve("savings", [account("Old Savings"), account("Savings")])
        assert match.name == "Savings"

    def test_shortest_match_preferred(self):
        """Test that the closest partial match wins."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS, RankedContainmentStrategy())
        match = resolver.resolve("sav", [account("Holiday Savings"), account("Savings Pot")])
        assert match.name == "Savings Pot"

    def test_ties_keep_list_order(self):
        """Test that equal-length matches fall back to list order."""
        resolver = EntityResolver("account", ACCOUNT_STOPWORDS, RankedContainmentStrategy())
        match = resolver.resolve("cash", [account("Cash A"), account("Cash B")])
        assert match.name == "Cash A"
