"""
Abstract Language Model Interfaces

DESIGN DECISION: The assistant treats the model provider as an external
capability behind three narrow interfaces. The engine never imports a
provider SDK directly, so tests substitute scripted fakes and a shell can
swap Gemini for another provider without touching dialogue logic.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from integral_assistant.models.conversation import ClassifiedIntent


class TextGeneratorInterface(ABC):
    """Produces text from a prompt."""

    @abstractmethod
    def generate(self, prompt: str) -> AsyncIterator[str]:
        """
        Stream a completion.

        Returns:
            Async iterator of text chunks, in order

        Raises:
            LLMError: If the provider fails before or during streaming
        """
        pass

    async def complete(self, prompt: str) -> str:
        """Collect a whole completion into one string."""
        parts = []
        async for chunk in self.generate(prompt):
            parts.append(chunk)
        return "".join(parts)


class EmbedderInterface(ABC):
    """Turns text into a vector for semantic search."""

    @abstractmethod
    async def embed(self, text: str, document: bool = False) -> Optional[list[float]]:
        """
        Embed text.

        Args:
            text: Text to embed
            document: True when embedding a record for the index, False
                when embedding a search query

        Returns:
            The vector, or None if the provider returned nothing usable

        Raises:
            LLMError: If the provider call fails
        """
        pass


class IntentClassifierInterface(ABC):
    """Maps a user message to an intent and raw parameters."""

    @abstractmethod
    async def classify(self, text: str) -> ClassifiedIntent:
        """
        Classify a message.

        Never raises for an unrecognised message; falls back to
        general_chat instead.

        Raises:
            LLMError: If the provider cannot be reached at all
        """
        pass


class LLMError(Exception):
    """The model provider failed."""
    pass


class AllKeysExhaustedError(LLMError):
    """Every configured API key failed for one request."""
    pass
