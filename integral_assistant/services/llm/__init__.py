"""Language model services: generation, embeddings and intent classification."""

from integral_assistant.services.llm.classifier import (
    GeminiIntentClassifier,
    parse_json_reply,
    parse_mention,
    strip_mention,
)
from integral_assistant.services.llm.gemini import GeminiClient
from integral_assistant.services.llm.interface import (
    AllKeysExhaustedError,
    EmbedderInterface,
    IntentClassifierInterface,
    LLMError,
    TextGeneratorInterface,
)

__all__ = [
    "AllKeysExhaustedError",
    "EmbedderInterface",
    "GeminiClient",
    "GeminiIntentClassifier",
    "IntentClassifierInterface",
    "LLMError",
    "TextGeneratorInterface",
    "parse_json_reply",
    "parse_mention",
    "strip_mention",
]
