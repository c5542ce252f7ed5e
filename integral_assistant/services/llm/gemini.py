"""
Gemini Client

Implements text generation and embeddings on Google's Gemini API.

DESIGN DECISION: Several API keys may be configured. Free-tier keys hit
quota limits often, so a failed call moves on to the next key and only
gives up once every key has failed for the same request. The key that
last worked stays active for later calls.

Transient failures of a whole rotation are retried with exponential
backoff (tenacity). Streaming calls are not retried once a chunk has
been delivered.
"""

from typing import Any, AsyncIterator, Awaitable, Callable, Optional, TypeVar

import google.generativeai as genai
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from integral_assistant.config import GeminiSettings, get_settings
from integral_assistant.services.llm.interface import (
    AllKeysExhaustedError,
    EmbedderInterface,
    LLMError,
    TextGeneratorInterface,
)


T = TypeVar("T")

logger = structlog.get_logger(__name__)


class GeminiClient(TextGeneratorInterface, EmbedderInterface):
    """
    Gemini text generation and embedding with API-key rotation.

    Usage:
        client = GeminiClient()
        answer = await client.complete("Say hello")
        vector = await client.embed("what did I do today")
    """

    def __init__(self, settings: Optional[GeminiSettings] = None):
        self._settings = settings or get_settings().gemini
        self._keys = self._settings.api_keys
        if not self._keys:
            raise LLMError("No Gemini API key configured")
        self._key_index = 0
        self._configure_genai()

    @property
    def active_key_index(self) -> int:
        return self._key_index

    def _configure_genai(self) -> None:
        """Point the SDK at the active key and build the model."""
        genai.configure(api_key=self._keys[self._key_index])
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    def _rotate(self) -> None:
        self._key_index = (self._key_index + 1) % len(self._keys)
        self._configure_genai()

    async def _with_rotation(self, call: Callable[[], Awaitable[T]]) -> T:
        """
        Run call with the active key, rotating through the others on failure.

        Raises:
            AllKeysExhaustedError: If every key failed
        """
        last_error: Optional[Exception] = None
        for attempt in range(len(self._keys)):
            try:
                return await call()
            except Exception as e:
                last_error = e
                logger.warning(
                    "gemini_key_failed",
                    key_index=self._key_index,
                    attempt=attempt + 1,
                    error=str(e),
                )
                if len(self._keys) > 1:
                    self._rotate()
        raise AllKeysExhaustedError(
            f"All {len(self._keys)} Gemini API key(s) failed: {last_error}"
        )

    # -------------------------------------------------------------------------
    # Text generation
    # -------------------------------------------------------------------------

    @retry(
        retry=retry_if_exception_type(AllKeysExhaustedError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def complete(self, prompt: str) -> str:
        """Non-streaming completion."""

        async def call() -> str:
            response = await self._model.generate_content_async(prompt)
            return (response.text or "").strip()

        return await self._with_rotation(call)

    async def generate(self, prompt: str) -> AsyncIterator[str]:
        """
        Stream a completion.

        Key rotation only applies until the first chunk arrives; after
        that a failure is raised to the caller with the partial answer
        already delivered.
        """
        last_error: Optional[Exception] = None
        for _ in range(len(self._keys)):
            delivered = False
            try:
                response = await self._model.generate_content_async(prompt, stream=True)
                async for chunk in response:
                    text = getattr(chunk, "text", "")
                    if text:
                        delivered = True
                        yield text
                return
            except Exception as e:
                if delivered:
                    raise LLMError(f"Gemini stream interrupted: {e}") from e
                last_error = e
                logger.warning("gemini_stream_failed", key_index=self._key_index, error=str(e))
                if len(self._keys) > 1:
                    self._rotate()
        raise AllKeysExhaustedError(
            f"All {len(self._keys)} Gemini API key(s) failed: {last_error}"
        )

    # -------------------------------------------------------------------------
    # Embeddings
    # -------------------------------------------------------------------------

    @retry(
        retry=retry_if_exception_type(AllKeysExhaustedError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def embed(self, text: str, document: bool = False) -> Optional[list[float]]:
        task_type = "retrieval_document" if document else "retrieval_query"

        async def call() -> Any:
            return await genai.embed_content_async(
                model=self._settings.embedding_model,
                content=text,
                task_type=task_type,
            )

        result = await self._with_rotation(call)
        embedding = result.get("embedding") if isinstance(result, dict) else None
        if not embedding:
            logger.warning("gemini_empty_embedding", task_type=task_type)
            return None
        return list(embedding)
