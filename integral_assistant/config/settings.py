"""
Configuration Management for Integral Assistant

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class GeminiSettings(BaseSettings):
    """Gemini LLM and embedding configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Primary Gemini API key"
    )
    extra_api_keys: str = Field(
        default="",
        description="Comma-separated fallback keys, rotated through on failure"
    )
    model_name: str = Field(
        default="gemini-flash-lite-latest",
        description="Gemini model used for classification and answers"
    )
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Gemini model used for query and document embeddings"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )

    @property
    def api_keys(self) -> list[str]:
        """All configured keys, primary first."""
        keys = [self.api_key.strip()] + _split_csv(self.extra_api_keys)
        return [key for key in dict.fromkeys(keys) if key]


class SearchSettings(BaseSettings):
    """Semantic search thresholds."""

    model_config = SettingsConfigDict(
        env_prefix="SEARCH_",
        extra="ignore"
    )

    default_threshold: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum similarity for searches without a date filter"
    )
    default_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Result count for searches without a date filter"
    )
    dated_threshold: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum similarity when a date range narrows the search"
    )
    dated_limit: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Result count when a date range narrows the search"
    )


class AssistantSettings(BaseSettings):
    """
    Behaviour of the conversational assistant.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASSISTANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    folder_name: str = Field(
        default="Integral Assistant",
        description="Folder, project and category name used for assistant-created records"
    )
    folder_color: str = Field(
        default="#8B5CF6",
        description="Colour of folders the assistant creates"
    )
    record_tag: str = Field(
        default="integral-assistant",
        description="Tag attached to every record the assistant creates"
    )
    default_task_due_days: int = Field(
        default=7,
        ge=0,
        description="Due date offset used when the user says 'default'"
    )
    default_goal_horizon_days: int = Field(
        default=365,
        ge=1,
        description="Target date offset for goals created without one"
    )
    default_liability_due_days: int = Field(
        default=30,
        ge=0,
        description="Due date offset for liabilities created without one"
    )
    closing_phrases: str = Field(
        default="done,save it,create it,that's all",
        description="Comma-separated phrases that finish a note or journal entry"
    )
    abort_phrases: str = Field(
        default="cancel,never mind,nevermind,stop",
        description="Comma-separated phrases that abandon a pending action"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=4,
        description="Symbol used in confirmation messages"
    )
    prefer_exact_entity_match: bool = Field(
        default=False,
        description="Rank exact and shortest name matches first when resolving accounts"
    )

    @field_validator("folder_color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Colours are stored as #RRGGBB."""
        if not (v.startswith("#") and len(v) == 7):
            raise ValueError(f"Colour must look like #RRGGBB, got {v!r}")
        return v

    @property
    def closing_phrases_list(self) -> list[str]:
        return [p.lower() for p in _split_csv(self.closing_phrases)]

    @property
    def abort_phrases_list(self) -> list[str]:
        return [p.lower() for p in _split_csv(self.abort_phrases)]


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration
    # (tests run without a Gemini key).

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def search(self) -> SearchSettings:
        return SearchSettings()

    @property
    def assistant(self) -> AssistantSettings:
        return AssistantSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("gemini", "search", "assistant"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
