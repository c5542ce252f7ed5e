"""Configuration package."""

from integral_assistant.config.settings import (
    AssistantSettings,
    GeminiSettings,
    SearchSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AssistantSettings",
    "GeminiSettings",
    "SearchSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
