"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from integral_assistant.config import (
    AssistantSettings,
    GeminiSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAssistantSettings:
    """Tests for assistant behaviour settings."""

    def test_phrase_lists(self, monkeypatch):
        """Test that phrase lists are split and lower-cased."""
        monkeypatch.setenv("ASSISTANT_CLOSING_PHRASES", "Done, Finished ,")
        settings = AssistantSettings()
        assert settings.closing_phrases_list == ["done", "finished"]
        assert "never mind" in settings.abort_phrases_list

    def test_bad_colour_rejected(self):
        """Test that folder colours must be #RRGGBB."""
        with pytest.raises(ValidationError):
            AssistantSettings(folder_color="purple")


class TestGeminiSettings:
    """Tests for model provider settings."""

    def test_keys_deduplicated_primary_first(self, monkeypatch):
        """Test the rotation order of API keys."""
        monkeypatch.setenv("GEMINI_API_KEY", "k1")
        monkeypatch.setenv("GEMINI_EXTRA_API_KEYS", "k2, k1,,k3")
        assert GeminiSettings().api_keys == ["k1", "k2", "k3"]

    def test_validate_all_reports_missing_key(self, monkeypatch):
        """Test the startup check without a Gemini key."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        results = validate_all_settings()
        assert results["gemini"] is False
        assert "gemini_error" in results
        assert results["search"] is True
        assert results["assistant"] is True
