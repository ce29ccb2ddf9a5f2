"""Unit tests for config.py: settings, credential detection and validation."""

import pytest

from config import Settings, get_settings, is_usable_api_key, reset_settings, validate_required_settings


class TestIsUsableApiKey:
    @pytest.mark.parametrize("key", [None, "", "your_api_key_here", "sk-ant-REDACTED"])
    def test_placeholders_unusable(self, key):
        assert is_usable_api_key(key) is False

    def test_real_key(self):
        assert is_usable_api_key("sk-ant-api03-abc") is True


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        settings = Settings(_env_file=None)

        assert settings.api_port == 5000
        assert settings.claude_model == "claude-sonnet-4-20250514"
        assert settings.max_tokens == 4096
        assert settings.llm_endpoint == ""
        assert settings.mock_delay_seconds == 1.5
        assert settings.answer_debounce_ms == 300
        assert settings.history_max_turns == 0
        assert settings.reference_preview_chars == 3000
        assert settings.has_usable_api_key is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-env")
        monkeypatch.setenv("HISTORY_MAX_TURNS", "6")

        settings = Settings(_env_file=None)

        assert settings.has_usable_api_key is True
        assert settings.history_max_turns == 6

    def test_singleton(self):
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first


# ---------------------------------------------------------------------------
# validate_required_settings
# ---------------------------------------------------------------------------

class TestValidateRequiredSettings:
    def test_missing_key_only_warns(self, monkeypatch, caplog):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "")

        with caplog.at_level("WARNING"):
            assert validate_required_settings() is True

        assert "mock responder" in caplog.text

    def test_non_positive_max_tokens(self, monkeypatch):
        monkeypatch.setenv("MAX_TOKENS", "0")
        with pytest.raises(ValueError):
            validate_required_settings()

    def test_negative_debounce(self, monkeypatch):
        monkeypatch.setenv("ANSWER_DEBOUNCE_MS", "-1")
        with pytest.raises(ValueError):
            validate_required_settings()
