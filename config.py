"""
Configuration management for the StudyBuddy backend.

Centralizes all configuration using Pydantic settings with environment variable support.
"""

import logging
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

logger = logging.getLogger(__name__)

# Placeholder values shipped in example .env files; treated as "no credential".
PLACEHOLDER_API_KEY = "your_api_key_here"
PLACEHOLDER_API_KEY_FRAGMENT = "your-actual"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=5000,
        description="API server port"
    )

    # LLM Configuration
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key (mock responder is used when absent)"
    )
    claude_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model sent with every request"
    )
    max_tokens: int = Field(
        default=4096,
        description="max_tokens sent with every request"
    )
    llm_endpoint: str = Field(
        default="",
        description="Proxy endpoint URL (e.g. http://localhost:5000/api/claude). "
                    "Empty means call the Anthropic SDK in-process."
    )
    llm_timeout: int = Field(
        default=60,
        description="LLM request timeout in seconds"
    )
    mock_delay_seconds: float = Field(
        default=1.5,
        description="Simulated latency of the mock responder"
    )

    # Session policy
    answer_debounce_ms: int = Field(
        default=300,
        description="Quiet window that coalesces repeated answer submissions"
    )
    history_max_turns: int = Field(
        default=0,
        description="Replay at most this many prior turns per request (0 = unbounded)"
    )
    reference_preview_chars: int = Field(
        default=3000,
        description="Characters of each reference material embedded in the prompt"
    )

    # Application Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def has_usable_api_key(self) -> bool:
        return is_usable_api_key(self.anthropic_api_key)


def is_usable_api_key(api_key: Optional[str]) -> bool:
    """Return False for empty keys and the placeholders from .env.example."""
    if not api_key:
        return False
    if api_key == PLACEHOLDER_API_KEY or PLACEHOLDER_API_KEY_FRAGMENT in api_key:
        return False
    return True


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings: Application settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None


def validate_required_settings():
    """
    Validate settings at startup.

    A missing credential is not fatal: sessions fall back to the mock
    responder. Raises ValueError only for values that cannot work at all.
    """
    settings = get_settings()

    if not settings.has_usable_api_key:
        logger.warning(
            "ANTHROPIC_API_KEY not configured; sessions will use the mock responder"
        )

    if settings.max_tokens <= 0:
        raise ValueError("MAX_TOKENS must be a positive integer")

    if settings.answer_debounce_ms < 0:
        raise ValueError("ANSWER_DEBOUNCE_MS must not be negative")

    return True
