"""
Custom Exception Hierarchy for Tutor Module

Exception Hierarchy:
    TutorError (base)
    ├── TurnValidationError
    ├── PromptError
    │   └── PromptTemplateError
    └── ConfigurationError

Transport failures live in shared.utils.exceptions (LLMTransportError) and
are converted to error turns by the session orchestrator.
"""

from typing import Optional

from fastapi import HTTPException, status


class TutorError(Exception):
    """Base exception for all tutor errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TurnValidationError(TutorError):
    """Raised when a turn cannot be accepted (blank text, busy or superseded session)."""

    def __init__(self, reason: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(f"Turn rejected: {reason}")
        self.reason = reason
        self.status_code = status_code

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


# Prompt Errors

class PromptError(TutorError):
    """Base exception for prompt-related errors."""
    pass


class PromptTemplateError(PromptError):
    """Raised when prompt template rendering fails."""

    def __init__(self, template_name: str, missing_vars: list[str]):
        message = f"Prompt template '{template_name}' missing variables: {', '.join(missing_vars)}"
        super().__init__(message)
        self.template_name = template_name
        self.missing_vars = missing_vars


# Configuration Errors

class ConfigurationError(TutorError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, config_key: str, reason: str):
        message = f"Configuration error for '{config_key}': {reason}"
        super().__init__(message)
        self.config_key = config_key
        self.reason = reason
