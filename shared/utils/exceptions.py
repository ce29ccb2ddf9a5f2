"""Custom exception hierarchy for better error handling."""
from typing import Optional

from fastapi import HTTPException, status

from shared.utils.constants import (
    ERROR_API_KEY_INVALID,
    ERROR_CODE_TO_STATUS,
    ERROR_MESSAGES,
    ERROR_OVERLOADED,
    ERROR_RATE_LIMIT,
    ERROR_UNKNOWN,
    STATUS_TO_ERROR_CODE,
)


class StudyBuddyException(Exception):
    """Base exception for all application errors."""
    pass


class SessionNotFoundException(StudyBuddyException):
    """Raised when a session is not found."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {self.session_id} not found"
        )


def error_code_for_status(status_code: Optional[int]) -> str:
    """Map an upstream HTTP status to a transport error code."""
    return STATUS_TO_ERROR_CODE.get(status_code, ERROR_UNKNOWN)


class LLMTransportError(StudyBuddyException):
    """Raised when the LLM client fails to produce a reply."""

    error_code = ERROR_UNKNOWN

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None):
        if error_code:
            self.error_code = error_code
        self.message = message or ERROR_MESSAGES.get(self.error_code, ERROR_MESSAGES[ERROR_UNKNOWN])
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return ERROR_CODE_TO_STATUS.get(self.error_code, 500)

    def to_payload(self) -> dict:
        """Failure body of the proxy wire contract."""
        return {"success": False, "error": self.error_code, "message": self.message}

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_payload())

    @classmethod
    def for_status(cls, status_code: Optional[int], message: Optional[str] = None) -> "LLMTransportError":
        return cls.for_code(error_code_for_status(status_code), message)

    @classmethod
    def for_code(cls, error_code: Optional[str], message: Optional[str] = None) -> "LLMTransportError":
        exc_cls = _ERROR_CLASSES.get(error_code or ERROR_UNKNOWN)
        if exc_cls is None:
            return LLMTransportError(message, error_code=ERROR_UNKNOWN)
        return exc_cls(message)


class LLMAuthenticationError(LLMTransportError):
    """Raised when the provider rejects the API key."""

    error_code = ERROR_API_KEY_INVALID


class LLMRateLimitError(LLMTransportError):
    """Raised when the provider rate limit is exceeded."""

    error_code = ERROR_RATE_LIMIT


class LLMOverloadedError(LLMTransportError):
    """Raised when the provider reports it is overloaded."""

    error_code = ERROR_OVERLOADED


_ERROR_CLASSES = {
    ERROR_API_KEY_INVALID: LLMAuthenticationError,
    ERROR_RATE_LIMIT: LLMRateLimitError,
    ERROR_OVERLOADED: LLMOverloadedError,
    ERROR_UNKNOWN: LLMTransportError,
}
