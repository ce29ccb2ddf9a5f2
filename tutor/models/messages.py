"""
Message Models

Session modes, durable conversation turns, and display-buffer entries.
"""

from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class Mode(str, Enum):
    """Active teaching behavior."""

    LEARN = "learn"
    REVIEW = "review"
    QUIZ = "quiz"
    DASHBOARD = "dashboard"


class ConversationTurn(BaseModel):
    """One entry of the durable conversation log. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"] = Field(description="Who produced the message")
    content: str = Field(description="Message content text")

    def to_wire(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class DisplayTurn(BaseModel):
    """One entry of the display buffer shown to the student."""

    role: Literal["user", "assistant", "error"]
    content: str
    is_mock: bool = False
    error_code: Optional[str] = None


# Factory Functions

def create_user_turn(content: str) -> ConversationTurn:
    return ConversationTurn(role="user", content=content)


def create_assistant_turn(content: str) -> ConversationTurn:
    return ConversationTurn(role="assistant", content=content)


def create_error_display(message: str, error_code: Optional[str] = None) -> DisplayTurn:
    return DisplayTurn(role="error", content=message, error_code=error_code)
