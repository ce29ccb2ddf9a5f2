"""
Conversation Log

Append-only history of completed turns, replayed as the prior-turns payload
of every request. The stored log is never trimmed; a HistoryPolicy decides
how much of it a single request carries.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from tutor.models.messages import ConversationTurn, create_assistant_turn, create_user_turn


ConversationHistory = tuple[ConversationTurn, ...]


def append_turn(history: Sequence[ConversationTurn], user_text: str, assistant_text: str) -> ConversationHistory:
    """Return history followed by exactly one user and one assistant entry."""
    return tuple(history) + (create_user_turn(user_text), create_assistant_turn(assistant_text))


def to_wire_messages(history: Sequence[ConversationTurn]) -> list[dict[str, str]]:
    return [turn.to_wire() for turn in history]


class HistoryPolicy(ABC):
    """Selects the slice of the log replayed into a request."""

    @abstractmethod
    def select(self, history: Sequence[ConversationTurn]) -> ConversationHistory:
        ...


class UnboundedHistory(HistoryPolicy):
    """Replay the whole log."""

    def select(self, history: Sequence[ConversationTurn]) -> ConversationHistory:
        return tuple(history)


class SlidingWindowHistory(HistoryPolicy):
    """Replay only the last `max_turns` user/assistant pairs."""

    def __init__(self, max_turns: int):
        if max_turns <= 0:
            raise ValueError("max_turns must be positive")
        self.max_turns = max_turns

    def select(self, history: Sequence[ConversationTurn]) -> ConversationHistory:
        window = tuple(history)[-2 * self.max_turns:]
        # Never open the window on an assistant reply.
        if window and window[0].role == "assistant":
            window = window[1:]
        return window


def history_policy_for(max_turns: int) -> HistoryPolicy:
    """0 (or less) means unbounded."""
    if max_turns and max_turns > 0:
        return SlidingWindowHistory(max_turns)
    return UnboundedHistory()
