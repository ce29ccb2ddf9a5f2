"""Unit tests for tutor/services/conversation_log.py: history and replay policies."""

import pytest

from tutor.models.messages import create_assistant_turn, create_user_turn
from tutor.services.conversation_log import (
    SlidingWindowHistory,
    UnboundedHistory,
    append_turn,
    history_policy_for,
    to_wire_messages,
)


def _history(pairs):
    history = ()
    for i in range(pairs):
        history = append_turn(history, f"q{i}", f"a{i}")
    return history


# ---------------------------------------------------------------------------
# append_turn / to_wire_messages
# ---------------------------------------------------------------------------

class TestAppendTurn:
    def test_appends_exactly_two_entries(self):
        history = append_turn((), "What is osmosis?", "Osmosis is...")

        assert len(history) == 2
        assert history[0] == create_user_turn("What is osmosis?")
        assert history[1] == create_assistant_turn("Osmosis is...")

    def test_input_untouched(self):
        original = _history(1)
        extended = append_turn(original, "q", "a")

        assert len(original) == 2
        assert len(extended) == 4
        assert extended[:2] == original

    def test_to_wire_messages(self):
        assert to_wire_messages(_history(1)) == [
            {"role": "user", "content": "q0"},
            {"role": "assistant", "content": "a0"},
        ]


# ---------------------------------------------------------------------------
# History policies
# ---------------------------------------------------------------------------

class TestHistoryPolicies:
    def test_unbounded_replays_everything(self):
        history = _history(10)
        assert UnboundedHistory().select(history) == history

    def test_sliding_window_keeps_last_pairs(self):
        selected = SlidingWindowHistory(2).select(_history(5))

        assert [t.content for t in selected] == ["q3", "a3", "q4", "a4"]

    def test_sliding_window_never_starts_with_assistant(self):
        history = _history(3)[1:]  # starts on an assistant turn
        selected = SlidingWindowHistory(3).select(history)

        assert selected[0].role == "user"

    def test_sliding_window_shorter_history(self):
        history = _history(1)
        assert SlidingWindowHistory(5).select(history) == history

    def test_sliding_window_rejects_non_positive(self):
        with pytest.raises(ValueError):
            SlidingWindowHistory(0)

    def test_policy_for_setting(self):
        assert isinstance(history_policy_for(0), UnboundedHistory)
        assert isinstance(history_policy_for(-1), UnboundedHistory)
        policy = history_policy_for(4)
        assert isinstance(policy, SlidingWindowHistory)
        assert policy.max_turns == 4

    def test_policy_does_not_change_stored_log(self):
        history = _history(5)
        SlidingWindowHistory(1).select(history)
        assert len(history) == 10
