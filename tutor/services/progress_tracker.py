"""
Progress Tracker

Pure reducer over ProgressState. Every transition returns a new state and
keeps the invariants: correct_answers <= questions_answered, at most five
weak areas (most recent kept), non-negative mastery counters.
"""

import logging
from typing import Any

from pydantic import TypeAdapter, ValidationError

from shared.utils.constants import MAX_WEAK_AREAS
from tutor.models.progress import (
    ProgressAction,
    ProgressState,
    QuestionAnswered,
    ResetSession,
    TopicStudied,
)

logger = logging.getLogger("tutor.progress")

_action_adapter = TypeAdapter(ProgressAction)


def add_weak_area(weak_areas: tuple[str, ...], topic: str, max_count: int = MAX_WEAK_AREAS) -> tuple[str, ...]:
    """Append a topic unless present, then keep only the most recent entries."""
    if topic in weak_areas:
        return weak_areas
    return (weak_areas + (topic,))[-max_count:]


def coerce_action(action: Any):
    """Turn a `{"type": ..., "data": {...}}` dict into an action model.

    Returns None for anything that is not a recognizable action.
    """
    if isinstance(action, (QuestionAnswered, TopicStudied, ResetSession)):
        return action
    if not isinstance(action, dict):
        return None

    payload = dict(action.get("data") or {})
    payload["type"] = action.get("type")
    if "isCorrect" in payload and "is_correct" not in payload:
        payload["is_correct"] = payload.pop("isCorrect")
    try:
        return _action_adapter.validate_python(payload)
    except ValidationError:
        return None


def apply_progress_action(state: ProgressState, action: Any) -> ProgressState:
    """Reduce one action into a new ProgressState. Unknown actions are a no-op."""
    parsed = coerce_action(action)

    if isinstance(parsed, QuestionAnswered):
        weak_areas = state.weak_areas
        if not parsed.is_correct:
            weak_areas = add_weak_area(weak_areas, parsed.topic)
        return state.model_copy(update={
            "questions_answered": state.questions_answered + 1,
            "correct_answers": state.correct_answers + (1 if parsed.is_correct else 0),
            "weak_areas": weak_areas,
        })

    if isinstance(parsed, TopicStudied):
        mastery = dict(state.concept_mastery)
        mastery[parsed.topic] = mastery.get(parsed.topic, 0) + 1
        return state.model_copy(update={
            "topics_studied": state.topics_studied | {parsed.topic},
            "concept_mastery": mastery,
        })

    if isinstance(parsed, ResetSession):
        return ProgressState()

    logger.debug(f"Ignoring unknown progress action: {action!r}")
    return state
