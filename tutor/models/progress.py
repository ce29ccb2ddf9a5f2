"""
Progress Models

Quiz/study progress of a session and the actions that change it.
ProgressState is frozen: every change goes through the reducer in
tutor.services.progress_tracker and produces a new value.
"""

from typing import Annotated, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator

from shared.utils.constants import MAX_WEAK_AREAS


class ProgressState(BaseModel):
    """Cumulative progress for the active session."""

    model_config = ConfigDict(frozen=True)

    questions_answered: NonNegativeInt = 0
    correct_answers: NonNegativeInt = 0
    topics_studied: frozenset[str] = Field(default_factory=frozenset)
    weak_areas: tuple[str, ...] = Field(default=(), max_length=MAX_WEAK_AREAS)
    concept_mastery: dict[str, NonNegativeInt] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _correct_within_answered(self) -> "ProgressState":
        if self.correct_answers > self.questions_answered:
            raise ValueError("correct_answers cannot exceed questions_answered")
        return self


# Actions

class QuestionAnswered(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["QUESTION_ANSWERED"] = "QUESTION_ANSWERED"
    is_correct: bool
    topic: str


class TopicStudied(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["TOPIC_STUDIED"] = "TOPIC_STUDIED"
    topic: str


class ResetSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["RESET_SESSION"] = "RESET_SESSION"


ProgressAction = Annotated[
    Union[QuestionAnswered, TopicStudied, ResetSession],
    Field(discriminator="type"),
]
