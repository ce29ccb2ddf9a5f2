"""
Exam Preparation Models

Exam configuration saved from the configuration form, and the reference
exam materials loaded alongside a study document. Both are read-only
inputs to prompt assembly.
"""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from shared.utils.constants import (
    MAX_OBJECTIVE_LENGTH,
    MAX_OBJECTIVES_COUNT,
    MAX_PITFALL_LENGTH,
    MAX_PITFALLS_COUNT,
)


ExamType = Literal["multiple-choice", "essay", "short-answer", "practical", "mixed"]
DifficultyLevel = Literal["beginner", "intermediate", "advanced"]


def _sanitize_entries(entries, max_length: int):
    """Trim, cut and drop blank entries. Anything that is not a list of strings is left for pydantic to reject."""
    if entries is None:
        return []
    if not isinstance(entries, list):
        return entries
    cleaned = []
    for entry in entries:
        if not isinstance(entry, str):
            cleaned.append(entry)
            continue
        text = entry.strip()[:max_length]
        if text:
            cleaned.append(text)
    return cleaned


class ExamConfig(BaseModel):
    """Exam the student is preparing for. Replaced wholesale on save."""

    model_config = ConfigDict(frozen=True)

    exam_type: ExamType = Field(default="mixed")
    learning_objectives: list[str] = Field(default_factory=list, max_length=MAX_OBJECTIVES_COUNT)
    difficulty_level: DifficultyLevel = Field(default="intermediate")
    common_pitfalls: list[str] = Field(default_factory=list, max_length=MAX_PITFALLS_COUNT)
    time_constraints: Optional[PositiveInt] = Field(default=None, description="Minutes available")
    special_instructions: str = ""

    @field_validator("learning_objectives", mode="before")
    @classmethod
    def _clean_objectives(cls, value):
        return _sanitize_entries(value, MAX_OBJECTIVE_LENGTH)

    @field_validator("common_pitfalls", mode="before")
    @classmethod
    def _clean_pitfalls(cls, value):
        return _sanitize_entries(value, MAX_PITFALL_LENGTH)

    @field_validator("special_instructions", mode="before")
    @classmethod
    def _clean_instructions(cls, value):
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value


class ReferenceMaterial(BaseModel):
    """A past paper or sample exam used to calibrate question style."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    page_count: Optional[int] = Field(default=None, ge=0)
    text: str = ""
