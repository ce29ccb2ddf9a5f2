"""
Prompt Assembler

Builds the layered system instruction sent with every request:

1. base context: full document text and a progress snapshot
2. reference exam materials (when any are loaded), each cut to a fixed preview
3. exam preparation context (when an exam config is saved)
4. mode rules for learn / review / quiz (dashboard reuses learn)

Pure: the output depends only on the arguments.
"""

from typing import Optional, Sequence

from shared.utils.constants import REFERENCE_PREVIEW_CHARS, TRUNCATION_MARKER
from tutor.models.exam_config import ExamConfig, ReferenceMaterial
from tutor.models.messages import Mode
from tutor.models.progress import ProgressState
from tutor.prompts.session_prompts import (
    ANSWER_EVALUATION_PROMPT,
    BASE_CONTEXT_PROMPT,
    EXAM_CONFIG_PROMPT,
    LEARN_MODE_PROMPT,
    NEXT_QUESTION_PROMPT,
    QUIZ_MODE_PROMPT,
    QUIZ_START_PROMPT,
    REFERENCE_MATERIAL_ENTRY,
    REFERENCE_MATERIALS_GUIDANCE,
    REFERENCE_MATERIALS_HEADER,
    REVIEW_MODE_PROMPT,
)
from tutor.prompts.templates import format_inline_list, format_numbered_list
from tutor.services.grading import accuracy_percentage

DEFAULT_QUESTION_MIX = "Question type distribution: 70% open-ended, 20% fill-in-blank, 10% application"

SECTION_SEPARATOR = "\n\n"


def build_base_context(document_text: str, progress: ProgressState) -> str:
    return BASE_CONTEXT_PROMPT.render(
        document_text=document_text or "",
        topics_studied=format_inline_list(sorted(progress.topics_studied), empty="None yet"),
        questions_answered=progress.questions_answered,
        accuracy=accuracy_percentage(progress.correct_answers, progress.questions_answered),
        weak_areas=format_inline_list(progress.weak_areas, empty="None identified"),
    )


def build_reference_section(
    materials: Sequence[ReferenceMaterial],
    preview_chars: int = REFERENCE_PREVIEW_CHARS,
) -> str:
    """Enumerate materials with a fixed-length preview. Empty string when there are none."""
    if not materials:
        return ""

    entries = []
    for index, material in enumerate(materials, start=1):
        text = material.text or ""
        entries.append(REFERENCE_MATERIAL_ENTRY.render(
            index=index,
            title=material.title or "Untitled",
            pages=material.page_count if material.page_count is not None else "N/A",
            preview_chars=preview_chars,
            preview=text[:preview_chars] if text else "No content available",
            truncation=f"\n   {TRUNCATION_MARKER}" if len(text) > preview_chars else "",
        ))

    return SECTION_SEPARATOR.join([
        REFERENCE_MATERIALS_HEADER.render(material_count=len(materials)),
        *entries,
        REFERENCE_MATERIALS_GUIDANCE.render(),
    ])


def build_exam_section(exam_config: Optional[ExamConfig]) -> str:
    if exam_config is None:
        return ""

    sections = []
    if exam_config.learning_objectives:
        sections.append(
            "Learning Objectives (What the student MUST know):\n"
            + format_numbered_list(exam_config.learning_objectives)
        )
    if exam_config.common_pitfalls:
        sections.append(
            "⚠️  Common Pitfalls to Avoid:\n"
            + format_numbered_list(exam_config.common_pitfalls)
        )
    if exam_config.time_constraints:
        sections.append(
            f"⏱️  Time Constraint: {exam_config.time_constraints} minutes\n"
            "(Consider pacing in your explanations and practice questions)"
        )
    if exam_config.special_instructions:
        sections.append(f"Special Instructions:\n{exam_config.special_instructions}")

    optional_sections = "".join(f"\n{section}\n" for section in sections)
    return EXAM_CONFIG_PROMPT.render(
        exam_type=exam_config.exam_type,
        difficulty_level=exam_config.difficulty_level,
        optional_sections=optional_sections,
    )


def build_quiz_instructions(progress: ProgressState, exam_config: Optional[ExamConfig]) -> str:
    objectives = exam_config.learning_objectives if exam_config else []

    if progress.weak_areas:
        focus_areas = ", ".join(progress.weak_areas)
    elif objectives:
        focus_areas = "learning objectives"
    else:
        focus_areas = "all topics"

    objectives_section = ""
    if objectives:
        objectives_section = (
            "\n- Prioritize these learning objectives:\n"
            + format_numbered_list(objectives, indent="  ")
        )

    pitfalls_section = ""
    if exam_config and exam_config.common_pitfalls:
        pitfalls_section = "\n- Test understanding of common pitfalls"

    return QUIZ_MODE_PROMPT.render(
        difficulty=exam_config.difficulty_level if exam_config else "appropriate",
        question_format=(
            f"Match the {exam_config.exam_type} exam format" if exam_config else DEFAULT_QUESTION_MIX
        ),
        focus_areas=focus_areas,
        objectives_section=objectives_section,
        pitfalls_section=pitfalls_section,
    )


def build_mode_instructions(
    mode: Mode,
    progress: ProgressState,
    exam_config: Optional[ExamConfig] = None,
) -> str:
    mode = Mode(mode)
    if mode == Mode.REVIEW:
        return REVIEW_MODE_PROMPT.render()
    if mode == Mode.QUIZ:
        return build_quiz_instructions(progress, exam_config)
    return LEARN_MODE_PROMPT.render()


def build_system_prompt(
    mode: Mode,
    document_text: str,
    progress: ProgressState,
    exam_config: Optional[ExamConfig] = None,
    reference_materials: Sequence[ReferenceMaterial] = (),
    preview_chars: int = REFERENCE_PREVIEW_CHARS,
) -> str:
    """Assemble the full system instruction; absent inputs simply drop their layer."""
    sections = [
        build_base_context(document_text, progress),
        build_reference_section(reference_materials, preview_chars),
        build_exam_section(exam_config),
        build_mode_instructions(mode, progress, exam_config),
    ]
    return SECTION_SEPARATOR.join(section for section in sections if section)


# Quiz user prompts

def quiz_start_prompt() -> str:
    return QUIZ_START_PROMPT.render()


def next_question_prompt() -> str:
    return NEXT_QUESTION_PROMPT.render()


def answer_evaluation_prompt(question: Optional[str], answer: str) -> str:
    return ANSWER_EVALUATION_PROMPT.render(
        question=question or "(the most recent question in this conversation)",
        answer=answer,
    )
