"""
Grading

Accuracy percentage, grade-band classification, and the correctness signal
read out of an evaluation reply.
"""

from enum import Enum
from pydantic import BaseModel

from shared.utils.constants import GRADE_DISTINCTION, GRADE_MERIT, GRADE_PASS

# Evaluation replies must contain this marker (case-insensitive) to count as correct.
CORRECT_MARKER = "correct: yes"


class GradeBand(str, Enum):
    DISTINCTION = "DISTINCTION"
    MERIT = "MERIT"
    PASS = "PASS"
    FAIL = "FAIL"


GRADE_LABELS = {
    GradeBand.DISTINCTION: "Pass with Distinction",
    GradeBand.MERIT: "Pass with Merit",
    GradeBand.PASS: "Pass",
    GradeBand.FAIL: "Not Yet Passing",
}

# Evaluated high to low; lower bounds are inclusive.
GRADE_THRESHOLDS = (
    (GRADE_DISTINCTION, GradeBand.DISTINCTION),
    (GRADE_MERIT, GradeBand.MERIT),
    (GRADE_PASS, GradeBand.PASS),
)


class GradeResult(BaseModel):
    band: GradeBand
    label: str
    percentage: int


def accuracy_percentage(correct_answers: int, questions_answered: int) -> int:
    """Percentage correct, rounded half up; 0 when nothing has been answered.

    Integer arithmetic, so 12.5 rounds to 13 and 62.5 to 63 with no float drift.
    """
    if questions_answered <= 0:
        return 0
    return (200 * correct_answers + questions_answered) // (2 * questions_answered)


def band_for_percentage(percentage: int) -> GradeBand:
    for threshold, band in GRADE_THRESHOLDS:
        if percentage >= threshold:
            return band
    return GradeBand.FAIL


def classify(correct_answers: int, questions_answered: int) -> GradeResult:
    percentage = accuracy_percentage(correct_answers, questions_answered)
    band = band_for_percentage(percentage)
    return GradeResult(band=band, label=GRADE_LABELS[band], percentage=percentage)


def is_correct_evaluation(evaluation_text: str) -> bool:
    """True only when the reply carries the explicit affirmative marker."""
    if not evaluation_text:
        return False
    return CORRECT_MARKER in evaluation_text.lower()
