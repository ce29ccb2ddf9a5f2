"""Unit tests for tutor/services/grading.py: accuracy and grade bands."""

import pytest

from tutor.services.grading import (
    GRADE_LABELS,
    GradeBand,
    accuracy_percentage,
    band_for_percentage,
    classify,
    is_correct_evaluation,
)


# ---------------------------------------------------------------------------
# accuracy_percentage
# ---------------------------------------------------------------------------

class TestAccuracyPercentage:
    def test_zero_answered_is_zero(self):
        assert accuracy_percentage(0, 0) == 0

    def test_exact_values(self):
        assert accuracy_percentage(9, 10) == 90
        assert accuracy_percentage(3, 4) == 75

    @pytest.mark.parametrize("correct,answered,expected", [
        (1, 8, 13),   # 12.5
        (5, 8, 63),   # 62.5
        (1, 3, 33),   # 33.33
        (2, 3, 67),   # 66.67
    ])
    def test_rounds_half_up(self, correct, answered, expected):
        assert accuracy_percentage(correct, answered) == expected


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------

class TestClassify:
    def test_distinction_merit_fail(self):
        assert classify(9, 10).band == GradeBand.DISTINCTION
        assert classify(9, 10).percentage == 90

        assert classify(8, 10).band == GradeBand.MERIT
        assert classify(8, 10).percentage == 80

        assert classify(5, 10).band == GradeBand.FAIL
        assert classify(5, 10).percentage == 50

    def test_nothing_answered_is_fail(self):
        result = classify(0, 0)
        assert result.band == GradeBand.FAIL
        assert result.label == "Not Yet Passing"

    @pytest.mark.parametrize("percentage,band", [
        (100, GradeBand.DISTINCTION),
        (90, GradeBand.DISTINCTION),
        (89, GradeBand.MERIT),
        (76, GradeBand.MERIT),
        (75, GradeBand.PASS),
        (55, GradeBand.PASS),
        (54, GradeBand.FAIL),
        (0, GradeBand.FAIL),
    ])
    def test_band_boundaries_inclusive(self, percentage, band):
        assert band_for_percentage(percentage) == band

    def test_labels(self):
        assert GRADE_LABELS[GradeBand.DISTINCTION] == "Pass with Distinction"
        assert GRADE_LABELS[GradeBand.MERIT] == "Pass with Merit"
        assert GRADE_LABELS[GradeBand.PASS] == "Pass"
        assert classify(6, 10).label == "Pass"


# ---------------------------------------------------------------------------
# is_correct_evaluation
# ---------------------------------------------------------------------------

class TestIsCorrectEvaluation:
    def test_marker_case_insensitive(self):
        assert is_correct_evaluation("Correct: Yes\nWell done.") is True
        assert is_correct_evaluation("CORRECT: YES") is True

    @pytest.mark.parametrize("text", [
        "Correct: No. The answer is osmosis.",
        "Correct: Partial",
        "Yes, that is correct!",
        "",
        None,
    ])
    def test_anything_else_is_incorrect(self, text):
        assert is_correct_evaluation(text) is False
