# tests/test_grading.py

import pytest

from registrar.core.entities import AssessmentDefinition, Incomplete, Percentage, ScoreEntry
from registrar.core.enums import LetterGrade
from registrar.core.exceptions import ConfigurationError, InvalidGradeError, ValidationError
from registrar.core.grading import (
    DEFAULT_ASSESSMENT_WEIGHTS,
    DEFAULT_GRADE_SCALE,
    GRADE_LABELS,
    GradeBand,
    GradeScale,
    compute_weighted_percentage,
    effective_max_score,
    grade_to_label,
    grade_to_points,
    is_passing_grade,
    parse_grade,
    percentage_to_grade,
    validate_assessment_weights,
)


def full_marks(assessments):
    return {a.id: ScoreEntry(a.id, a.max_score, a.max_score) for a in assessments}


def test_full_marks_is_exactly_100(sample_assessments):
    assert compute_weighted_percentage(sample_assessments, full_marks(sample_assessments)) == Percentage(100)


def test_default_template_full_marks_is_100():
    assessments = [
        AssessmentDefinition(id=name, name=name, weight=weight, max_score=max_score)
        for name, weight, max_score in DEFAULT_ASSESSMENT_WEIGHTS
    ]
    assert compute_weighted_percentage(assessments, full_marks(assessments)) == Percentage(100)


def test_missing_entry_is_incomplete(sample_assessments):
    scores = full_marks(sample_assessments)
    del scores["a002"]

    result = compute_weighted_percentage(sample_assessments, scores)

    assert isinstance(result, Incomplete)
    assert not result.is_complete


def test_null_score_is_incomplete(sample_assessments):
    scores = full_marks(sample_assessments)
    scores["a003"] = ScoreEntry("a003", None)

    assert isinstance(compute_weighted_percentage(sample_assessments, scores), Incomplete)


def test_incomplete_is_not_zero_percent(sample_assessments):
    zeros = {a.id: ScoreEntry(a.id, 0, a.max_score) for a in sample_assessments}

    assert compute_weighted_percentage(sample_assessments, zeros) == Percentage(0)
    assert compute_weighted_percentage(sample_assessments, {}) != Percentage(0)


def test_weighted_mix(sample_assessments):
    scores = {
        "a001": ScoreEntry("a001", 40, 50),   # 0.8 * 30 = 24
        "a002": ScoreEntry("a002", 10, 20),   # 0.5 * 30 = 15
        "a003": ScoreEntry("a003", 60, 80),   # 0.75 * 40 = 30
    }
    assert compute_weighted_percentage(sample_assessments, scores) == Percentage(69)


def test_legacy_max_100_uses_weight():
    test1 = AssessmentDefinition(id="t1", weight=15, max_score=15)
    rest = AssessmentDefinition(id="rest", weight=85, max_score=85)
    scores = {
        "t1": ScoreEntry("t1", 11, 100),
        "rest": ScoreEntry("rest", 85, 85),
    }

    assert effective_max_score(test1, scores["t1"]) == 15
    # 11/15 * 15 + 85 = 96, not 11/100 * 15 + 85 = 86.65
    assert compute_weighted_percentage([test1, rest], scores) == Percentage(96)


def test_definition_max_100_is_not_legacy():
    written = AssessmentDefinition(id="w", weight=40, max_score=100)
    oral = AssessmentDefinition(id="o", weight=60, max_score=100)
    scores = {"w": ScoreEntry("w", 100), "o": ScoreEntry("o", 100)}

    assert effective_max_score(written, scores["w"]) == 100
    assert compute_weighted_percentage([written, oral], scores) == Percentage(100)


def test_definition_max_100_partial_marks():
    written = AssessmentDefinition(id="w", weight=40, max_score=100)
    oral = AssessmentDefinition(id="o", weight=60, max_score=100)
    # 0.5 * 40 + 0.75 * 60 = 65
    scores = {"w": ScoreEntry("w", 50), "o": ScoreEntry("o", 75)}

    assert compute_weighted_percentage([written, oral], scores) == Percentage(65)


def test_entry_without_max_falls_back_to_definition():
    definition = AssessmentDefinition(id="q", weight=100, max_score=20)

    assert effective_max_score(definition, ScoreEntry("q", 5)) == 20
    assert compute_weighted_percentage([definition], {"q": ScoreEntry("q", 5)}) == Percentage(25)


def test_zero_weight_legacy_row_is_skipped():
    ungraded = AssessmentDefinition(id="x", weight=0, max_score=100)
    exam = AssessmentDefinition(id="e", weight=100, max_score=40)
    scores = {"x": ScoreEntry("x", 50, 100), "e": ScoreEntry("e", 30, 40)}

    assert compute_weighted_percentage([ungraded, exam], scores) == Percentage(75)


def test_no_weight_at_all_is_incomplete():
    ungraded = AssessmentDefinition(id="x", weight=0, max_score=100)

    assert isinstance(compute_weighted_percentage([ungraded], {"x": ScoreEntry("x", 5)}), Incomplete)


def test_rounds_half_up():
    a = AssessmentDefinition(id="a", weight=50, max_score=8)
    b = AssessmentDefinition(id="b", weight=50, max_score=8)
    # 5/8 on both halves is exactly 62.5%
    scores = {"a": ScoreEntry("a", 5, 8), "b": ScoreEntry("b", 5, 8)}

    assert compute_weighted_percentage([a, b], scores) == Percentage(63)


def test_validate_weights_accepts_100(sample_assessments):
    validate_assessment_weights(sample_assessments)


def test_validate_weights_rejects_other_totals(sample_assessments):
    with pytest.raises(ValidationError) as excinfo:
        validate_assessment_weights(sample_assessments[:2])
    assert excinfo.value.details["total_weight"] == 60


def test_validate_weights_rejects_empty():
    with pytest.raises(ValidationError):
        validate_assessment_weights([])


def test_definition_rejects_bad_weight():
    with pytest.raises(ValidationError):
        AssessmentDefinition(id="a", weight=120)


def test_score_entry_rejects_negative_score():
    with pytest.raises(ValidationError):
        ScoreEntry("a", -1)


def test_grade_points_lookup():
    assert grade_to_points("A") == 4.0
    assert grade_to_points("P") is None
    assert grade_to_points("F") == 0.0
    assert grade_to_points(LetterGrade.A_MINUS) == 3.75
    for special in ("P", "I", "W", "DO", "NG"):
        assert grade_to_points(special) is None


def test_grade_labels():
    assert grade_to_label(LetterGrade.A_PLUS) == "A+"
    assert grade_to_label("B_MINUS") == "B-"
    assert grade_to_label("DO") == "DO"


def test_unknown_grade_raises():
    with pytest.raises(InvalidGradeError):
        grade_to_points("E")
    with pytest.raises(InvalidGradeError):
        grade_to_label(42)
    with pytest.raises(ValidationError):
        parse_grade("")


def test_parse_grade_accepts_labels():
    assert parse_grade("A+") is LetterGrade.A_PLUS
    assert parse_grade("c+") is LetterGrade.C_PLUS
    assert parse_grade(" b_minus ") is LetterGrade.B_MINUS


@pytest.mark.parametrize(
    "percentage, grade",
    [
        (100, LetterGrade.A_PLUS),
        (90, LetterGrade.A_PLUS),
        (89, LetterGrade.A),
        (85, LetterGrade.A),
        (84, LetterGrade.A_MINUS),
        (75, LetterGrade.B_PLUS),
        (70, LetterGrade.B),
        (65, LetterGrade.B_MINUS),
        (60, LetterGrade.C_PLUS),
        (59, LetterGrade.C),
        (50, LetterGrade.C),
        (49, LetterGrade.D),
        (40, LetterGrade.D),
        (39, LetterGrade.F),
        (0, LetterGrade.F),
    ],
)
def test_percentage_to_grade_default_scale(percentage, grade):
    assert percentage_to_grade(percentage) is grade


def test_percentage_is_clamped():
    assert percentage_to_grade(140) is LetterGrade.A_PLUS
    assert percentage_to_grade(-5) is LetterGrade.F


def test_nan_percentage_rejected():
    with pytest.raises(ValidationError):
        percentage_to_grade(float("nan"))


def test_every_band_boundary_has_a_label():
    for band in DEFAULT_GRADE_SCALE:
        for pct in (band.min_percentage, min(band.min_percentage + 1, 100)):
            label = grade_to_label(percentage_to_grade(pct))
            assert label
            assert label in GRADE_LABELS.values()


def test_custom_scale_is_injectable():
    scale = GradeScale([
        GradeBand(0, LetterGrade.F),
        GradeBand(50, LetterGrade.C),
        GradeBand(80, LetterGrade.A),
    ])

    assert [b.min_percentage for b in scale.bands] == [80, 50, 0]
    assert percentage_to_grade(79, scale) is LetterGrade.C
    assert percentage_to_grade(80, scale) is LetterGrade.A


def test_scale_from_config():
    scale = GradeScale.from_config([{"min": 60, "grade": "B"}, {"min": 0, "grade": "F"}])

    assert percentage_to_grade(61, scale) is LetterGrade.B


def test_scale_requires_zero_band():
    with pytest.raises(ConfigurationError):
        GradeScale([GradeBand(50, LetterGrade.C)])


def test_scale_rejects_manual_grades():
    with pytest.raises(ConfigurationError):
        GradeScale([GradeBand(0, LetterGrade.P)])


def test_scale_rejects_bad_config_entry():
    with pytest.raises(ConfigurationError):
        GradeScale.from_config([{"min": 0, "grade": "Z"}])


def test_passing_grades():
    assert is_passing_grade("A")
    assert is_passing_grade("D")
    assert is_passing_grade("P")
    for grade in ("F", "W", "DO", "NG", "I"):
        assert not is_passing_grade(grade)
