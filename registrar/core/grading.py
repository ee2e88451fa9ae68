"""
Weighted score aggregation and letter grade mapping.

The percentage pipeline is::

    assessment definitions + score entries
        -> compute_weighted_percentage()  -> Percentage | Incomplete
        -> percentage_to_grade()          -> LetterGrade
        -> grade_to_points() / grade_to_label()

Everything here is pure; the grade tables are immutable module constants.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .entities import (
    AssessmentDefinition, Incomplete, Percentage, PercentageResult, ScoreEntry
)
from .enums import LetterGrade
from .exceptions import ConfigurationError, InvalidGradeError, ValidationError


# Older score rows were saved with max 100 while the value was really
# "points out of the assessment weight" (e.g. 11 of 15 stored as 11/100).
LEGACY_MAX_SCORE = 100

REQUIRED_WEIGHT_TOTAL = 100

# Template for new courses; max score equals weight so scores read as points.
DEFAULT_ASSESSMENT_WEIGHTS: Tuple[Tuple[str, float, float], ...] = (
    ("Test 1", 15, 15),
    ("Mid-Exam", 25, 25),
    ("Assignment", 15, 15),
    ("Quiz", 5, 5),
    ("Final Exam", 40, 40),
)

GRADE_POINTS: Mapping[LetterGrade, Optional[float]] = MappingProxyType({
    LetterGrade.A_PLUS: 4.0,
    LetterGrade.A: 4.0,
    LetterGrade.A_MINUS: 3.75,
    LetterGrade.B_PLUS: 3.5,
    LetterGrade.B: 3.0,
    LetterGrade.B_MINUS: 2.75,
    LetterGrade.C_PLUS: 2.5,
    LetterGrade.C: 2.0,
    LetterGrade.D: 1.0,
    LetterGrade.F: 0.0,
    LetterGrade.P: None,
    LetterGrade.I: None,
    LetterGrade.W: None,
    LetterGrade.DO: None,
    LetterGrade.NG: None,
})

GRADE_LABELS: Mapping[LetterGrade, str] = MappingProxyType({
    LetterGrade.A_PLUS: "A+",
    LetterGrade.A: "A",
    LetterGrade.A_MINUS: "A-",
    LetterGrade.B_PLUS: "B+",
    LetterGrade.B: "B",
    LetterGrade.B_MINUS: "B-",
    LetterGrade.C_PLUS: "C+",
    LetterGrade.C: "C",
    LetterGrade.D: "D",
    LetterGrade.F: "F",
    LetterGrade.P: "P",
    LetterGrade.I: "I",
    LetterGrade.W: "W",
    LetterGrade.DO: "DO",
    LetterGrade.NG: "NG",
})

# Completions with these grades do not satisfy a prerequisite.
NON_PASSING_GRADES = frozenset({
    LetterGrade.F, LetterGrade.W, LetterGrade.DO, LetterGrade.NG, LetterGrade.I,
})

_GRADES_BY_LABEL = {label: grade for grade, label in GRADE_LABELS.items()}


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round .5 away from zero for positive values instead of to even."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


# ---------------------------------------------------------------------------
# Score aggregation
# ---------------------------------------------------------------------------

def validate_assessment_weights(assessments: Sequence[AssessmentDefinition]) -> None:
    """Check a course's assessment set at definition time."""
    if not assessments:
        raise ValidationError("At least one assessment is required")
    total = sum(a.weight for a in assessments)
    if not math.isclose(total, REQUIRED_WEIGHT_TOTAL):
        raise ValidationError(
            "Assessment weights must total 100%",
            details={"total_weight": total},
        )
    ids = [a.id for a in assessments]
    if len(set(ids)) != len(ids):
        raise ValidationError("Assessment ids must be unique")


def effective_max_score(definition: AssessmentDefinition, entry: ScoreEntry) -> float:
    """
    Maximum a score is measured against, honouring legacy rows.

    Only a score row that itself carries the legacy max of 100 is re-read
    as points out of the weight; a definition max of 100 is taken as is.
    """
    if entry.max_score == LEGACY_MAX_SCORE:
        return definition.weight
    return entry.max_score or definition.max_score


def compute_weighted_percentage(assessments: Iterable[AssessmentDefinition],
                                scores: Mapping[str, ScoreEntry]) -> PercentageResult:
    """
    Combine per-assessment scores into a single rounded percentage.

    Any assessment without a score makes the whole result Incomplete; there
    is no partial credit. Assessments whose effective maximum is not
    positive are left out of both the numerator and the denominator.
    """
    weighted_sum = 0.0
    total_weight = 0.0

    for definition in assessments:
        entry = scores.get(definition.id)
        if entry is None or entry.score is None:
            return Incomplete(f"no score for assessment {definition.id}")

        max_score = effective_max_score(definition, entry)
        if max_score <= 0:
            continue

        weighted_sum += (entry.score / max_score) * definition.weight
        total_weight += definition.weight

    if total_weight == 0:
        return Incomplete("no weighted assessments")

    return Percentage(int(round_half_up(weighted_sum / total_weight * 100)))


# ---------------------------------------------------------------------------
# Grade mapping
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GradeBand:
    """Percentages at or above min_percentage earn grade."""
    min_percentage: float
    grade: LetterGrade


class GradeScale:
    """Ordered percentage cutoffs, checked from the highest threshold down."""

    def __init__(self, bands: Iterable[GradeBand]):
        ordered = sorted(bands, key=lambda b: b.min_percentage, reverse=True)
        if not ordered:
            raise ConfigurationError("Grade scale needs at least one band")
        thresholds = [b.min_percentage for b in ordered]
        if len(set(thresholds)) != len(thresholds):
            raise ConfigurationError("Grade scale thresholds must be unique")
        if ordered[-1].min_percentage != 0:
            raise ConfigurationError("Grade scale must have a band starting at 0")
        for band in ordered:
            if GRADE_POINTS[band.grade] is None:
                raise ConfigurationError(
                    f"{band.grade.value} is assigned manually and cannot be a scale band"
                )
        self._bands: Tuple[GradeBand, ...] = tuple(ordered)

    @property
    def bands(self) -> Tuple[GradeBand, ...]:
        return self._bands

    @classmethod
    def from_config(cls, entries: Iterable[Mapping]) -> "GradeScale":
        """Build a scale from ``[{"min": 90, "grade": "A_PLUS"}, ...]``."""
        bands = []
        for entry in entries:
            try:
                bands.append(GradeBand(float(entry["min"]), parse_grade(entry["grade"])))
            except (KeyError, TypeError, ValueError, InvalidGradeError) as e:
                raise ConfigurationError(f"Invalid grade scale entry {entry!r}: {e}")
        return cls(bands)

    def grade_for(self, percentage: float) -> LetterGrade:
        if math.isnan(percentage):
            raise ValidationError("Percentage must be a number")
        clamped = max(0.0, min(100.0, float(percentage)))
        for band in self._bands:
            if clamped >= band.min_percentage:
                return band.grade
        return self._bands[-1].grade

    def __iter__(self):
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)


DEFAULT_GRADE_SCALE = GradeScale([
    GradeBand(90, LetterGrade.A_PLUS),
    GradeBand(85, LetterGrade.A),
    GradeBand(80, LetterGrade.A_MINUS),
    GradeBand(75, LetterGrade.B_PLUS),
    GradeBand(70, LetterGrade.B),
    GradeBand(65, LetterGrade.B_MINUS),
    GradeBand(60, LetterGrade.C_PLUS),
    GradeBand(50, LetterGrade.C),
    GradeBand(40, LetterGrade.D),
    GradeBand(0, LetterGrade.F),
])


def parse_grade(value: Union[LetterGrade, str]) -> LetterGrade:
    """Accept a LetterGrade, its name ("A_PLUS") or its label ("A+")."""
    if isinstance(value, LetterGrade):
        return value
    if isinstance(value, str):
        key = value.strip().upper()
        if key in LetterGrade.__members__:
            return LetterGrade[key]
        if key in _GRADES_BY_LABEL:
            return _GRADES_BY_LABEL[key]
    raise InvalidGradeError(f"Unknown grade: {value!r}", details={"grade": str(value)})


def percentage_to_grade(percentage: float, scale: Optional[GradeScale] = None) -> LetterGrade:
    """Band a percentage into a letter grade; out-of-range input is clamped."""
    return (scale or DEFAULT_GRADE_SCALE).grade_for(percentage)


def grade_to_points(grade: Union[LetterGrade, str]) -> Optional[float]:
    """Grade points on the 4.0 scale, or None for grades with no GPA impact."""
    return GRADE_POINTS[parse_grade(grade)]


def grade_to_label(grade: Union[LetterGrade, str]) -> str:
    return GRADE_LABELS[parse_grade(grade)]


def is_passing_grade(grade: Union[LetterGrade, str]) -> bool:
    """Whether a completion with this grade satisfies a prerequisite."""
    return parse_grade(grade) not in NON_PASSING_GRADES


def scale_to_rows(scale: Optional[GradeScale] = None) -> List[dict]:
    """Flatten a scale for display, highest band first."""
    rows = []
    for band in scale or DEFAULT_GRADE_SCALE:
        rows.append({
            "min_percentage": band.min_percentage,
            "grade": band.grade.value,
            "label": GRADE_LABELS[band.grade],
            "points": GRADE_POINTS[band.grade],
        })
    return rows
