"""
GPA aggregation, transcripts and academic standing.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from .entities import Enrollment
from .enums import AcademicStanding
from .grading import GRADE_LABELS, GRADE_POINTS, round_half_up


DEANS_LIST_THRESHOLD = 3.5
GOOD_STANDING_THRESHOLD = 2.0


def evaluate_standing(gpa: Optional[float]) -> AcademicStanding:
    """Classify a GPA; lower bounds are inclusive."""
    if gpa is None or math.isnan(gpa):
        return AcademicStanding.NOT_YET_RATED
    if gpa >= DEANS_LIST_THRESHOLD:
        return AcademicStanding.DEANS_LIST
    if gpa >= GOOD_STANDING_THRESHOLD:
        return AcademicStanding.GOOD_STANDING
    return AcademicStanding.ACADEMIC_PROBATION


def _points_for(enrollment: Enrollment) -> Optional[float]:
    if enrollment.grade is None:
        return None
    return GRADE_POINTS[enrollment.grade]


def calculate_gpa(enrollments: Iterable[Enrollment]) -> Optional[float]:
    """Credit-weighted GPA rounded to 3 places; None when nothing counts."""
    total_points = 0.0
    total_credits = 0

    for enrollment in enrollments:
        points = _points_for(enrollment)
        if points is None:
            continue
        total_points += points * enrollment.credits
        total_credits += enrollment.credits

    if total_credits == 0:
        return None
    return round_half_up(total_points / total_credits, 3)


def gpa_eligible_enrollments(enrollments: Iterable[Enrollment]) -> Set[str]:
    """
    Ids of the enrollments that count toward GPA.

    When a course code was taken more than once only the attempt from the
    latest semester counts. Enrollments without a GPA-impacting grade never
    count.
    """
    latest: Dict[str, Enrollment] = {}
    for enrollment in enrollments:
        if _points_for(enrollment) is None:
            continue
        current = latest.get(enrollment.course_code)
        if current is None or enrollment.semester_start > current.semester_start:
            latest[enrollment.course_code] = enrollment
    return {e.id for e in latest.values()}


@dataclass
class TranscriptCourse:
    course_code: str
    course_name: str
    credits: int
    grade: Optional[str]
    grade_label: Optional[str]
    grade_points: Optional[float]
    status: str
    counts_toward_gpa: bool


@dataclass
class TranscriptSemester:
    semester_code: str
    semester_name: str
    courses: List[TranscriptCourse] = field(default_factory=list)
    semester_gpa: Optional[float] = None
    semester_credits: int = 0
    semester_grade_points: float = 0.0


@dataclass
class GpaSummary:
    cumulative_gpa: Optional[float]
    total_credits: int
    total_grade_points: float
    academic_standing: AcademicStanding

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cumulative_gpa": self.cumulative_gpa,
            "total_credits": self.total_credits,
            "total_grade_points": self.total_grade_points,
            "academic_standing": self.academic_standing.value,
        }


@dataclass
class Transcript:
    semesters: List[TranscriptSemester]
    summary: GpaSummary


def build_transcript(enrollments: List[Enrollment]) -> Transcript:
    """Group enrollments by semester and compute semester and cumulative GPA."""
    eligible = gpa_eligible_enrollments(enrollments)

    grouped: Dict[str, List[Enrollment]] = {}
    for enrollment in enrollments:
        grouped.setdefault(enrollment.semester_code, []).append(enrollment)

    semesters: List[TranscriptSemester] = []
    all_points = 0.0
    all_credits = 0

    for semester_code, semester_enrollments in grouped.items():
        counted = [e for e in semester_enrollments if e.id in eligible]
        semester = TranscriptSemester(
            semester_code=semester_code,
            semester_name=semester_enrollments[0].semester_name,
            semester_gpa=calculate_gpa(counted),
        )

        for enrollment in semester_enrollments:
            semester.courses.append(TranscriptCourse(
                course_code=enrollment.course_code,
                course_name=enrollment.course_name,
                credits=enrollment.credits,
                grade=enrollment.grade.value if enrollment.grade else None,
                grade_label=GRADE_LABELS[enrollment.grade] if enrollment.grade else None,
                grade_points=enrollment.grade_points,
                status=enrollment.status.value,
                counts_toward_gpa=enrollment.id in eligible,
            ))

        for enrollment in counted:
            points = _points_for(enrollment) * enrollment.credits
            semester.semester_credits += enrollment.credits
            semester.semester_grade_points += points
            all_points += points
            all_credits += enrollment.credits

        semesters.append(semester)

    cumulative = round_half_up(all_points / all_credits, 3) if all_credits else None
    summary = GpaSummary(
        cumulative_gpa=cumulative,
        total_credits=all_credits,
        total_grade_points=all_points,
        academic_standing=evaluate_standing(cumulative),
    )
    return Transcript(semesters=semesters, summary=summary)
