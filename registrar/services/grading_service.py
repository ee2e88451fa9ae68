"""
Grading service: assessment definitions, score entry, grades and transcripts.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Union

from ..core.entities import (
    AssessmentDefinition, Enrollment, Percentage, PercentageResult, ScoreEntry
)
from ..core.enums import AcademicStanding, EnrollmentStatus, LetterGrade
from ..core.exceptions import NotFoundError, ValidationError
from ..core.grading import (
    DEFAULT_ASSESSMENT_WEIGHTS, DEFAULT_GRADE_SCALE, GradeScale, compute_weighted_percentage,
    grade_to_points, parse_grade, percentage_to_grade, validate_assessment_weights,
)
from ..core.interfaces import CourseCatalog, EnrollmentHistory, ScoreStore
from ..core.standing import GpaSummary, Transcript, build_transcript

logger = logging.getLogger(__name__)


@dataclass
class AssessmentInput:
    """One assessment of a course as entered by an instructor."""
    name: str
    weight: float
    max_score: float = 100.0


@dataclass
class PercentageReport:
    """Weighted percentage of an enrollment with the grade it would earn."""
    enrollment_id: str
    result: PercentageResult
    suggested_grade: Optional[LetterGrade] = None


def default_assessment_inputs() -> List[AssessmentInput]:
    return [AssessmentInput(name, weight, max_score) for name, weight, max_score in DEFAULT_ASSESSMENT_WEIGHTS]


class GradingService:
    """Coordinates the grading stores with the pure grading computations."""

    def __init__(self, catalog: CourseCatalog, scores: ScoreStore, history: EnrollmentHistory,
                 grade_scale: Optional[GradeScale] = None):
        self._catalog = catalog
        self._scores = scores
        self._history = history
        self._grade_scale = grade_scale or DEFAULT_GRADE_SCALE

    @property
    def grade_scale(self) -> GradeScale:
        return self._grade_scale

    # Assessments

    def define_assessments(self, course_id: str,
                           items: Optional[Sequence[AssessmentInput]] = None) -> List[AssessmentDefinition]:
        """
        Replace a course's assessment set after checking the weights total 100.

        Without items the course gets the default template.
        """
        if items is None:
            items = default_assessment_inputs()
        definitions = [
            AssessmentDefinition(
                id=str(uuid.uuid4()),
                name=item.name,
                weight=item.weight,
                max_score=item.max_score,
                sort_order=index,
            )
            for index, item in enumerate(items)
        ]
        validate_assessment_weights(definitions)
        saved = self._catalog.save_assessment_definitions(course_id, definitions)
        logger.info("Defined %d assessments for course %s", len(saved), course_id)
        return saved

    def get_assessments(self, course_id: str) -> List[AssessmentDefinition]:
        return self._catalog.get_assessment_definitions(course_id)

    # Enrollments and scores

    def register_enrollment(self, student_id: str, course_id: str, course_code: str,
                            credits: int, semester_code: str, semester_start: date,
                            course_name: str = "", semester_name: str = "") -> Enrollment:
        enrollment = Enrollment(
            student_id=student_id,
            course_id=course_id,
            course_code=course_code.strip().upper(),
            course_name=course_name,
            credits=credits,
            semester_code=semester_code,
            semester_name=semester_name,
            semester_start=semester_start,
        )
        self._history.save_enrollment(enrollment)
        logger.info("Registered enrollment %s: student %s in %s (%s)",
                    enrollment.id, student_id, enrollment.course_code, semester_code)
        return enrollment

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        enrollment = self._history.find_enrollment(enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found", details={"enrollment_id": enrollment_id})
        return enrollment

    def record_scores(self, enrollment_id: str, entries: Sequence[ScoreEntry]) -> None:
        """Store scores for assessments that belong to the enrollment's course."""
        enrollment = self.get_enrollment(enrollment_id)
        known = {a.id for a in self._catalog.get_assessment_definitions(enrollment.course_id)}
        unknown = [e.assessment_id for e in entries if e.assessment_id not in known]
        if unknown:
            raise NotFoundError(
                "Assessment not found for this course",
                details={"assessment_ids": unknown, "course_id": enrollment.course_id},
            )
        self._scores.save_scores(enrollment_id, entries)
        logger.debug("Saved %d scores for enrollment %s", len(entries), enrollment_id)

    def compute_percentage(self, enrollment_id: str) -> PercentageResult:
        enrollment = self.get_enrollment(enrollment_id)
        assessments = self._catalog.get_assessment_definitions(enrollment.course_id)
        return compute_weighted_percentage(assessments, self._scores.get_scores(enrollment_id))

    def percentage_report(self, enrollment_id: str) -> PercentageReport:
        result = self.compute_percentage(enrollment_id)
        grade = None
        if isinstance(result, Percentage):
            grade = percentage_to_grade(result.value, self._grade_scale)
        return PercentageReport(enrollment_id=enrollment_id, result=result, suggested_grade=grade)

    def suggest_grade(self, enrollment_id: str) -> Optional[LetterGrade]:
        """Letter grade earned by the weighted score, None while incomplete."""
        return self.percentage_report(enrollment_id).suggested_grade

    def drop_enrollment(self, enrollment_id: str) -> Enrollment:
        """Drop an active enrollment; a student keeps at least one course per semester."""
        enrollment = self.get_enrollment(enrollment_id)

        if enrollment.status is not EnrollmentStatus.ENROLLED:
            logger.warning("Rejected drop of enrollment %s with status %s",
                           enrollment_id, enrollment.status.value)
            raise ValidationError(
                "Can only drop active enrollments",
                details={"status": enrollment.status.value},
            )

        active = [
            e for e in self._history.get_transcript_records(enrollment.student_id)
            if e.semester_code == enrollment.semester_code and e.status is EnrollmentStatus.ENROLLED
        ]
        if len(active) <= 1:
            logger.warning("Rejected drop of last course %s for student %s",
                           enrollment.course_code, enrollment.student_id)
            raise ValidationError(
                "Cannot drop your last enrolled course",
                details={"semester_code": enrollment.semester_code},
            )

        enrollment.drop()
        self._history.save_enrollment(enrollment)
        logger.info("Dropped enrollment %s: student %s from %s",
                    enrollment_id, enrollment.student_id, enrollment.course_code)
        return enrollment

    # Grades

    def submit_grade(self, enrollment_id: str, grade: Union[LetterGrade, str]) -> Enrollment:
        """Record a final grade; grade points stored are points times credits."""
        letter = parse_grade(grade)
        enrollment = self.get_enrollment(enrollment_id)

        if enrollment.status not in (EnrollmentStatus.ENROLLED, EnrollmentStatus.COMPLETED):
            logger.warning("Rejected grade for enrollment %s with status %s",
                           enrollment_id, enrollment.status.value)
            raise ValidationError(
                "Can only grade students with ENROLLED or COMPLETED status",
                details={"status": enrollment.status.value},
            )

        points = grade_to_points(letter)
        enrollment.record_grade(letter, points * enrollment.credits if points is not None else None)
        self._history.save_enrollment(enrollment)
        logger.info("Graded enrollment %s: %s", enrollment_id, letter.value)
        return enrollment

    # Transcripts

    def get_transcript(self, student_id: str) -> Transcript:
        return build_transcript(self._history.get_transcript_records(student_id))

    def get_gpa_summary(self, student_id: str) -> GpaSummary:
        return self.get_transcript(student_id).summary

    def get_standing(self, student_id: str) -> AcademicStanding:
        return self.get_gpa_summary(student_id).academic_standing
