"""
Core module containing the grading and academic standing computations.
"""

from .entities import *
from .enums import *
from .exceptions import *
from .grading import (
    DEFAULT_ASSESSMENT_WEIGHTS, DEFAULT_GRADE_SCALE, GRADE_LABELS, GRADE_POINTS,
    GradeBand, GradeScale, compute_weighted_percentage, grade_to_label,
    grade_to_points, is_passing_grade, parse_grade, percentage_to_grade,
    validate_assessment_weights,
)
from .interfaces import *
from .standing import (
    GpaSummary, Transcript, build_transcript, calculate_gpa, evaluate_standing,
)

__all__ = [
    # Entities
    "AbstractEntity",
    "AssessmentDefinition",
    "ScoreEntry",
    "Percentage",
    "Incomplete",
    "PercentageResult",
    "PrerequisiteEdge",
    "PrerequisiteCheckResult",
    "Enrollment",

    # Interfaces
    "CourseCatalog",
    "ScoreStore",
    "PrerequisiteStore",
    "EnrollmentHistory",

    # Enums
    "LetterGrade",
    "AcademicStanding",
    "EnrollmentStatus",

    # Grading
    "DEFAULT_ASSESSMENT_WEIGHTS",
    "DEFAULT_GRADE_SCALE",
    "GRADE_LABELS",
    "GRADE_POINTS",
    "GradeBand",
    "GradeScale",
    "compute_weighted_percentage",
    "grade_to_label",
    "grade_to_points",
    "is_passing_grade",
    "parse_grade",
    "percentage_to_grade",
    "validate_assessment_weights",

    # Standing
    "GpaSummary",
    "Transcript",
    "build_transcript",
    "calculate_gpa",
    "evaluate_standing",

    # Exceptions
    "RegistrarException",
    "ValidationError",
    "InvalidGradeError",
    "ConflictError",
    "NotFoundError",
    "PersistenceError",
    "ConfigurationError",
]
