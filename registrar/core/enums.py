"""
Enumerations for the registrar platform.
"""

from enum import Enum


class LetterGrade(Enum):
    """Letter grades that can be recorded on an enrollment."""
    A_PLUS = "A_PLUS"
    A = "A"
    A_MINUS = "A_MINUS"
    B_PLUS = "B_PLUS"
    B = "B"
    B_MINUS = "B_MINUS"
    C_PLUS = "C_PLUS"
    C = "C"
    D = "D"
    F = "F"
    P = "P"    # Pass
    I = "I"    # Incomplete
    W = "W"    # Withdrawn
    DO = "DO"  # Dropout
    NG = "NG"  # No grade


class AcademicStanding(Enum):
    """Academic standing derived from a GPA."""
    DEANS_LIST = "Dean's List"
    GOOD_STANDING = "Good Standing"
    ACADEMIC_PROBATION = "Academic Probation"
    NOT_YET_RATED = "N/A"


class EnrollmentStatus(Enum):
    """Status of a student's enrollment in a course."""
    ENROLLED = "ENROLLED"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"
