"""
Core entities and value objects for the registrar platform.
"""

import uuid
from abc import ABC
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Union

from .enums import EnrollmentStatus, LetterGrade
from .exceptions import ValidationError


class AbstractEntity(ABC):
    """Base abstract entity with universal ID, timestamps and versioning."""

    def __init__(self, entity_id: Optional[str] = None):
        self._id = entity_id or str(uuid.uuid4())
        self._created_at = datetime.now(timezone.utc)
        self._updated_at = self._created_at
        self._version = 1

    @property
    def id(self) -> str:
        """Get the entity ID."""
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def version(self) -> int:
        return self._version

    def touch(self) -> None:
        """Bump the version and update timestamp."""
        self._updated_at = datetime.now(timezone.utc)
        self._version += 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dictionary."""
        return {
            'id': self._id,
            'created_at': self._created_at.isoformat(),
            'updated_at': self._updated_at.isoformat(),
            'version': self._version,
        }

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id}, version={self._version})"


@dataclass(frozen=True)
class AssessmentDefinition:
    """A weighted graded component of a course, e.g. a midterm worth 25%."""
    id: str
    weight: float
    max_score: float = 100.0
    name: str = ""
    sort_order: int = 0

    def __post_init__(self):
        if not 0 <= self.weight <= 100:
            raise ValidationError(
                f"Assessment weight must be between 0 and 100, got {self.weight}",
                details={"assessment_id": self.id},
            )
        if self.max_score <= 0:
            raise ValidationError(
                f"Assessment max score must be positive, got {self.max_score}",
                details={"assessment_id": self.id},
            )


@dataclass(frozen=True)
class ScoreEntry:
    """Score recorded for one assessment; score None means not yet entered."""
    assessment_id: str
    score: Optional[float] = None
    max_score: Optional[float] = None

    def __post_init__(self):
        if self.score is not None and self.score < 0:
            raise ValidationError(
                f"Score cannot be negative, got {self.score}",
                details={"assessment_id": self.assessment_id},
            )
        if self.max_score is not None and self.max_score <= 0:
            raise ValidationError(
                f"Score max must be positive, got {self.max_score}",
                details={"assessment_id": self.assessment_id},
            )


@dataclass(frozen=True)
class Percentage:
    """A complete weighted percentage in [0, 100]."""
    value: int
    is_complete = True


@dataclass(frozen=True)
class Incomplete:
    """Returned instead of a percentage while scores are still missing."""
    reason: str = "missing scores"
    is_complete = False


PercentageResult = Union[Percentage, Incomplete]


@dataclass(frozen=True)
class PrerequisiteEdge:
    """States that course_code may not be taken before prerequisite_code."""
    id: str
    course_code: str
    prerequisite_code: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.id,
            'course_code': self.course_code,
            'prerequisite_code': self.prerequisite_code,
        }


@dataclass
class PrerequisiteCheckResult:
    """Outcome of a prerequisite check; missing keeps declaration order."""
    met: bool
    missing: List[str] = field(default_factory=list)


class Enrollment(AbstractEntity):
    """A student's enrollment in one course offering."""

    def __init__(self, student_id: str, course_id: str, course_code: str,
                 credits: int, semester_code: str, semester_start: date,
                 course_name: str = "", semester_name: str = "",
                 status: EnrollmentStatus = EnrollmentStatus.ENROLLED, **kwargs):
        super().__init__(**kwargs)
        if credits < 0:
            raise ValidationError("Credits cannot be negative")
        self._student_id = student_id
        self._course_id = course_id
        self._course_code = course_code
        self._course_name = course_name or course_code
        self._credits = credits
        self._semester_code = semester_code
        self._semester_name = semester_name or semester_code
        self._semester_start = semester_start
        self._status = status
        self._grade: Optional[LetterGrade] = None
        self._grade_points: Optional[float] = None

    @property
    def student_id(self) -> str:
        return self._student_id

    @property
    def course_id(self) -> str:
        return self._course_id

    @property
    def course_code(self) -> str:
        return self._course_code

    @property
    def course_name(self) -> str:
        return self._course_name

    @property
    def credits(self) -> int:
        return self._credits

    @property
    def semester_code(self) -> str:
        return self._semester_code

    @property
    def semester_name(self) -> str:
        return self._semester_name

    @property
    def semester_start(self) -> date:
        return self._semester_start

    @property
    def status(self) -> EnrollmentStatus:
        return self._status

    @property
    def grade(self) -> Optional[LetterGrade]:
        return self._grade

    @property
    def grade_points(self) -> Optional[float]:
        """Grade point value multiplied by credits, None for non-GPA grades."""
        return self._grade_points

    def record_grade(self, grade: LetterGrade, grade_points: Optional[float]) -> None:
        """Store a final grade and mark the enrollment completed."""
        self._grade = grade
        self._grade_points = grade_points
        self._status = EnrollmentStatus.COMPLETED
        self.touch()

    def drop(self) -> None:
        self._status = EnrollmentStatus.DROPPED
        self.touch()

    def to_dict(self) -> Dict[str, Any]:
        """Convert enrollment to dictionary."""
        base_dict = super().to_dict()
        base_dict.update({
            'student_id': self._student_id,
            'course_id': self._course_id,
            'course_code': self._course_code,
            'course_name': self._course_name,
            'credits': self._credits,
            'semester_code': self._semester_code,
            'semester_name': self._semester_name,
            'semester_start': self._semester_start.isoformat(),
            'status': self._status.value,
            'grade': self._grade.value if self._grade else None,
            'grade_points': self._grade_points,
        })
        return base_dict
