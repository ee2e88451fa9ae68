"""
Collaborator interfaces the grading core reads from and writes to.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from .entities import AssessmentDefinition, Enrollment, PrerequisiteEdge, ScoreEntry
from .enums import LetterGrade


class CourseCatalog(ABC):
    """Source of a course's assessment definitions."""

    @abstractmethod
    def get_assessment_definitions(self, course_id: str) -> List[AssessmentDefinition]:
        """Get a course's assessments in their defined order."""
        pass

    @abstractmethod
    def save_assessment_definitions(self, course_id: str,
                                    definitions: Sequence[AssessmentDefinition]) -> List[AssessmentDefinition]:
        """Replace all of a course's assessments."""
        pass


class ScoreStore(ABC):
    """Per-enrollment assessment scores."""

    @abstractmethod
    def get_scores(self, enrollment_id: str) -> Dict[str, ScoreEntry]:
        """Get scores keyed by assessment id."""
        pass

    @abstractmethod
    def save_scores(self, enrollment_id: str, entries: Sequence[ScoreEntry]) -> None:
        """Insert or update the given scores."""
        pass


class PrerequisiteStore(ABC):
    """Storage of prerequisite edges."""

    @abstractmethod
    def get_edges(self, course_code: str) -> List[str]:
        """Get the prerequisite codes of a course in declaration order."""
        pass

    @abstractmethod
    def insert_edge(self, course_code: str, prerequisite_code: str) -> PrerequisiteEdge:
        """Insert an edge; raises ConflictError when it already exists."""
        pass

    @abstractmethod
    def delete_edge(self, edge_id: str) -> bool:
        """Delete an edge, returning False when it does not exist."""
        pass

    @abstractmethod
    def list_for_course(self, course_code: str) -> List[PrerequisiteEdge]:
        pass

    @abstractmethod
    def list_all(self) -> List[PrerequisiteEdge]:
        pass

    @abstractmethod
    def get_edge_map(self) -> Dict[str, List[str]]:
        """Get the whole relation as course code -> prerequisite codes."""
        pass


class EnrollmentHistory(ABC):
    """A student's enrollments and completed courses."""

    @abstractmethod
    def get_completed_courses(self, student_id: str) -> List[Tuple[str, LetterGrade]]:
        """Get (course code, grade) for every completed attempt."""
        pass

    @abstractmethod
    def get_transcript_records(self, student_id: str) -> List[Enrollment]:
        """Get all of a student's enrollments ordered by semester start."""
        pass

    @abstractmethod
    def find_enrollment(self, enrollment_id: str) -> Optional[Enrollment]:
        pass

    @abstractmethod
    def save_enrollment(self, enrollment: Enrollment) -> Enrollment:
        pass
