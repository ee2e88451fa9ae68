"""
Prerequisite management and enrollment eligibility checks.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ..core.entities import PrerequisiteCheckResult, PrerequisiteEdge
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.grading import is_passing_grade
from ..core.interfaces import EnrollmentHistory, PrerequisiteStore

logger = logging.getLogger(__name__)


def normalize_course_code(course_code: str) -> str:
    code = (course_code or "").strip().upper()
    if not code:
        raise ValidationError("Course code is required")
    return code


def find_prerequisite_path(edge_map: Dict[str, List[str]], start: str, target: str) -> Optional[List[str]]:
    """Depth-first search for a chain of prerequisites leading from start to target."""
    stack = [(start, [start])]
    visited = set()
    while stack:
        code, path = stack.pop()
        if code == target:
            return path
        if code in visited:
            continue
        visited.add(code)
        for prerequisite in edge_map.get(code, []):
            if prerequisite not in visited:
                stack.append((prerequisite, path + [prerequisite]))
    return None


class PrerequisiteChecker:
    """
    Decides whether a student may take a course and maintains the
    prerequisite relation.

    Only direct self-references are rejected by default. With
    ``prevent_cycles`` enabled, an edge that would let a course require
    itself through a longer chain is rejected as well.
    """

    def __init__(self, store: PrerequisiteStore, history: Optional[EnrollmentHistory] = None,
                 prevent_cycles: bool = False):
        self._store = store
        self._history = history
        self._prevent_cycles = prevent_cycles

    @property
    def prevent_cycles(self) -> bool:
        return self._prevent_cycles

    def check_prerequisites_met(self, completed_courses: Iterable[str],
                                course_code: str) -> PrerequisiteCheckResult:
        """Compare a course's prerequisites against passed course codes."""
        required = self._store.get_edges(normalize_course_code(course_code))
        if not required:
            return PrerequisiteCheckResult(met=True, missing=[])

        completed = {code.strip().upper() for code in completed_courses}
        missing = [code for code in required if code not in completed]
        return PrerequisiteCheckResult(met=not missing, missing=missing)

    def check_student_eligibility(self, student_id: str, course_code: str) -> PrerequisiteCheckResult:
        """Check a student's own history against a course's prerequisites."""
        if self._history is None:
            raise ValidationError("No enrollment history configured for eligibility checks")
        passed = {
            code for code, grade in self._history.get_completed_courses(student_id)
            if is_passing_grade(grade)
        }
        result = self.check_prerequisites_met(passed, course_code)
        if not result.met:
            logger.info("Student %s missing prerequisites for %s: %s",
                        student_id, course_code, ", ".join(result.missing))
        return result

    def add_prerequisite_edge(self, course_code: str, prerequisite_code: str) -> PrerequisiteEdge:
        """Add a prerequisite; duplicates raise ConflictError from the store."""
        course_code = normalize_course_code(course_code)
        prerequisite_code = normalize_course_code(prerequisite_code)

        if course_code == prerequisite_code:
            logger.warning("Rejected self prerequisite for %s", course_code)
            raise ValidationError(
                "A course cannot be its own prerequisite",
                details={"course_code": course_code},
            )

        if self._prevent_cycles:
            path = find_prerequisite_path(self._store.get_edge_map(), prerequisite_code, course_code)
            if path is not None:
                logger.warning("Rejected prerequisite %s -> %s: cycle %s",
                               course_code, prerequisite_code, " -> ".join(path))
                raise ValidationError(
                    f"{course_code} would transitively require itself",
                    details={"cycle": [course_code] + path},
                )

        try:
            edge = self._store.insert_edge(course_code, prerequisite_code)
        except ConflictError as e:
            logger.warning("Duplicate prerequisite %s for %s", prerequisite_code, course_code)
            raise ConflictError(
                "This prerequisite already exists",
                details={"course_code": course_code, "prerequisite_code": prerequisite_code},
            ) from e
        logger.info("Added prerequisite %s for %s (%s)", prerequisite_code, course_code, edge.id)
        return edge

    def remove_prerequisite_edge(self, edge_id: str) -> None:
        if not self._store.delete_edge(edge_id):
            raise NotFoundError("Prerequisite not found", details={"edge_id": edge_id})
        logger.info("Removed prerequisite %s", edge_id)

    def list_prerequisites(self, course_code: str) -> List[PrerequisiteEdge]:
        return self._store.list_for_course(normalize_course_code(course_code))

    def list_all_prerequisites(self) -> List[PrerequisiteEdge]:
        return self._store.list_all()
