"""
SQLite repository implementations of the collaborator interfaces.
"""

import logging
import threading
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.entities import AssessmentDefinition, Enrollment, PrerequisiteEdge, ScoreEntry
from ..core.enums import EnrollmentStatus, LetterGrade
from ..core.interfaces import CourseCatalog, EnrollmentHistory, PrerequisiteStore, ScoreStore
from .database import DatabaseManager

logger = logging.getLogger(__name__)


class BaseRepository:
    """Base repository holding the database handle and a re-entrant lock."""

    def __init__(self, database: DatabaseManager):
        self._database = database
        self._lock = threading.RLock()


class AssessmentRepository(BaseRepository, CourseCatalog):
    """Course assessment definitions."""

    def get_assessment_definitions(self, course_id: str) -> List[AssessmentDefinition]:
        query = """
            SELECT id, name, weight, max_score, sort_order
            FROM course_assessments
            WHERE course_id = ?
            ORDER BY sort_order ASC
        """
        with self._lock:
            rows = self._database.execute_query(query, (course_id,))
        return [
            AssessmentDefinition(
                id=row["id"],
                name=row["name"],
                weight=row["weight"],
                max_score=row["max_score"],
                sort_order=row["sort_order"],
            )
            for row in rows
        ]

    def save_assessment_definitions(self, course_id: str,
                                    definitions: Sequence[AssessmentDefinition]) -> List[AssessmentDefinition]:
        """Replace a course's assessments, dropping scores recorded against the old set."""
        queries = [
            ("""
                DELETE FROM assessment_scores
                WHERE assessment_id IN (SELECT id FROM course_assessments WHERE course_id = ?)
            """, (course_id,)),
            ("DELETE FROM course_assessments WHERE course_id = ?", (course_id,)),
        ]
        for index, definition in enumerate(definitions):
            queries.append((
                """
                INSERT INTO course_assessments (id, course_id, name, weight, max_score, sort_order)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (definition.id, course_id, definition.name, definition.weight,
                 definition.max_score, index),
            ))
        with self._lock:
            self._database.execute_transaction(queries)
        return self.get_assessment_definitions(course_id)


class ScoreRepository(BaseRepository, ScoreStore):
    """Assessment scores per enrollment."""

    def get_scores(self, enrollment_id: str) -> Dict[str, ScoreEntry]:
        query = "SELECT assessment_id, score, max_score FROM assessment_scores WHERE enrollment_id = ?"
        with self._lock:
            rows = self._database.execute_query(query, (enrollment_id,))
        return {
            row["assessment_id"]: ScoreEntry(
                assessment_id=row["assessment_id"],
                score=row["score"],
                max_score=row["max_score"],
            )
            for row in rows
        }

    def save_scores(self, enrollment_id: str, entries: Sequence[ScoreEntry]) -> None:
        # A missing max_score keeps whatever max was stored before.
        query = """
            INSERT INTO assessment_scores (enrollment_id, assessment_id, score, max_score, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (enrollment_id, assessment_id) DO UPDATE SET
                score = excluded.score,
                max_score = COALESCE(excluded.max_score, assessment_scores.max_score),
                updated_at = excluded.updated_at
        """
        now = datetime.now(timezone.utc).isoformat()
        queries = [
            (query, (enrollment_id, entry.assessment_id, entry.score, entry.max_score, now))
            for entry in entries
        ]
        with self._lock:
            self._database.execute_transaction(queries)


class PrerequisiteRepository(BaseRepository, PrerequisiteStore):
    """Prerequisite edges keyed by course code."""

    @staticmethod
    def _edge_from_row(row: Dict[str, Any]) -> PrerequisiteEdge:
        return PrerequisiteEdge(
            id=row["id"],
            course_code=row["course_code"],
            prerequisite_code=row["prerequisite_code"],
        )

    def get_edges(self, course_code: str) -> List[str]:
        query = """
            SELECT prerequisite_code FROM course_prerequisites
            WHERE course_code = ?
            ORDER BY seq ASC
        """
        with self._lock:
            rows = self._database.execute_query(query, (course_code,))
        return [row["prerequisite_code"] for row in rows]

    def insert_edge(self, course_code: str, prerequisite_code: str) -> PrerequisiteEdge:
        edge = PrerequisiteEdge(
            id=str(uuid.uuid4()),
            course_code=course_code,
            prerequisite_code=prerequisite_code,
        )
        query = """
            INSERT INTO course_prerequisites (id, course_code, prerequisite_code)
            VALUES (?, ?, ?)
        """
        with self._lock:
            self._database.execute_update(query, (edge.id, edge.course_code, edge.prerequisite_code))
        return edge

    def delete_edge(self, edge_id: str) -> bool:
        with self._lock:
            affected_rows = self._database.execute_update(
                "DELETE FROM course_prerequisites WHERE id = ?", (edge_id,)
            )
        return affected_rows > 0

    def list_for_course(self, course_code: str) -> List[PrerequisiteEdge]:
        query = """
            SELECT id, course_code, prerequisite_code FROM course_prerequisites
            WHERE course_code = ?
            ORDER BY prerequisite_code ASC
        """
        with self._lock:
            rows = self._database.execute_query(query, (course_code,))
        return [self._edge_from_row(row) for row in rows]

    def list_all(self) -> List[PrerequisiteEdge]:
        query = """
            SELECT id, course_code, prerequisite_code FROM course_prerequisites
            ORDER BY course_code ASC, prerequisite_code ASC
        """
        with self._lock:
            rows = self._database.execute_query(query)
        return [self._edge_from_row(row) for row in rows]

    def get_edge_map(self) -> Dict[str, List[str]]:
        edge_map: Dict[str, List[str]] = {}
        with self._lock:
            rows = self._database.execute_query(
                "SELECT course_code, prerequisite_code FROM course_prerequisites ORDER BY seq ASC"
            )
        for row in rows:
            edge_map.setdefault(row["course_code"], []).append(row["prerequisite_code"])
        return edge_map


class EnrollmentRepository(BaseRepository, EnrollmentHistory):
    """Enrollments, grades and completed-course history."""

    _COLUMNS = """
        id, student_id, course_id, course_code, course_name, credits,
        semester_code, semester_name, semester_start, status, grade,
        grade_points, created_at, updated_at, version
    """

    def _entity_from_row(self, row: Dict[str, Any]) -> Enrollment:
        enrollment = Enrollment(
            student_id=row["student_id"],
            course_id=row["course_id"],
            course_code=row["course_code"],
            course_name=row["course_name"],
            credits=row["credits"],
            semester_code=row["semester_code"],
            semester_name=row["semester_name"],
            semester_start=date.fromisoformat(row["semester_start"]),
            status=EnrollmentStatus(row["status"]),
            entity_id=row["id"],
        )
        # Restore fields that are not constructor arguments
        enrollment._grade = LetterGrade(row["grade"]) if row["grade"] else None
        enrollment._grade_points = row["grade_points"]
        enrollment._created_at = datetime.fromisoformat(row["created_at"])
        enrollment._updated_at = datetime.fromisoformat(row["updated_at"])
        enrollment._version = row["version"]
        return enrollment

    def save_enrollment(self, enrollment: Enrollment) -> Enrollment:
        query = f"""
            INSERT INTO enrollments ({self._COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (id) DO UPDATE SET
                status = excluded.status,
                grade = excluded.grade,
                grade_points = excluded.grade_points,
                updated_at = excluded.updated_at,
                version = excluded.version
        """
        params = (
            enrollment.id,
            enrollment.student_id,
            enrollment.course_id,
            enrollment.course_code,
            enrollment.course_name,
            enrollment.credits,
            enrollment.semester_code,
            enrollment.semester_name,
            enrollment.semester_start.isoformat(),
            enrollment.status.value,
            enrollment.grade.value if enrollment.grade else None,
            enrollment.grade_points,
            enrollment.created_at.isoformat(),
            enrollment.updated_at.isoformat(),
            enrollment.version,
        )
        with self._lock:
            self._database.execute_update(query, params)
        return enrollment

    def find_enrollment(self, enrollment_id: str) -> Optional[Enrollment]:
        with self._lock:
            rows = self._database.execute_query(
                f"SELECT {self._COLUMNS} FROM enrollments WHERE id = ?", (enrollment_id,)
            )
        return self._entity_from_row(rows[0]) if rows else None

    def get_transcript_records(self, student_id: str) -> List[Enrollment]:
        query = f"""
            SELECT {self._COLUMNS} FROM enrollments
            WHERE student_id = ?
            ORDER BY semester_start ASC, course_code ASC
        """
        with self._lock:
            rows = self._database.execute_query(query, (student_id,))
        return [self._entity_from_row(row) for row in rows]

    def get_completed_courses(self, student_id: str) -> List[Tuple[str, LetterGrade]]:
        return [
            (enrollment.course_code, enrollment.grade)
            for enrollment in self.get_transcript_records(student_id)
            if enrollment.status is EnrollmentStatus.COMPLETED and enrollment.grade is not None
        ]
