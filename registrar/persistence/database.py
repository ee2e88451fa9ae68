"""
Database management and connection handling.
"""

import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from ..core.exceptions import ConfigurationError, ConflictError, PersistenceError

logger = logging.getLogger(__name__)


SCHEMA: Dict[str, str] = {
    "course_assessments": """
        CREATE TABLE IF NOT EXISTS course_assessments (
            id TEXT PRIMARY KEY,
            course_id TEXT NOT NULL,
            name TEXT NOT NULL DEFAULT '',
            weight REAL NOT NULL,
            max_score REAL NOT NULL DEFAULT 100,
            sort_order INTEGER NOT NULL DEFAULT 0
        )
    """,
    "assessment_scores": """
        CREATE TABLE IF NOT EXISTS assessment_scores (
            enrollment_id TEXT NOT NULL,
            assessment_id TEXT NOT NULL,
            score REAL,
            max_score REAL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (enrollment_id, assessment_id)
        )
    """,
    "course_prerequisites": """
        CREATE TABLE IF NOT EXISTS course_prerequisites (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT UNIQUE NOT NULL,
            course_code TEXT NOT NULL,
            prerequisite_code TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (course_code, prerequisite_code),
            CHECK (course_code <> prerequisite_code)
        )
    """,
    "enrollments": """
        CREATE TABLE IF NOT EXISTS enrollments (
            id TEXT PRIMARY KEY,
            student_id TEXT NOT NULL,
            course_id TEXT NOT NULL,
            course_code TEXT NOT NULL,
            course_name TEXT NOT NULL,
            credits INTEGER NOT NULL,
            semester_code TEXT NOT NULL,
            semester_name TEXT NOT NULL,
            semester_start TEXT NOT NULL,
            status TEXT NOT NULL,
            grade TEXT,
            grade_points REAL,
            created_at TIMESTAMP NOT NULL,
            updated_at TIMESTAMP NOT NULL,
            version INTEGER DEFAULT 1
        )
    """,
}

INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_assessments_course ON course_assessments (course_id, sort_order)",
    "CREATE INDEX IF NOT EXISTS idx_prerequisites_course ON course_prerequisites (course_code)",
    "CREATE INDEX IF NOT EXISTS idx_enrollments_student ON enrollments (student_id)",
)


class DatabaseManager(ABC):
    """Abstract base class for database management."""

    @abstractmethod
    def execute_query(self, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        """Execute a query and return results."""
        pass

    @abstractmethod
    def execute_update(self, query: str, params: Optional[tuple] = None) -> int:
        """Execute an update query and return affected rows."""
        pass

    @abstractmethod
    def execute_transaction(self, queries: List[tuple]) -> bool:
        """Execute multiple queries in a transaction."""
        pass

    @abstractmethod
    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        pass


class SQLiteDatabase(DatabaseManager):
    """SQLite backend; the schema is created on first use."""

    def __init__(self, database_path: str = "registrar.db"):
        self._database_path = database_path
        self._lock = threading.RLock()
        self._initialize_database()

    @property
    def database_path(self) -> str:
        return self._database_path

    def _initialize_database(self) -> None:
        """Create the schema if it does not exist yet."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            for table_schema in SCHEMA.values():
                cursor.execute(table_schema)
            for index in INDEXES:
                cursor.execute(index)
            conn.commit()
        logger.debug("SQLite schema ready at %s", self._database_path)

    @contextmanager
    def _get_connection(self):
        """One connection per call; driver errors become registrar exceptions."""
        conn = None
        try:
            conn = sqlite3.connect(self._database_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.IntegrityError as e:
            if conn:
                conn.rollback()
            raise ConflictError(f"Constraint violation: {e}") from e
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            raise PersistenceError(f"Database error: {e}") from e
        finally:
            if conn:
                conn.close()

    def execute_query(self, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        with self._lock, self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params or ())
            return [dict(row) for row in cursor.fetchall()]

    def execute_update(self, query: str, params: Optional[tuple] = None) -> int:
        with self._lock, self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params or ())
            conn.commit()
            return cursor.rowcount

    def execute_transaction(self, queries: List[tuple]) -> bool:
        with self._lock, self._get_connection() as conn:
            cursor = conn.cursor()
            for query, params in queries:
                cursor.execute(query, params or ())
            conn.commit()
            return True

    def table_exists(self, table_name: str) -> bool:
        query = "SELECT name FROM sqlite_master WHERE type='table' AND name=?"
        return len(self.execute_query(query, (table_name,))) > 0


class DatabaseFactory:
    """Factory for creating database instances."""

    @staticmethod
    def create_database(database_type: str, **kwargs) -> DatabaseManager:
        """Create a database instance of the specified type."""
        if database_type == "sqlite":
            return SQLiteDatabase(**kwargs)
        raise ConfigurationError(f"Unsupported database type: {database_type}")
