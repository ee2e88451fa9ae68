"""
Persistence module for data storage.
"""

from .database import DatabaseManager, SQLiteDatabase, DatabaseFactory
from .repositories import (
    AssessmentRepository, ScoreRepository, PrerequisiteRepository, EnrollmentRepository
)

__all__ = [
    "DatabaseManager",
    "SQLiteDatabase",
    "DatabaseFactory",
    "AssessmentRepository",
    "ScoreRepository",
    "PrerequisiteRepository",
    "EnrollmentRepository",
]
