# tests/conftest.py

import copy
from datetime import date

import pytest
from fastapi.testclient import TestClient

from registrar.config import DEFAULT_CONFIG
from registrar.core.entities import AssessmentDefinition, Enrollment
from registrar.core.enums import LetterGrade
from registrar.main import RegistrarPlatform
from registrar.persistence import (
    AssessmentRepository,
    EnrollmentRepository,
    PrerequisiteRepository,
    ScoreRepository,
    SQLiteDatabase,
)
from registrar.services import AssessmentInput, GradingService, PrerequisiteChecker


@pytest.fixture
def database(tmp_path):
    return SQLiteDatabase(str(tmp_path / "registrar_test.db"))


@pytest.fixture
def prerequisite_repo(database):
    return PrerequisiteRepository(database)


@pytest.fixture
def enrollment_repo(database):
    return EnrollmentRepository(database)


@pytest.fixture
def grading_service(database, enrollment_repo):
    return GradingService(
        catalog=AssessmentRepository(database),
        scores=ScoreRepository(database),
        history=enrollment_repo,
    )


@pytest.fixture
def prerequisite_checker(prerequisite_repo, enrollment_repo):
    return PrerequisiteChecker(prerequisite_repo, enrollment_repo)


@pytest.fixture
def strict_prerequisite_checker(prerequisite_repo, enrollment_repo):
    return PrerequisiteChecker(prerequisite_repo, enrollment_repo, prevent_cycles=True)


@pytest.fixture
def default_assessment_inputs():
    return [
        AssessmentInput("Test 1", 15, 15),
        AssessmentInput("Mid-Exam", 25, 25),
        AssessmentInput("Assignment", 15, 15),
        AssessmentInput("Quiz", 5, 5),
        AssessmentInput("Final Exam", 40, 40),
    ]


@pytest.fixture
def sample_assessments():
    return [
        AssessmentDefinition(id="a001", name="Midterm", weight=30, max_score=50),
        AssessmentDefinition(id="a002", name="Project", weight=30, max_score=20),
        AssessmentDefinition(id="a003", name="Final", weight=40, max_score=80),
    ]


@pytest.fixture
def make_enrollment():
    def _make(course_code, credits=3, grade=None, semester_code="FA2024",
              semester_start=date(2024, 9, 2), student_id="s001"):
        enrollment = Enrollment(
            student_id=student_id,
            course_id=f"course-{course_code.lower()}",
            course_code=course_code,
            credits=credits,
            semester_code=semester_code,
            semester_start=semester_start,
        )
        if grade is not None:
            enrollment.record_grade(LetterGrade[grade], None)
        return enrollment

    return _make


@pytest.fixture
def platform(tmp_path):
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["database_config"] = {"database_path": str(tmp_path / "registrar_api.db")}
    return RegistrarPlatform(config)


@pytest.fixture
def client(platform):
    return TestClient(platform.app)
