# tests/test_standing.py

import math
from datetime import date

import pytest

from registrar.core.enums import AcademicStanding
from registrar.core.standing import (
    build_transcript,
    calculate_gpa,
    evaluate_standing,
    gpa_eligible_enrollments,
)


@pytest.mark.parametrize(
    "gpa, standing",
    [
        (4.0, AcademicStanding.DEANS_LIST),
        (3.5, AcademicStanding.DEANS_LIST),
        (3.49, AcademicStanding.GOOD_STANDING),
        (2.0, AcademicStanding.GOOD_STANDING),
        (1.99, AcademicStanding.ACADEMIC_PROBATION),
        (0.0, AcademicStanding.ACADEMIC_PROBATION),
    ],
)
def test_standing_thresholds(gpa, standing):
    assert evaluate_standing(gpa) is standing


def test_standing_without_gpa():
    assert evaluate_standing(None) is AcademicStanding.NOT_YET_RATED
    assert evaluate_standing(math.nan) is AcademicStanding.NOT_YET_RATED
    assert evaluate_standing(None).value == "N/A"


def test_gpa_is_credit_weighted(make_enrollment):
    enrollments = [
        make_enrollment("CS101", credits=4, grade="A"),   # 16
        make_enrollment("HIST100", credits=2, grade="C"),  # 4
    ]
    assert calculate_gpa(enrollments) == 3.333


def test_gpa_ignores_non_point_grades(make_enrollment):
    enrollments = [
        make_enrollment("CS101", credits=3, grade="B"),
        make_enrollment("ART100", credits=3, grade="P"),
        make_enrollment("MATH101", credits=3, grade="W"),
        make_enrollment("PHYS101", credits=3),
    ]
    assert calculate_gpa(enrollments) == 3.0


def test_gpa_none_when_nothing_counts(make_enrollment):
    assert calculate_gpa([]) is None
    assert calculate_gpa([make_enrollment("ART100", grade="P")]) is None


def test_only_latest_attempt_counts(make_enrollment):
    failed = make_enrollment("CS101", grade="F", semester_code="FA2024")
    retake = make_enrollment("CS101", grade="B_PLUS", semester_code="SP2025",
                             semester_start=date(2025, 1, 20))

    assert gpa_eligible_enrollments([retake, failed]) == {retake.id}


def test_transcript_groups_by_semester(make_enrollment):
    enrollments = [
        make_enrollment("CS101", credits=3, grade="F", semester_code="FA2024"),
        make_enrollment("MATH101", credits=4, grade="A", semester_code="FA2024"),
        make_enrollment("CS101", credits=3, grade="B", semester_code="SP2025",
                        semester_start=date(2025, 1, 20)),
    ]

    transcript = build_transcript(enrollments)

    assert [s.semester_code for s in transcript.semesters] == ["FA2024", "SP2025"]
    fall, spring = transcript.semesters
    assert [c.counts_toward_gpa for c in fall.courses] == [False, True]
    assert fall.semester_gpa == 4.0
    assert fall.semester_credits == 4
    assert spring.semester_gpa == 3.0

    # (4 * 4.0 + 3 * 3.0) / 7
    assert transcript.summary.cumulative_gpa == 3.571
    assert transcript.summary.total_credits == 7
    assert transcript.summary.total_grade_points == 25.0
    assert transcript.summary.academic_standing is AcademicStanding.DEANS_LIST


def test_empty_transcript(make_enrollment):
    transcript = build_transcript([make_enrollment("CS101")])

    assert transcript.summary.cumulative_gpa is None
    assert transcript.summary.to_dict()["academic_standing"] == "N/A"
    assert transcript.semesters[0].courses[0].grade is None
