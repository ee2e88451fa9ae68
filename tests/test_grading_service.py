# tests/test_grading_service.py

from datetime import date

import pytest

from registrar.core.entities import Incomplete, Percentage, ScoreEntry
from registrar.core.enums import AcademicStanding, EnrollmentStatus, LetterGrade
from registrar.core.exceptions import InvalidGradeError, NotFoundError, ValidationError
from registrar.services import AssessmentInput


@pytest.fixture
def course_assessments(grading_service, default_assessment_inputs):
    return grading_service.define_assessments("course-cs101", default_assessment_inputs)


@pytest.fixture
def enrollment(grading_service, course_assessments):
    return grading_service.register_enrollment(
        student_id="s001",
        course_id="course-cs101",
        course_code="cs101",
        credits=3,
        semester_code="FA2024",
        semester_start=date(2024, 9, 2),
        course_name="Introduction to Programming",
    )


def test_define_assessments_keeps_order(course_assessments):
    assert [a.name for a in course_assessments] == ["Test 1", "Mid-Exam", "Assignment", "Quiz", "Final Exam"]
    assert [a.sort_order for a in course_assessments] == [0, 1, 2, 3, 4]


def test_define_assessments_defaults_to_template(grading_service):
    saved = grading_service.define_assessments("course-new")

    assert [(a.name, a.weight, a.max_score) for a in saved] == [
        ("Test 1", 15, 15),
        ("Mid-Exam", 25, 25),
        ("Assignment", 15, 15),
        ("Quiz", 5, 5),
        ("Final Exam", 40, 40),
    ]


def test_define_assessments_rejects_bad_total(grading_service):
    with pytest.raises(ValidationError):
        grading_service.define_assessments("course-x", [AssessmentInput("Final", 90, 90)])

    assert grading_service.get_assessments("course-x") == []


def test_redefining_replaces_assessments(grading_service, course_assessments):
    replaced = grading_service.define_assessments("course-cs101", [AssessmentInput("Final", 100, 50)])

    assert len(replaced) == 1
    assert grading_service.get_assessments("course-cs101") == replaced


def test_register_enrollment_normalizes_code(enrollment):
    assert enrollment.course_code == "CS101"
    assert enrollment.status is EnrollmentStatus.ENROLLED


def test_percentage_incomplete_until_all_scored(grading_service, course_assessments, enrollment):
    first = course_assessments[0]
    grading_service.record_scores(enrollment.id, [ScoreEntry(first.id, 12, first.max_score)])

    report = grading_service.percentage_report(enrollment.id)

    assert isinstance(report.result, Incomplete)
    assert report.suggested_grade is None


def test_percentage_and_suggested_grade(grading_service, course_assessments, enrollment):
    # 12 + 20 + 12 + 4 + 30 = 78 points out of 100
    points = [12, 20, 12, 4, 30]
    grading_service.record_scores(enrollment.id, [
        ScoreEntry(a.id, p, a.max_score) for a, p in zip(course_assessments, points)
    ])

    assert grading_service.compute_percentage(enrollment.id) == Percentage(78)
    assert grading_service.suggest_grade(enrollment.id) is LetterGrade.B_PLUS


def test_rescoring_overwrites(grading_service, course_assessments, enrollment):
    full = [ScoreEntry(a.id, a.max_score, a.max_score) for a in course_assessments]
    grading_service.record_scores(enrollment.id, full)
    final = course_assessments[-1]
    grading_service.record_scores(enrollment.id, [ScoreEntry(final.id, 0)])

    assert grading_service.compute_percentage(enrollment.id) == Percentage(60)


def test_unknown_assessment_rejected(grading_service, enrollment):
    with pytest.raises(NotFoundError):
        grading_service.record_scores(enrollment.id, [ScoreEntry("not-an-assessment", 3)])


def test_unknown_enrollment(grading_service):
    with pytest.raises(NotFoundError):
        grading_service.compute_percentage("missing")
    with pytest.raises(NotFoundError):
        grading_service.submit_grade("missing", "A")


def test_submit_grade_stores_points_times_credits(grading_service, enrollment):
    graded = grading_service.submit_grade(enrollment.id, "A-")

    assert graded.status is EnrollmentStatus.COMPLETED
    assert graded.grade is LetterGrade.A_MINUS
    assert graded.grade_points == 11.25

    reloaded = grading_service.get_enrollment(enrollment.id)
    assert reloaded.grade is LetterGrade.A_MINUS
    assert reloaded.grade_points == 11.25
    assert reloaded.version == graded.version


def test_submit_pass_grade_has_no_points(grading_service, enrollment):
    graded = grading_service.submit_grade(enrollment.id, LetterGrade.P)

    assert graded.grade_points is None


def test_regrade_completed_enrollment(grading_service, enrollment):
    grading_service.submit_grade(enrollment.id, "C")
    regraded = grading_service.submit_grade(enrollment.id, "B")

    assert regraded.grade is LetterGrade.B
    assert regraded.grade_points == 9.0


def test_invalid_grade_rejected(grading_service, enrollment):
    with pytest.raises(InvalidGradeError):
        grading_service.submit_grade(enrollment.id, "Z")


@pytest.fixture
def second_enrollment(grading_service):
    return grading_service.register_enrollment("s001", "course-math101", "MATH101", 4,
                                               "FA2024", date(2024, 9, 2))


def test_drop_enrollment(grading_service, enrollment, second_enrollment):
    dropped = grading_service.drop_enrollment(enrollment.id)

    assert dropped.status is EnrollmentStatus.DROPPED
    assert grading_service.get_enrollment(enrollment.id).status is EnrollmentStatus.DROPPED


def test_cannot_drop_last_course(grading_service, enrollment):
    with pytest.raises(ValidationError) as excinfo:
        grading_service.drop_enrollment(enrollment.id)
    assert excinfo.value.message == "Cannot drop your last enrolled course"
    assert grading_service.get_enrollment(enrollment.id).status is EnrollmentStatus.ENROLLED


def test_other_semester_does_not_count_toward_last_course(grading_service, enrollment):
    grading_service.register_enrollment("s001", "course-math101", "MATH101", 4,
                                        "SP2025", date(2025, 1, 20))

    with pytest.raises(ValidationError):
        grading_service.drop_enrollment(enrollment.id)


def test_cannot_drop_completed_course(grading_service, enrollment, second_enrollment):
    grading_service.submit_grade(enrollment.id, "B")

    with pytest.raises(ValidationError) as excinfo:
        grading_service.drop_enrollment(enrollment.id)
    assert excinfo.value.message == "Can only drop active enrollments"


def test_drop_unknown_enrollment(grading_service):
    with pytest.raises(NotFoundError):
        grading_service.drop_enrollment("missing")


def test_dropped_enrollment_cannot_be_graded(grading_service, enrollment, second_enrollment):
    grading_service.drop_enrollment(enrollment.id)

    with pytest.raises(ValidationError) as excinfo:
        grading_service.submit_grade(enrollment.id, "A")
    assert excinfo.value.details == {"status": "DROPPED"}


def test_transcript_and_standing(grading_service, enrollment):
    grading_service.submit_grade(enrollment.id, "A")
    other = grading_service.register_enrollment("s001", "course-math101", "MATH101", 4,
                                                "FA2024", date(2024, 9, 2))
    grading_service.submit_grade(other.id, "B")

    transcript = grading_service.get_transcript("s001")
    summary = grading_service.get_gpa_summary("s001")

    assert len(transcript.semesters) == 1
    assert [c.course_code for c in transcript.semesters[0].courses] == ["CS101", "MATH101"]
    # (3 * 4.0 + 4 * 3.0) / 7
    assert summary.cumulative_gpa == 3.429
    assert grading_service.get_standing("s001") is AcademicStanding.GOOD_STANDING


def test_student_without_grades_is_not_rated(grading_service):
    assert grading_service.get_standing("nobody") is AcademicStanding.NOT_YET_RATED
