
"""
Script to add sample grading data to the registrar platform via REST API.
Make sure the server is running before executing this script.

Usage:
    python add_data.py
"""

import os
import sys

import requests


def _console_supports_utf8() -> bool:
    enc = getattr(sys.stdout, "encoding", None)
    return enc is not None and "utf" in enc.lower()


_OK_CHAR = "✓" if _console_supports_utf8() else "[OK]"
_FAIL_CHAR = "✗" if _console_supports_utf8() else "[FAIL]"
_INFO_CHAR = "ℹ" if _console_supports_utf8() else "[INFO]"

TIMEOUT = 5

# Same split as the default template for new courses
DEFAULT_ASSESSMENTS = [
    {"name": "Test 1", "weight": 15, "max_score": 15},
    {"name": "Mid-Exam", "weight": 25, "max_score": 25},
    {"name": "Assignment", "weight": 15, "max_score": 15},
    {"name": "Quiz", "weight": 5, "max_score": 5},
    {"name": "Final Exam", "weight": 40, "max_score": 40},
]

COURSES = [
    # course_id, code, name, credits
    ("course-cs101", "CS101", "Introduction to Programming", 3),
    ("course-cs102", "CS102", "Programming II", 3),
    ("course-cs201", "CS201", "Data Structures", 4),
    ("course-math101", "MATH101", "Calculus I", 4),
]

PREREQUISITES = [
    ("CS102", "CS101"),
    ("CS201", "CS101"),
    ("CS201", "CS102"),
]

# student_id -> list of (course_id, semester_code, semester_start, fraction of full marks)
STUDENT_RESULTS = {
    "S001": [
        ("course-cs101", "FA2024", "2024-09-02", 0.93),
        ("course-math101", "FA2024", "2024-09-02", 0.88),
        ("course-cs102", "SP2025", "2025-01-20", 0.91),
    ],
    "S002": [
        ("course-cs101", "FA2024", "2024-09-02", 0.35),
        ("course-math101", "FA2024", "2024-09-02", 0.55),
        ("course-cs101", "SP2025", "2025-01-20", 0.72),
    ],
}


def _detect_base_url() -> str:
    """Determine a reachable BASE_URL.

    Priority: environment variable `REGISTRAR_BASE_URL`, then common local ports.
    If nothing responds, fall back to http://127.0.0.1:8000.
    """
    env = os.environ.get("REGISTRAR_BASE_URL")
    if env:
        return env

    candidates = [
        "http://127.0.0.1:8000",
        "http://127.0.0.1:8888",
        "http://localhost:8000",
    ]

    for c in candidates:
        try:
            resp = requests.get(f"{c}/health", timeout=0.5)
            if resp.status_code == 200:
                return c
        except requests.exceptions.RequestException:
            continue

    return candidates[0]


def check_server(base_url):
    """Check if the server is running."""
    try:
        response = requests.get(f"{base_url}/health", timeout=2)
        if response.status_code == 200:
            print(f"{_OK_CHAR} Server is running")
            return True
    except requests.exceptions.RequestException:
        pass
    print(f"{_FAIL_CHAR} Server is not running!")
    print("\nPlease start the server first:")
    print("  python -m registrar.main --port 8000")
    return False


def _call(method, url, expected, what, **kwargs):
    """Send a request and return the decoded body, or None on failure."""
    try:
        response = requests.request(method, url, timeout=TIMEOUT, **kwargs)
    except requests.exceptions.RequestException as e:
        print(f"{_FAIL_CHAR} Error {what}: {e}")
        return None
    if response.status_code != expected:
        print(f"{_FAIL_CHAR} Failed {what}: {response.text}")
        return None
    return response.json() if response.content else {}


def define_assessments(base_url, course_id, assessments=None):
    """Replace a course's assessments."""
    result = _call(
        "PUT", f"{base_url}/courses/{course_id}/assessments", 200,
        f"defining assessments for {course_id}",
        json={"assessments": assessments or DEFAULT_ASSESSMENTS},
    )
    if result is not None:
        print(f"{_OK_CHAR} Defined {len(result)} assessments for {course_id}")
    return result


def add_prerequisite(base_url, course_code, prerequisite_code):
    """Add a prerequisite edge; an existing edge is reported, not fatal."""
    result = _call(
        "POST", f"{base_url}/prerequisites", 201,
        f"adding prerequisite {prerequisite_code} -> {course_code}",
        json={"course_code": course_code, "prerequisite_code": prerequisite_code},
    )
    if result is not None:
        print(f"{_OK_CHAR} {course_code} requires {prerequisite_code}")
    return result


def create_enrollment(base_url, student_id, course, semester_code, semester_start):
    """Enroll a student in a course offering."""
    course_id, code, name, credits = course
    result = _call(
        "POST", f"{base_url}/enrollments", 201,
        f"enrolling {student_id} in {code}",
        json={
            "student_id": student_id,
            "course_id": course_id,
            "course_code": code,
            "course_name": name,
            "credits": credits,
            "semester_code": semester_code,
            "semester_start": semester_start,
        },
    )
    if result is not None:
        print(f"{_OK_CHAR} Enrolled {student_id} in {code} ({semester_code})")
    return result


def save_scores(base_url, enrollment_id, assessments, fraction):
    """Score every assessment at the same fraction of its maximum."""
    scores = [
        {
            "assessment_id": a["id"],
            "score": round(a["max_score"] * fraction, 1),
            "max_score": a["max_score"],
        }
        for a in assessments
    ]
    return _call(
        "PUT", f"{base_url}/enrollments/{enrollment_id}/scores", 200,
        f"saving scores for {enrollment_id}",
        json={"scores": scores},
    )


def submit_grade(base_url, enrollment_id, grade):
    result = _call(
        "POST", f"{base_url}/enrollments/{enrollment_id}/grade", 200,
        f"grading {enrollment_id}",
        json={"grade": grade},
    )
    if result is not None:
        print(f"{_OK_CHAR} {result['course_code']}: {result['grade_label']}")
    return result


def show_standing(base_url, student_id):
    standing = _call("GET", f"{base_url}/students/{student_id}/standing", 200,
                     f"reading standing of {student_id}")
    if standing is not None:
        gpa = standing["cumulative_gpa"]
        print(f"  {student_id:6} | GPA {gpa if gpa is not None else 'N/A':>6} | "
              f"{standing['total_credits']:3} credits | {standing['academic_standing']}")
    return standing


def show_eligibility(base_url, student_id, course_code):
    result = _call("GET", f"{base_url}/students/{student_id}/eligibility/{course_code}", 200,
                   f"checking {student_id} for {course_code}")
    if result is not None:
        if result["met"]:
            print(f"  {student_id} may take {course_code}")
        else:
            print(f"  {student_id} needs {', '.join(result['missing'])} before {course_code}")
    return result


def seed(base_url):
    """Create the sample courses, prerequisites, enrollments and grades."""
    courses = {course[0]: course for course in COURSES}

    print("Defining assessments...")
    assessments = {}
    for course_id in courses:
        assessments[course_id] = define_assessments(base_url, course_id) or []

    print("\nAdding prerequisites...")
    for course_code, prerequisite_code in PREREQUISITES:
        add_prerequisite(base_url, course_code, prerequisite_code)

    print("\nEnrolling and grading students...")
    graded = 0
    for student_id, results in STUDENT_RESULTS.items():
        for course_id, semester_code, semester_start, fraction in results:
            enrollment = create_enrollment(base_url, student_id, courses[course_id],
                                           semester_code, semester_start)
            if not enrollment:
                continue
            report = save_scores(base_url, enrollment["id"], assessments[course_id], fraction)
            if report and report.get("complete"):
                print(f"{_INFO_CHAR} {courses[course_id][1]} scored {report['percentage']}%")
                if submit_grade(base_url, enrollment["id"], report["suggested_grade"]):
                    graded += 1
    return graded


def main():
    """Main execution."""
    print("=" * 60)
    print("Registrar Platform - Sample Data Script")
    print("=" * 60)
    print()

    base_url = _detect_base_url()
    if not check_server(base_url):
        sys.exit(1)

    print()
    graded = seed(base_url)

    print(f"\n{'=' * 60}")
    print("Academic standing")
    print(f"{'=' * 60}")
    for student_id in STUDENT_RESULTS:
        show_standing(base_url, student_id)

    print("\nEligibility for CS201")
    for student_id in STUDENT_RESULTS:
        show_eligibility(base_url, student_id, "CS201")

    print("\n" + "=" * 60)
    print(f"{_OK_CHAR} Sample data added ({graded} grades submitted)")
    print("=" * 60)
    print("\nYou can now:")
    print(f"  - View API docs: {base_url}/docs")
    print(f"  - Transcript: curl {base_url}/students/S001/transcript")
    print(f"  - Prerequisites: curl {base_url}/prerequisites")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print(f"\n\n{_FAIL_CHAR} Interrupted by user")
        sys.exit(1)
