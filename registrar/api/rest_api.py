"""
REST API implementation for the registrar platform using FastAPI.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..core.entities import AssessmentDefinition, Enrollment, Percentage, PrerequisiteEdge, ScoreEntry
from ..core.exceptions import RegistrarException
from ..core.grading import GRADE_LABELS, scale_to_rows
from ..core.standing import Transcript
from ..services import AssessmentInput, GradingService, PrerequisiteChecker

logger = logging.getLogger(__name__)


# Pydantic models for API
class AssessmentItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    weight: float = Field(..., ge=0, le=100)
    max_score: float = Field(100, ge=1, le=1000)


class SaveAssessmentsRequest(BaseModel):
    # Omitted assessments apply the default template
    assessments: Optional[List[AssessmentItem]] = Field(None, min_length=1)


class AssessmentResponse(BaseModel):
    id: str
    name: str
    weight: float
    max_score: float
    sort_order: int


class EnrollmentCreate(BaseModel):
    student_id: str = Field(..., min_length=1)
    course_id: str = Field(..., min_length=1)
    course_code: str = Field(..., min_length=1, max_length=20)
    course_name: str = Field("", max_length=200)
    credits: int = Field(..., ge=0, le=10)
    semester_code: str = Field(..., min_length=1, max_length=20)
    semester_name: str = Field("", max_length=100)
    semester_start: date


class EnrollmentResponse(BaseModel):
    id: str
    student_id: str
    course_id: str
    course_code: str
    credits: int
    semester_code: str
    status: str
    grade: Optional[str] = None
    grade_label: Optional[str] = None
    grade_points: Optional[float] = None


class ScoreItem(BaseModel):
    assessment_id: str = Field(..., min_length=1)
    score: Optional[float] = Field(None, ge=0)
    max_score: Optional[float] = Field(None, ge=1)


class SaveScoresRequest(BaseModel):
    scores: List[ScoreItem]


class PercentageResponse(BaseModel):
    enrollment_id: str
    complete: bool
    percentage: Optional[int] = None
    suggested_grade: Optional[str] = None
    suggested_label: Optional[str] = None
    reason: Optional[str] = None


class GradeSubmit(BaseModel):
    grade: str = Field(..., min_length=1, max_length=8)


class PrerequisiteCreate(BaseModel):
    course_code: str = Field(..., min_length=1, max_length=20)
    prerequisite_code: str = Field(..., min_length=1, max_length=20)


class PrerequisiteResponse(BaseModel):
    id: str
    course_code: str
    prerequisite_code: str


class EligibilityResponse(BaseModel):
    student_id: str
    course_code: str
    met: bool
    missing: List[str] = []


class StandingResponse(BaseModel):
    student_id: str
    cumulative_gpa: Optional[float] = None
    total_credits: int
    total_grade_points: float
    academic_standing: str


class RegistrarRestAPI:
    """REST API implementation for the registrar platform."""

    def __init__(self, grading_service: GradingService, prerequisite_checker: PrerequisiteChecker):
        self._grading = grading_service
        self._prerequisites = prerequisite_checker

        self.app = FastAPI(
            title="Registrar Grading API",
            description="Grading, academic standing and prerequisite checks",
            version="1.0.0",
            docs_url="/docs",
            redoc_url="/redoc"
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self.app.add_exception_handler(RegistrarException, self._handle_registrar_error)
        self._setup_routes()

    @staticmethod
    async def _handle_registrar_error(request: Request, exc: RegistrarException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    def _setup_routes(self):
        """Setup API routes."""

        @self.app.get("/", response_model=Dict[str, str])
        async def root():
            return {
                "message": "Registrar Grading API",
                "version": "1.0.0",
                "docs": "/docs"
            }

        @self.app.get("/health", response_model=Dict[str, str])
        async def health_check():
            return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

        @self.app.get("/grades/scale", response_model=List[Dict[str, Any]])
        async def get_grade_scale():
            """Percentage bands of the configured grade scale."""
            return scale_to_rows(self._grading.grade_scale)

        # Assessment endpoints
        @self.app.get("/courses/{course_id}/assessments", response_model=List[AssessmentResponse])
        async def get_assessments(course_id: str):
            return [self._assessment_to_response(a) for a in self._grading.get_assessments(course_id)]

        @self.app.put("/courses/{course_id}/assessments", response_model=List[AssessmentResponse])
        async def save_assessments(course_id: str, data: SaveAssessmentsRequest):
            """Replace a course's assessments; weights must total 100."""
            items = None
            if data.assessments is not None:
                items = [AssessmentInput(a.name, a.weight, a.max_score) for a in data.assessments]
            saved = self._grading.define_assessments(course_id, items)
            return [self._assessment_to_response(a) for a in saved]

        # Enrollment endpoints
        @self.app.post("/enrollments", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
        async def create_enrollment(data: EnrollmentCreate):
            enrollment = self._grading.register_enrollment(
                student_id=data.student_id,
                course_id=data.course_id,
                course_code=data.course_code,
                credits=data.credits,
                semester_code=data.semester_code,
                semester_start=data.semester_start,
                course_name=data.course_name,
                semester_name=data.semester_name,
            )
            return self._enrollment_to_response(enrollment)

        @self.app.put("/enrollments/{enrollment_id}/scores", response_model=PercentageResponse)
        async def save_scores(enrollment_id: str, data: SaveScoresRequest):
            """Save scores and return the recomputed percentage."""
            entries = [ScoreEntry(s.assessment_id, s.score, s.max_score) for s in data.scores]
            self._grading.record_scores(enrollment_id, entries)
            return self._percentage_to_response(enrollment_id)

        @self.app.get("/enrollments/{enrollment_id}/percentage", response_model=PercentageResponse)
        async def get_percentage(enrollment_id: str):
            return self._percentage_to_response(enrollment_id)

        @self.app.post("/enrollments/{enrollment_id}/grade", response_model=EnrollmentResponse)
        async def submit_grade(enrollment_id: str, data: GradeSubmit):
            enrollment = self._grading.submit_grade(enrollment_id, data.grade)
            return self._enrollment_to_response(enrollment)

        @self.app.post("/enrollments/{enrollment_id}/drop", response_model=EnrollmentResponse)
        async def drop_enrollment(enrollment_id: str):
            return self._enrollment_to_response(self._grading.drop_enrollment(enrollment_id))

        # Student endpoints
        @self.app.get("/students/{student_id}/transcript", response_model=Dict[str, Any])
        async def get_transcript(student_id: str):
            return self._transcript_to_dict(self._grading.get_transcript(student_id))

        @self.app.get("/students/{student_id}/standing", response_model=StandingResponse)
        async def get_standing(student_id: str):
            summary = self._grading.get_gpa_summary(student_id)
            return StandingResponse(student_id=student_id, **summary.to_dict())

        @self.app.get("/students/{student_id}/eligibility/{course_code}", response_model=EligibilityResponse)
        async def check_eligibility(student_id: str, course_code: str):
            result = self._prerequisites.check_student_eligibility(student_id, course_code)
            return EligibilityResponse(
                student_id=student_id,
                course_code=course_code.upper(),
                met=result.met,
                missing=result.missing,
            )

        # Prerequisite endpoints
        @self.app.get("/prerequisites", response_model=List[PrerequisiteResponse])
        async def list_all_prerequisites():
            return [self._edge_to_response(e) for e in self._prerequisites.list_all_prerequisites()]

        @self.app.get("/courses/{course_code}/prerequisites", response_model=List[PrerequisiteResponse])
        async def list_prerequisites(course_code: str):
            return [self._edge_to_response(e) for e in self._prerequisites.list_prerequisites(course_code)]

        @self.app.post("/prerequisites", response_model=PrerequisiteResponse, status_code=status.HTTP_201_CREATED)
        async def add_prerequisite(data: PrerequisiteCreate):
            edge = self._prerequisites.add_prerequisite_edge(data.course_code, data.prerequisite_code)
            return self._edge_to_response(edge)

        @self.app.delete("/prerequisites/{edge_id}", status_code=status.HTTP_204_NO_CONTENT)
        async def remove_prerequisite(edge_id: str):
            self._prerequisites.remove_prerequisite_edge(edge_id)

    def _assessment_to_response(self, assessment: AssessmentDefinition) -> AssessmentResponse:
        return AssessmentResponse(
            id=assessment.id,
            name=assessment.name,
            weight=assessment.weight,
            max_score=assessment.max_score,
            sort_order=assessment.sort_order,
        )

    def _enrollment_to_response(self, enrollment: Enrollment) -> EnrollmentResponse:
        return EnrollmentResponse(
            id=enrollment.id,
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            course_code=enrollment.course_code,
            credits=enrollment.credits,
            semester_code=enrollment.semester_code,
            status=enrollment.status.value,
            grade=enrollment.grade.value if enrollment.grade else None,
            grade_label=GRADE_LABELS[enrollment.grade] if enrollment.grade else None,
            grade_points=enrollment.grade_points,
        )

    def _percentage_to_response(self, enrollment_id: str) -> PercentageResponse:
        report = self._grading.percentage_report(enrollment_id)
        if isinstance(report.result, Percentage):
            return PercentageResponse(
                enrollment_id=enrollment_id,
                complete=True,
                percentage=report.result.value,
                suggested_grade=report.suggested_grade.value,
                suggested_label=GRADE_LABELS[report.suggested_grade],
            )
        return PercentageResponse(
            enrollment_id=enrollment_id,
            complete=False,
            reason=report.result.reason,
        )

    def _edge_to_response(self, edge: PrerequisiteEdge) -> PrerequisiteResponse:
        return PrerequisiteResponse(**edge.to_dict())

    def _transcript_to_dict(self, transcript: Transcript) -> Dict[str, Any]:
        return {
            "semesters": [
                {
                    "semester_code": semester.semester_code,
                    "semester_name": semester.semester_name,
                    "semester_gpa": semester.semester_gpa,
                    "semester_credits": semester.semester_credits,
                    "semester_grade_points": semester.semester_grade_points,
                    "courses": [vars(course) for course in semester.courses],
                }
                for semester in transcript.semesters
            ],
            "summary": transcript.summary.to_dict(),
        }
