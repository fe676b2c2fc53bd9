"""FastAPI routes for Smart Learning Pathways.

Request and response bodies use the camelCase document shape. Domain
errors are translated to HTTP errors here and nowhere else.
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from pathways.core.errors import PathwaysError, ValidationError
from pathways.core.logging import LogTimer, get_logger
from pathways.domain.analytics import (
    ClassAnalytics,
    InterventionCreate,
    MilestoneView,
    QuizResult,
    QuizSubmission,
    RecommendationRequest,
    RecommendationResponse,
    RosterEntry,
    StudentProgress,
    TeachingMethod,
)
from pathways.domain.student import AssessmentAppend, AssessmentSubmission, MilestoneCreate, Student
from pathways.infrastructure.generators import get_text_generator
from pathways.infrastructure.repositories import (
    AnalyticsRepository,
    StudentRepository,
    TeachingMethodRepository,
    get_document_store,
)
from pathways.services import analytics, assessments
from pathways.services.learning_style import score_quiz
from pathways.services.progress import improvement_band, milestone_status, subject_improvements
from pathways.services.recommendations import generate_recommendations
from pathways.services.risk import classify_risk
from pathways.services.roster import roster
from pathways.services.sample_data import populate_sample_data
from pathways.services.teaching_methods import get_teaching_methods

logger = get_logger(__name__)
router = APIRouter()


# -----------------
# DEPENDENCIES
# -----------------

def get_student_repository() -> StudentRepository:
    return StudentRepository(get_document_store())


def get_analytics_repository() -> AnalyticsRepository:
    return AnalyticsRepository(get_document_store())


def get_teaching_method_repository() -> TeachingMethodRepository:
    return TeachingMethodRepository(get_document_store())


def _http_error(e: PathwaysError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=e.status_code, detail={"error": e.message, "problems": e.problems})
    if e.status_code >= 500:
        logger.error(f"{type(e).__name__}: {e.message}", extra={"error_type": type(e).__name__})
    return HTTPException(status_code=e.status_code, detail=e.message)


# -----------------
# STUDENTS
# -----------------

@router.get("/students", response_model=List[RosterEntry])
def list_students(
    subject: Optional[str] = None,
    sort_by: Literal["risk", "name", "improvement"] = "risk",
    students: StudentRepository = Depends(get_student_repository)
):
    """Roster rows with risk level and improvement, optionally for one subject."""
    with LogTimer(logger, "list_students"):
        try:
            return roster(students.load_all(), subject=subject, sort_by=sort_by)
        except PathwaysError as e:
            raise _http_error(e) from e


@router.get("/students/{student_id}", response_model=Student)
def get_student(student_id: str, students: StudentRepository = Depends(get_student_repository)):
    try:
        return students.get(student_id)
    except PathwaysError as e:
        raise _http_error(e) from e


@router.delete("/students/{student_id}")
def delete_student(
    student_id: str,
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    try:
        students.delete(student_id)
        analytics.refresh_class_analytics(students, analytics_repo)
    except PathwaysError as e:
        raise _http_error(e) from e
    return {"deleted": student_id}


@router.get("/students/{student_id}/progress", response_model=StudentProgress)
def student_progress(student_id: str, students: StudentRepository = Depends(get_student_repository)):
    """Per-subject improvement, risk level and milestone statuses."""
    try:
        student = students.get(student_id)
    except PathwaysError as e:
        raise _http_error(e) from e

    progress = student.progress_metrics
    rate = progress.improvement_rate if progress else None
    milestones = [
        MilestoneView(**m.model_dump(), status=milestone_status(m))
        for m in (progress.milestones if progress else [])
    ]
    return StudentProgress(
        student_id=student_id,
        name=student.name,
        risk_level=classify_risk(student),
        subject_improvements=subject_improvements(student.test_results),
        improvement_rate=rate,
        improvement_band=improvement_band(rate) if rate is not None else None,
        milestones=milestones,
    )


# -----------------
# ASSESSMENTS & MILESTONES
# -----------------

@router.post("/assessments", response_model=Student, status_code=201)
def submit_assessment(
    submission: AssessmentSubmission,
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    """Create a student from a teacher-entered assessment.

    Example:
        POST /assessments
        {"name": "Maya Chen", "testResults": [{"subject": "Physics", "score": 54, "totalPossible": 100}]}
    """
    with LogTimer(logger, "submit_assessment"):
        try:
            return assessments.submit_assessment(students, submission, analytics_repo)
        except PathwaysError as e:
            raise _http_error(e) from e


@router.post("/students/{student_id}/assessments", response_model=Student)
def append_assessment(
    student_id: str,
    append: AssessmentAppend,
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    with LogTimer(logger, "append_assessment"):
        try:
            return assessments.append_assessment(students, student_id, append, analytics_repo)
        except PathwaysError as e:
            raise _http_error(e) from e


@router.post("/students/{student_id}/milestones", response_model=Student, status_code=201)
def add_milestone(
    student_id: str,
    milestone: MilestoneCreate,
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    try:
        return assessments.add_milestone(students, student_id, milestone, analytics_repo)
    except PathwaysError as e:
        raise _http_error(e) from e


@router.post("/students/{student_id}/milestones/{index}/achieve", response_model=Student)
def achieve_milestone(
    student_id: str,
    index: int,
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    try:
        return assessments.achieve_milestone(students, student_id, index, analytics_repo)
    except PathwaysError as e:
        raise _http_error(e) from e


# -----------------
# CLASS ANALYTICS
# -----------------

@router.get("/analytics", response_model=ClassAnalytics)
def class_analytics(
    refresh: bool = False,
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    """Cached class analytics; ``refresh=true`` forces a recompute."""
    with LogTimer(logger, "class_analytics"):
        try:
            return analytics.get_class_analytics(students, analytics_repo, refresh=refresh)
        except PathwaysError as e:
            raise _http_error(e) from e


@router.get("/interventions")
def list_interventions(analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)):
    try:
        return {"interventions": analytics.list_interventions(analytics_repo)}
    except PathwaysError as e:
        raise _http_error(e) from e


@router.post("/interventions", status_code=201)
def add_intervention(
    req: InterventionCreate,
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    try:
        return {"interventions": analytics.add_intervention(req.name, students, analytics_repo)}
    except PathwaysError as e:
        raise _http_error(e) from e


# -----------------
# TEACHING SUPPORT
# -----------------

@router.get("/teaching-methods", response_model=List[TeachingMethod])
def teaching_methods(
    subject: str,
    learning_style: str,
    methods: TeachingMethodRepository = Depends(get_teaching_method_repository)
):
    try:
        return get_teaching_methods(methods, subject, learning_style)
    except PathwaysError as e:
        raise _http_error(e) from e


@router.post("/learning-style/score", response_model=QuizResult)
def score_learning_style(req: QuizSubmission):
    try:
        return score_quiz(req.answers)
    except PathwaysError as e:
        raise _http_error(e) from e


@router.post("/recommendations", response_model=RecommendationResponse)
async def recommendations(
    req: RecommendationRequest,
    x_goog_api_key: Optional[str] = Header(default=None),
    students: StudentRepository = Depends(get_student_repository)
):
    """Personalised learning recommendations from the generative model.

    The API key comes from the ``x-goog-api-key`` header, falling back to
    the server configuration. When ``studentId`` is given without test
    results, the stored results are used.
    """
    with LogTimer(logger, "generate_recommendations"):
        try:
            results = req.test_results
            if not results and req.student_id:
                results = students.get(req.student_id).test_results
            generator = get_text_generator(x_goog_api_key)
            recs = await generate_recommendations(generator, req.student_name, results)
        except PathwaysError as e:
            raise _http_error(e) from e

    return RecommendationResponse(student_name=req.student_name, recommendations=recs)


@router.post("/sample-data", status_code=201)
def sample_data(
    count: int = Query(default=10, ge=1, le=100),
    students: StudentRepository = Depends(get_student_repository),
    analytics_repo: AnalyticsRepository = Depends(get_analytics_repository)
):
    """Populate the store with random sample students."""
    with LogTimer(logger, "populate_sample_data"):
        try:
            created = populate_sample_data(students, analytics_repo, count=count)
        except PathwaysError as e:
            raise _http_error(e) from e
    return {"created": len(created), "studentIds": [s.id for s in created]}
