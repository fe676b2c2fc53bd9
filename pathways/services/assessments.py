"""Assessment intake: validation and the student write paths.

Range checks happen here, at the submission boundary. The analytics
engines downstream accept whatever is stored and never raise.
"""
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pathways.core.errors import ValidationError
from pathways.core.logging import get_logger
from pathways.domain.student import (
    LEARNING_STYLES,
    AssessmentAppend,
    AssessmentSubmission,
    BehavioralMetrics,
    LearningStyle,
    Milestone,
    MilestoneCreate,
    Student,
    TestResult,
)
from pathways.infrastructure.repositories import AnalyticsRepository, StudentRepository
from pathways.services.analytics import refresh_class_analytics
from pathways.services.progress import build_progress_metrics

logger = get_logger(__name__)

SCALE_FIELDS = (
    "class_participation",
    "peer_collaboration",
    "frustration_tolerance",
    "motivation_level",
    "anxiety_level",
)


# ----------------
# VALIDATION
# ----------------

def _result_problems(results: Sequence[TestResult]) -> List[str]:
    problems = []
    if not results:
        problems.append("At least one test result is required")
    for position, result in enumerate(results, start=1):
        label = f"Test result {position}"
        if not result.subject.strip():
            problems.append(f"{label}: subject is required")
        if result.score < 0:
            problems.append(f"{label}: score cannot be negative")
        elif result.score > result.total_possible:
            problems.append(
                f"{label}: score {result.score} exceeds totalPossible {result.total_possible}"
            )
        if result.time_spent is not None and result.time_spent < 0:
            problems.append(f"{label}: timeSpent cannot be negative")
    return problems


def _behavior_problems(metrics: Optional[BehavioralMetrics]) -> List[str]:
    if metrics is None:
        return []
    problems = []
    for field in SCALE_FIELDS:
        value = getattr(metrics, field)
        if not 1 <= value <= 10:
            problems.append(f"{field} must be between 1 and 10, got {value}")
    if not 0 <= metrics.homework_completion <= 100:
        problems.append(
            f"homework_completion must be between 0 and 100, got {metrics.homework_completion}"
        )
    if metrics.attention_span <= 0:
        problems.append("attention_span must be greater than 0")
    return problems


def _style_problems(learning_style: Optional[str]) -> List[str]:
    if learning_style and learning_style not in LEARNING_STYLES:
        return [f"Unknown learning style '{learning_style}'"]
    return []


def validate_submission(submission: AssessmentSubmission) -> None:
    """Check a new-student assessment, reporting every problem at once.

    Raises:
        ValidationError: with one message per problem found
    """
    problems = []
    if not submission.name.strip():
        problems.append("Student name is required")
    problems += _result_problems(submission.test_results)
    problems += _behavior_problems(submission.behavioral_metrics)
    problems += _style_problems(submission.learning_style)
    if problems:
        raise ValidationError(problems)


def validate_append(append: AssessmentAppend) -> None:
    problems = _result_problems(append.test_results)
    problems += _behavior_problems(append.behavioral_metrics)
    problems += _style_problems(append.learning_style)
    if problems:
        raise ValidationError(problems)


# ----------------
# WRITES
# ----------------

def _stamp(results: Sequence[TestResult], now: datetime) -> List[TestResult]:
    """Results without an attempt date are dated ``now``."""
    return [r if r.attempt_date else r.model_copy(update={"attempt_date": now}) for r in results]


def _refresh(students: StudentRepository, analytics_repo: Optional[AnalyticsRepository]) -> None:
    if analytics_repo is not None:
        refresh_class_analytics(students, analytics_repo)


def submit_assessment(
    repo: StudentRepository,
    submission: AssessmentSubmission,
    analytics_repo: Optional[AnalyticsRepository] = None,
    now: Optional[datetime] = None
) -> Student:
    """Validate and store a new student; returns it with its assigned id."""
    validate_submission(submission)
    now = now or datetime.now(timezone.utc)

    student = Student(
        name=submission.name.strip(),
        grade=submission.grade,
        age=submission.age,
        test_results=_stamp(submission.test_results, now),
        learning_style=LearningStyle(submission.learning_style) if submission.learning_style else None,
        behavioral_metrics=submission.behavioral_metrics,
    )
    student.progress_metrics = build_progress_metrics(student, now)

    student.id = repo.save(student)
    logger.info(
        f"Assessment submitted for {student.name}",
        extra={"student_id": student.id, "operation": "submit_assessment"}
    )
    _refresh(repo, analytics_repo)
    return student


def append_assessment(
    repo: StudentRepository,
    student_id: str,
    append: AssessmentAppend,
    analytics_repo: Optional[AnalyticsRepository] = None,
    now: Optional[datetime] = None
) -> Student:
    """Add follow-up results to an existing student and refresh their progress."""
    validate_append(append)
    now = now or datetime.now(timezone.utc)
    student = repo.get(student_id)

    student.test_results = student.test_results + _stamp(append.test_results, now)
    if append.behavioral_metrics is not None:
        student.behavioral_metrics = append.behavioral_metrics
    if append.learning_style:
        student.learning_style = LearningStyle(append.learning_style)
    student.progress_metrics = build_progress_metrics(student, now, previous=student.progress_metrics)

    repo.update(student_id, student.to_document())
    logger.info(
        f"Appended {len(append.test_results)} results for {student.name}",
        extra={"student_id": student_id, "operation": "append_assessment"}
    )
    _refresh(repo, analytics_repo)
    return student


def add_milestone(
    repo: StudentRepository,
    student_id: str,
    milestone: MilestoneCreate,
    analytics_repo: Optional[AnalyticsRepository] = None
) -> Student:
    """Append a goal to the student's progress metrics.

    Raises:
        ValidationError: if the student has no progress metrics yet (fewer
            than two recorded attempts) or the title is blank
    """
    student = repo.get(student_id)
    if not milestone.title.strip():
        raise ValidationError(["Milestone title is required"])
    if student.progress_metrics is None:
        raise ValidationError(["Milestones can be set once at least two assessments are recorded"])

    student.progress_metrics.milestones.append(
        Milestone(
            title=milestone.title.strip(),
            description=milestone.description,
            target_date=milestone.target_date,
        )
    )
    repo.update(student_id, {"progressMetrics": student.to_document()["progressMetrics"]})
    _refresh(repo, analytics_repo)
    return student


def achieve_milestone(
    repo: StudentRepository,
    student_id: str,
    index: int,
    analytics_repo: Optional[AnalyticsRepository] = None,
    now: Optional[datetime] = None
) -> Student:
    """Mark milestone ``index`` achieved as of ``now``. Already achieved ones keep their date."""
    student = repo.get(student_id)
    milestones = student.progress_metrics.milestones if student.progress_metrics else []
    if not 0 <= index < len(milestones):
        raise ValidationError([f"Milestone {index} does not exist"])

    milestone = milestones[index]
    if not milestone.is_achieved:
        milestones[index] = milestone.model_copy(
            update={"achieved_date": now or datetime.now(timezone.utc), "is_achieved": True}
        )
        repo.update(student_id, {"progressMetrics": student.to_document()["progressMetrics"]})
        _refresh(repo, analytics_repo)
    return student
