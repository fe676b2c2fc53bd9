"""Domain models for students and their assessment history.

Attribute names are snake_case in Python and camelCase on the wire and in
stored documents (``totalPossible``, ``attemptDate`` ...).
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC so mixed inputs stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LearningStyle(str, Enum):
    VISUAL = "Visual"
    AUDITORY = "Auditory"
    READING_WRITING = "Reading/Writing"
    KINESTHETIC = "Kinesthetic"
    MULTIMODAL = "Multimodal"


LEARNING_STYLES = [style.value for style in LearningStyle]


class TestResult(CamelModel):
    """One graded attempt at a subject test.

    ``score <= total_possible`` is expected but only checked when an
    assessment is submitted, not when stored records are loaded.
    """
    __test__ = False  # not a pytest test class

    subject: str
    score: int
    total_possible: int = Field(gt=0)
    attempt_date: Optional[UtcDatetime] = None
    time_spent: Optional[float] = None
    mistake_patterns: Optional[List[str]] = None
    topic_breakdown: Optional[Dict[str, float]] = None

    @property
    def percentage(self) -> float:
        return self.score / self.total_possible * 100


class BehavioralMetrics(CamelModel):
    """Teacher-observed behaviour snapshot; scales are 1-10 unless noted."""
    class_participation: int
    homework_completion: float  # percent 0-100
    attention_span: float  # minutes
    peer_collaboration: int
    frustration_tolerance: int
    motivation_level: int
    anxiety_level: int
    notes: Optional[str] = None


class Milestone(CamelModel):
    """A progress goal. ``achieved_date`` is authoritative for ``is_achieved``."""
    title: str
    description: str = ""
    target_date: UtcDatetime
    achieved_date: Optional[UtcDatetime] = None
    is_achieved: bool = False

    @model_validator(mode="after")
    def _sync_achieved(self) -> "Milestone":
        self.is_achieved = self.achieved_date is not None
        return self

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return not self.is_achieved and self.target_date < now


class ProgressMetrics(CamelModel):
    start_date: UtcDatetime
    current_date: UtcDatetime
    initial_score: float
    current_score: float
    improvement_rate: float  # signed percentage points
    consistency_score: float  # 1-10
    milestones: List[Milestone] = Field(default_factory=list)


class LearningHistoryEntry(CamelModel):
    date: UtcDatetime
    activity: str
    duration: float  # minutes
    engagement_level: int  # 1-10
    completion_status: Literal["Completed", "Partial", "Abandoned"]
    notes: Optional[str] = None


class Student(CamelModel):
    """Aggregate root. ``id`` is assigned by the store on first save.

    ``test_results`` keeps insertion order, which is not necessarily
    chronological; sort by ``attempt_date`` before reading trends.
    """
    id: Optional[str] = None
    name: str
    grade: Optional[str] = None
    age: Optional[int] = None
    test_results: List[TestResult] = Field(default_factory=list)
    learning_style: Optional[LearningStyle] = None
    behavioral_metrics: Optional[BehavioralMetrics] = None
    progress_metrics: Optional[ProgressMetrics] = None
    learning_history: Optional[List[LearningHistoryEntry]] = None

    def to_document(self) -> dict:
        """Serialize to the stored camelCase shape, without the id."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})


# -----------------
# REQUEST PAYLOADS
# -----------------

class AssessmentSubmission(CamelModel):
    """Teacher-entered assessment for a new student.

    Ranges are deliberately not declared here: ``validate_submission``
    checks them and reports every problem at once.
    """
    name: str
    grade: Optional[str] = None
    age: Optional[int] = None
    test_results: List[TestResult] = Field(default_factory=list)
    learning_style: Optional[str] = None
    behavioral_metrics: Optional[BehavioralMetrics] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Maya Chen",
                "grade": "10",
                "testResults": [
                    {"subject": "Calculus & Mathematics", "score": 54, "totalPossible": 100},
                    {"subject": "Engineering Physics", "score": 78, "totalPossible": 100}
                ],
                "learningStyle": "Visual"
            }
        }
    )


class AssessmentAppend(CamelModel):
    """Follow-up assessment for an existing student."""
    test_results: List[TestResult]
    behavioral_metrics: Optional[BehavioralMetrics] = None
    learning_style: Optional[str] = None


class MilestoneCreate(CamelModel):
    title: str
    description: str = ""
    target_date: UtcDatetime
