"""Domain models for class analytics, triage and teaching support."""
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import Field

from pathways.domain.student import CamelModel, LearningStyle, Milestone, TestResult


DEFAULT_INTERVENTIONS = [
    "Concept Mapping for Visual Learners",
    "Spaced Repetition Practice",
    "Peer-Led Tutorial Groups",
    "Multimedia Learning Resources",
]

DEFAULT_TEACHING_APPROACHES = [
    "Implement visual aids and diagrams for mathematical concepts",
    "Break complex problems into smaller, manageable steps",
    "Provide immediate feedback on practice problems",
    "Use real-world applications to demonstrate abstract concepts",
    "Create supportive learning environments that reduce math anxiety",
]


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClassAnalytics(CamelModel):
    """Class-wide aggregate, always re-derivable from the student records.

    A stored copy is only a cache.
    """
    total_students: int = 0
    slow_learner_percentage: int = 0
    average_improvement: float = 0.0
    most_challenged_subjects: List[str] = Field(default_factory=list)  # worst first
    most_effective_interventions: List[str] = Field(default_factory=lambda: list(DEFAULT_INTERVENTIONS))
    recommended_teaching_approaches: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TEACHING_APPROACHES)
    )


class TeachingMethod(CamelModel):
    id: Optional[str] = None
    name: str
    description: str
    steps: List[str] = Field(default_factory=list)
    resources: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    effectiveness: int  # 1-10
    time_required: int  # minutes per session
    subject: str
    learning_style: str
    is_general: bool = False


# Parsed straight out of AI text; only the surrounding JSON shape is checked.
LearningRecommendation = Dict[str, Any]


# -----------------
# VIEWS
# -----------------

class RosterEntry(CamelModel):
    id: Optional[str]
    name: str
    risk_level: RiskLevel
    improvement_rate: Optional[float] = None
    improvement_band: Optional[str] = None
    slow_learner: bool = False


class MilestoneView(Milestone):
    status: str  # achieved | overdue | upcoming


class StudentProgress(CamelModel):
    student_id: str
    name: str
    risk_level: RiskLevel
    subject_improvements: Dict[str, float]
    improvement_rate: Optional[float] = None
    improvement_band: Optional[str] = None
    milestones: List[MilestoneView] = Field(default_factory=list)


class InterventionCreate(CamelModel):
    name: str = Field(min_length=1)


class QuizSubmission(CamelModel):
    """One chosen learning style per quiz question; blanks are skipped answers."""
    answers: List[Optional[str]]


class QuizResult(CamelModel):
    dominant_style: LearningStyle
    counts: Dict[str, int]


class RecommendationRequest(CamelModel):
    student_name: str
    test_results: List[TestResult] = Field(default_factory=list)
    student_id: Optional[str] = None


class RecommendationResponse(CamelModel):
    student_name: str
    recommendations: List[LearningRecommendation]
