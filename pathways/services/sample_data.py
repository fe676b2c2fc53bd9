"""Random sample students for demos and local development."""
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pathways.core.logging import get_logger
from pathways.domain.student import (
    LEARNING_STYLES,
    BehavioralMetrics,
    LearningStyle,
    Milestone,
    ProgressMetrics,
    Student,
    TestResult,
)
from pathways.infrastructure.repositories import AnalyticsRepository, StudentRepository
from pathways.services.analytics import aggregate

logger = get_logger(__name__)

SAMPLE_SUBJECTS = [
    "Mathematics", "Physics", "Chemistry", "Computer Science",
    "Engineering", "Language Arts", "History", "Social Studies",
]
SAMPLE_GRADES = ["9", "10", "11", "12"]
SAMPLE_MISTAKES = ["Calculation errors", "Concept confusion"]


def _test_results(rng: random.Random, now: datetime) -> List[TestResult]:
    subjects = rng.sample(SAMPLE_SUBJECTS, rng.randint(1, 3))
    results = []
    for subject in subjects:
        results.append(TestResult(
            subject=subject,
            score=rng.randint(60, 100),
            total_possible=100,
            attempt_date=now - timedelta(days=rng.randint(0, 29)),
            time_spent=rng.randint(30, 60),
            mistake_patterns=list(SAMPLE_MISTAKES) if rng.random() > 0.6 else None,
        ))
    return results


def _behavioral_metrics(rng: random.Random) -> BehavioralMetrics:
    return BehavioralMetrics(
        class_participation=rng.randint(3, 8),
        homework_completion=rng.randint(60, 100),
        attention_span=rng.randint(20, 40),
        peer_collaboration=rng.randint(3, 8),
        frustration_tolerance=rng.randint(3, 8),
        motivation_level=rng.randint(3, 8),
        anxiety_level=rng.randint(1, 8),
        notes="Generated sample student",
    )


def _progress_metrics(rng: random.Random, now: datetime) -> ProgressMetrics:
    return ProgressMetrics(
        start_date=now - timedelta(days=30),
        current_date=now,
        initial_score=rng.randint(50, 80),
        current_score=rng.randint(70, 90),
        improvement_rate=rng.randint(0, 15),
        consistency_score=rng.randint(3, 8),
        milestones=[
            Milestone(
                title="Basic Concepts Mastery",
                description="Complete all basic exercises with 80% accuracy",
                target_date=now + timedelta(days=15),
            )
        ],
    )


def generate_sample_student(index: int, rng: Optional[random.Random] = None, now: Optional[datetime] = None) -> Student:
    """Build "Student {index + 1}" with random scores and optional metrics.

    Pass a seeded ``random.Random`` for reproducible output.
    """
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)

    return Student(
        name=f"Student {index + 1}",
        grade=rng.choice(SAMPLE_GRADES),
        age=rng.randint(15, 21),
        learning_style=LearningStyle(rng.choice(LEARNING_STYLES)),
        test_results=_test_results(rng, now),
        behavioral_metrics=_behavioral_metrics(rng) if rng.random() > 0.3 else None,
        progress_metrics=_progress_metrics(rng, now) if rng.random() > 0.4 else None,
    )


def populate_sample_data(
    repo: StudentRepository,
    analytics_repo: AnalyticsRepository,
    count: int = 10,
    rng: Optional[random.Random] = None
) -> List[Student]:
    """Store ``count`` sample students, then save analytics over the whole class."""
    rng = rng or random.Random()
    created = []
    for index in range(count):
        student = generate_sample_student(index, rng)
        student.id = repo.save(student)
        created.append(student)

    analytics = aggregate(repo.load_all(), interventions=analytics_repo.get_interventions())
    analytics_repo.save(analytics)
    logger.info(f"Populated {count} sample students", extra={"student_count": count})
    return created
