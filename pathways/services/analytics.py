"""Class-wide analytics aggregation.

``aggregate`` is a pure function over the full student list. The stored
analytics document is a cache of its output and can be recomputed at any
time from the students collection.
"""
from typing import List, Optional, Sequence

import pandas as pd

from pathways.core.errors import ValidationError
from pathways.core.logging import get_logger
from pathways.domain.analytics import ClassAnalytics
from pathways.domain.student import Student
from pathways.infrastructure.repositories import AnalyticsRepository, StudentRepository
from pathways.services.risk import is_slow_learner
from pathways.utils.numbers import round_half_up

logger = get_logger(__name__)

MIN_SUBJECT_ATTEMPTS = 2
TOP_CHALLENGED_SUBJECTS = 3


# ----------------
# AGGREGATION
# ----------------

def most_challenged_subjects(students: Sequence[Student], limit: int = TOP_CHALLENGED_SUBJECTS) -> List[str]:
    """Subjects with the lowest mean percentage, worst first.

    Subjects with fewer than two recorded attempts are left out. Equal means
    keep the order in which the subjects were first seen.
    """
    rows = [
        {"subject": result.subject, "percentage": result.percentage}
        for student in students
        for result in student.test_results
    ]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    per_subject = df.groupby("subject", sort=False)["percentage"].agg(["mean", "count"])
    per_subject = per_subject[per_subject["count"] >= MIN_SUBJECT_ATTEMPTS]
    per_subject = per_subject.sort_values("mean", kind="stable")
    return per_subject.head(limit).index.tolist()


def aggregate(
    students: Sequence[Student],
    interventions: Optional[List[str]] = None,
    teaching_approaches: Optional[List[str]] = None,
    threshold_pct: Optional[float] = None,
    min_low_scores: Optional[int] = None
) -> ClassAnalytics:
    """Compute class analytics from a list of students.

    Args:
        students: Every student in the class
        interventions: Override for the static interventions catalog
        teaching_approaches: Override for the static approaches catalog
        threshold_pct: Percentage below which an attempt counts as low
        min_low_scores: Low attempts needed to flag a slow learner

    Returns:
        ClassAnalytics; all-zero (with the static catalogs) for an empty class
    """
    total = len(students)

    slow_learners = sum(1 for s in students if is_slow_learner(s, threshold_pct, min_low_scores))
    slow_pct = int(round_half_up(100 * slow_learners / total)) if total else 0

    rates = [
        s.progress_metrics.improvement_rate
        for s in students
        if s.progress_metrics is not None and s.progress_metrics.improvement_rate is not None
    ]
    average_improvement = round_half_up(sum(rates) / len(rates), 1) if rates else 0.0

    analytics = ClassAnalytics(
        total_students=total,
        slow_learner_percentage=slow_pct,
        average_improvement=average_improvement,
        most_challenged_subjects=most_challenged_subjects(students),
    )
    if interventions is not None:
        analytics.most_effective_interventions = list(interventions)
    if teaching_approaches is not None:
        analytics.recommended_teaching_approaches = list(teaching_approaches)
    return analytics


# ----------------
# CACHE
# ----------------

def refresh_class_analytics(students: StudentRepository, analytics_repo: AnalyticsRepository) -> ClassAnalytics:
    """Recompute analytics from the stored students and overwrite the cache."""
    roster = students.load_all()
    analytics = aggregate(roster, interventions=analytics_repo.get_interventions())
    analytics_repo.save(analytics)
    logger.info("Class analytics recomputed", extra={"student_count": len(roster)})
    return analytics


def get_class_analytics(
    students: StudentRepository,
    analytics_repo: AnalyticsRepository,
    refresh: bool = False
) -> ClassAnalytics:
    """Cached analytics, recomputed on a cache miss or when ``refresh`` is set."""
    if not refresh:
        cached = analytics_repo.load()
        if cached is not None:
            return cached
    return refresh_class_analytics(students, analytics_repo)


# ----------------
# INTERVENTIONS
# ----------------

def list_interventions(analytics_repo: AnalyticsRepository) -> List[str]:
    return analytics_repo.get_interventions()


def add_intervention(
    name: str,
    students: StudentRepository,
    analytics_repo: AnalyticsRepository
) -> List[str]:
    """Record a teacher-proposed intervention and refresh the cached analytics."""
    name = name.strip()
    if not name:
        raise ValidationError(["Intervention name is required"])
    names = analytics_repo.save_intervention(name)
    refresh_class_analytics(students, analytics_repo)
    return names
