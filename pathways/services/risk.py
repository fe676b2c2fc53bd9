"""Risk triage for individual students.

Risk is a coarse ordering signal for teacher attention, evaluated as a
priority cascade: improvement data first, then behaviour, then raw scores.
"""
from typing import Iterable, Optional

from pathways.core.config import settings
from pathways.domain.analytics import RiskLevel
from pathways.domain.student import Student, TestResult


# Rule thresholds
LOW_IMPROVEMENT_RATE = 5
LOW_MOTIVATION = 4
HIGH_ANXIETY = 7
LOW_HOMEWORK_COMPLETION = 40
MANY_LOW_SCORES = 2


def count_low_scores(test_results: Iterable[TestResult], threshold_pct: Optional[float] = None) -> int:
    """Number of attempts scoring strictly below ``threshold_pct`` percent."""
    if threshold_pct is None:
        threshold_pct = settings.slow_learner_threshold_pct
    return sum(1 for result in test_results if result.percentage < threshold_pct)


def is_slow_learner(
    student: Student,
    threshold_pct: Optional[float] = None,
    min_low_scores: Optional[int] = None
) -> bool:
    """Whether the student has at least ``min_low_scores`` low attempts.

    ``min_low_scores`` defaults to SLOW_LEARNER_MIN_LOW_SCORES (1, meaning
    any single low score flags the student).
    """
    if min_low_scores is None:
        min_low_scores = settings.slow_learner_min_low_scores
    return count_low_scores(student.test_results, threshold_pct) >= min_low_scores


def classify_risk(student: Student, threshold_pct: Optional[float] = None) -> RiskLevel:
    """Classify a student as high, medium or low risk. First matching rule wins.

    1. no progress metrics -> medium (not enough data)
    2. improvement rate below 5 -> high
    3. low motivation, high anxiety or poor homework completion -> high
    4. more than two low scores -> high; any low score -> medium
    5. otherwise -> low
    """
    progress = student.progress_metrics
    if progress is None:
        return RiskLevel.MEDIUM

    if progress.improvement_rate < LOW_IMPROVEMENT_RATE:
        return RiskLevel.HIGH

    behavior = student.behavioral_metrics
    if behavior is not None and (
        behavior.motivation_level < LOW_MOTIVATION
        or behavior.anxiety_level > HIGH_ANXIETY
        or behavior.homework_completion < LOW_HOMEWORK_COMPLETION
    ):
        return RiskLevel.HIGH

    low_scores = count_low_scores(student.test_results, threshold_pct)
    if low_scores > MANY_LOW_SCORES:
        return RiskLevel.HIGH
    if low_scores > 0:
        return RiskLevel.MEDIUM

    return RiskLevel.LOW
