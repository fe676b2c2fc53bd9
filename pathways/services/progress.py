"""Progress calculations over a student's assessment history.

Test results are stored in insertion order, so everything here sorts by
``attempt_date`` first (newest first, undated attempts last).
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import pandas as pd

from pathways.domain.student import Milestone, ProgressMetrics, Student, TestResult
from pathways.utils.numbers import clamp, round_half_up


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

STRONG_IMPROVEMENT = 15
STEADY_IMPROVEMENT = 5


def sort_attempts(tests: Sequence[TestResult]) -> List[TestResult]:
    """Newest attempt first. Ties and undated attempts keep insertion order."""
    return sorted(
        tests,
        key=lambda t: (t.attempt_date is not None, t.attempt_date or _OLDEST),
        reverse=True,
    )


def group_by_subject(tests: Sequence[TestResult]) -> Dict[str, List[TestResult]]:
    """Group attempts per subject (first-seen order), each group newest first."""
    groups: Dict[str, List[TestResult]] = {}
    for test in tests:
        groups.setdefault(test.subject, []).append(test)
    return {subject: sort_attempts(attempts) for subject, attempts in groups.items()}


def subject_improvement(tests: Sequence[TestResult]) -> float:
    """Percentage-point change from the oldest to the newest attempt.

    ``tests`` must be one subject's attempts sorted newest first. Fewer than
    two attempts count as no change (0), not as missing data.
    """
    if len(tests) < 2:
        return 0
    return tests[0].percentage - tests[-1].percentage


def subject_improvements(tests: Sequence[TestResult]) -> Dict[str, float]:
    return {
        subject: subject_improvement(attempts)
        for subject, attempts in group_by_subject(tests).items()
    }


def _consistency_score(percentages: List[float]) -> float:
    if len(percentages) < 2:
        return 10
    spread = float(pd.Series(percentages).std())
    return clamp(round_half_up(10 - spread / 5), 1, 10)


def build_progress_metrics(
    student: Student,
    now: Optional[datetime] = None,
    previous: Optional[ProgressMetrics] = None
) -> Optional[ProgressMetrics]:
    """Derive longitudinal metrics from the student's test history.

    initial/current scores are the mean percentage of each subject's oldest
    and newest attempt. With fewer than two attempts there is no trend yet,
    so ``previous`` is returned unchanged (possibly None).
    """
    tests = student.test_results
    if len(tests) < 2:
        return previous

    now = now or datetime.now(timezone.utc)
    groups = group_by_subject(tests)
    initial = sum(g[-1].percentage for g in groups.values()) / len(groups)
    current = sum(g[0].percentage for g in groups.values()) / len(groups)

    if previous is not None:
        start_date = previous.start_date
    else:
        dated = [t.attempt_date for t in tests if t.attempt_date is not None]
        start_date = min(dated) if dated else now

    return ProgressMetrics(
        start_date=start_date,
        current_date=now,
        initial_score=round_half_up(initial, 1),
        current_score=round_half_up(current, 1),
        improvement_rate=round_half_up(current - initial, 1),
        consistency_score=_consistency_score([t.percentage for t in tests]),
        milestones=list(previous.milestones) if previous else [],
    )


def milestone_status(milestone: Milestone, now: Optional[datetime] = None) -> str:
    if milestone.is_achieved:
        return "achieved"
    if milestone.is_overdue(now):
        return "overdue"
    return "upcoming"


def improvement_band(rate: Optional[float]) -> str:
    """Bucket an improvement rate: strong, steady, slow or declining."""
    rate = rate or 0
    if rate >= STRONG_IMPROVEMENT:
        return "strong"
    if rate >= STEADY_IMPROVEMENT:
        return "steady"
    if rate >= 0:
        return "slow"
    return "declining"
