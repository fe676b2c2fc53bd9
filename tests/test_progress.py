"""Unit tests for progress calculations."""
from datetime import timedelta

import pytest

from pathways.domain.student import Milestone, ProgressMetrics
from pathways.services.progress import (
    build_progress_metrics,
    improvement_band,
    milestone_status,
    sort_attempts,
    subject_improvement,
    subject_improvements,
)


class TestSortAttempts:
    """Test chronological ordering."""

    def test_newest_first_with_undated_last(self, make_result):
        undated_a = make_result(score=1)
        old = make_result(score=2, days_ago=10)
        undated_b = make_result(score=3)
        new = make_result(score=4, days_ago=1)

        assert sort_attempts([undated_a, old, undated_b, new]) == [new, old, undated_a, undated_b]

    def test_same_date_keeps_insertion_order(self, make_result):
        first = make_result(score=70, days_ago=3)
        second = make_result(score=80, days_ago=3)

        assert sort_attempts([first, second]) == [first, second]


class TestSubjectImprovement:
    """Test oldest-vs-newest improvement."""

    def test_single_attempt_is_zero(self, make_result):
        assert subject_improvement([make_result(score=35)]) == 0

    def test_no_attempts_is_zero(self):
        assert subject_improvement([]) == 0

    def test_newest_minus_oldest(self, make_result):
        tests = [make_result(score=80, days_ago=1), make_result(score=60, days_ago=5)]
        assert subject_improvement(tests) == 20

    def test_regression_is_negative(self, make_result):
        tests = [make_result(score=30, total=50, days_ago=1), make_result(score=45, total=50, days_ago=5)]
        assert subject_improvement(tests) == pytest.approx(-30)

    def test_per_subject_from_unsorted_history(self, make_result):
        tests = [
            make_result("Math", 60, days_ago=10),
            make_result("Physics", 70, days_ago=5),
            make_result("Math", 80, days_ago=1),
        ]

        result = subject_improvements(tests)

        assert list(result) == ["Math", "Physics"]
        assert result == {"Math": 20, "Physics": 0}


class TestBuildProgressMetrics:
    """Test derivation of longitudinal metrics."""

    def test_needs_two_attempts(self, make_student, make_result, now):
        assert build_progress_metrics(make_student(results=[make_result()]), now) is None

    def test_single_attempt_keeps_previous(self, make_student, make_result, now):
        student = make_student(results=[make_result()], improvement_rate=7)
        previous = student.progress_metrics

        assert build_progress_metrics(student, now, previous=previous) is previous

    def test_scores_rate_and_consistency(self, make_student, make_result, now):
        student = make_student(results=[
            make_result("Math", 60, days_ago=10),
            make_result("Physics", 70, days_ago=5),
            make_result("Physics", 90, days_ago=2),
            make_result("Math", 80, days_ago=1),
        ])

        metrics = build_progress_metrics(student, now)

        assert metrics.initial_score == 65.0
        assert metrics.current_score == 85.0
        assert metrics.improvement_rate == 20.0
        # sample stdev of 60/70/90/80 is 12.9 -> 10 - 2.58
        assert metrics.consistency_score == 7
        assert metrics.start_date == now - timedelta(days=10)
        assert metrics.current_date == now
        assert metrics.milestones == []

    def test_consistency_is_clamped(self, make_student, make_result, now):
        student = make_student(results=[make_result(score=0, days_ago=2), make_result(score=100, days_ago=1)])
        assert build_progress_metrics(student, now).consistency_score == 1

    def test_previous_start_date_and_milestones_carry_over(self, make_student, make_result, now):
        milestone = Milestone(title="Fractions", target_date=now + timedelta(days=5))
        previous = ProgressMetrics(
            start_date=now - timedelta(days=90),
            current_date=now - timedelta(days=30),
            initial_score=50,
            current_score=55,
            improvement_rate=5,
            consistency_score=6,
            milestones=[milestone],
        )
        student = make_student(results=[make_result(score=50, days_ago=3), make_result(score=70, days_ago=1)])

        metrics = build_progress_metrics(student, now, previous=previous)

        assert metrics.start_date == now - timedelta(days=90)
        assert metrics.milestones == [milestone]
        assert metrics.improvement_rate == 20.0


class TestMilestones:
    """Test milestone state."""

    def test_achieved_date_is_authoritative(self, now):
        milestone = Milestone(title="Fractions", target_date=now, achieved_date=now, is_achieved=False)
        assert milestone.is_achieved is True

        milestone = Milestone(title="Fractions", target_date=now, is_achieved=True)
        assert milestone.is_achieved is False

    def test_status(self, now):
        achieved = Milestone(title="a", target_date=now - timedelta(days=1), achieved_date=now)
        overdue = Milestone(title="b", target_date=now - timedelta(days=1))
        upcoming = Milestone(title="c", target_date=now + timedelta(days=1))

        assert milestone_status(achieved, now) == "achieved"
        assert milestone_status(overdue, now) == "overdue"
        assert milestone_status(upcoming, now) == "upcoming"


class TestImprovementBand:
    """Test improvement rate buckets."""

    @pytest.mark.parametrize("rate,band", [
        (15, "strong"),
        (14.9, "steady"),
        (5, "steady"),
        (0, "slow"),
        (None, "slow"),
        (-0.1, "declining"),
    ])
    def test_bands(self, rate, band):
        assert improvement_band(rate) == band
