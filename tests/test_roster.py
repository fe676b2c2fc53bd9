"""Unit tests for the teacher roster view."""
import pytest

from pathways.domain.analytics import RiskLevel
from pathways.services.roster import roster


@pytest.fixture
def students(make_student, make_result, calm_behavior):
    return [
        make_student("Zoe", [make_result("Math", 90)], improvement_rate=12, behavior=calm_behavior),  # low
        make_student("adam", [make_result("Physics", 50)]),  # medium, no rate
        make_student("Maya", [make_result("Math", 95)], improvement_rate=2),  # high
        make_student("Leo", [make_result("Math", 80)], improvement_rate=20, behavior=calm_behavior),  # low
        make_student("Iris", [make_result("Physics", 85)], improvement_rate=-3),  # high
    ]


class TestRoster:
    """Test roster filtering and sorting."""

    def test_risk_sort_puts_high_first_and_is_stable(self, students):
        rows = roster(students)

        assert [r.name for r in rows] == ["Maya", "Iris", "adam", "Zoe", "Leo"]
        assert [r.risk_level for r in rows[:2]] == [RiskLevel.HIGH, RiskLevel.HIGH]

    def test_name_sort_ignores_case(self, students):
        assert [r.name for r in roster(students, sort_by="name")] == ["adam", "Iris", "Leo", "Maya", "Zoe"]

    def test_improvement_sort_treats_missing_as_zero(self, students):
        rows = roster(students, sort_by="improvement")
        assert [r.name for r in rows] == ["Leo", "Zoe", "Maya", "adam", "Iris"]

    def test_subject_filter(self, students):
        assert {r.name for r in roster(students, subject="Physics")} == {"adam", "Iris"}

    def test_row_fields(self, students):
        rows = {r.name: r for r in roster(students)}

        assert rows["Leo"].improvement_band == "strong"
        assert rows["Iris"].improvement_band == "declining"
        assert rows["adam"].improvement_rate is None
        assert rows["adam"].improvement_band is None
        assert rows["adam"].slow_learner is True

    def test_unknown_sort_key(self, students):
        with pytest.raises(ValueError):
            roster(students, sort_by="age")
