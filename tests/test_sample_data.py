"""Tests for sample data generation."""
import random
from datetime import timedelta

from pathways.services.sample_data import SAMPLE_SUBJECTS, generate_sample_student, populate_sample_data


class TestGenerateSampleStudent:
    """Test generated students stay within the documented ranges."""

    def test_ranges(self, now):
        rng = random.Random(7)
        for index in range(50):
            student = generate_sample_student(index, rng, now=now)

            assert student.name == f"Student {index + 1}"
            assert student.grade in {"9", "10", "11", "12"}
            assert 15 <= student.age <= 21

            subjects = [r.subject for r in student.test_results]
            assert 1 <= len(subjects) <= 3
            assert len(set(subjects)) == len(subjects)
            assert set(subjects) <= set(SAMPLE_SUBJECTS)
            for result in student.test_results:
                assert 60 <= result.score <= 100
                assert result.total_possible == 100
                assert now - timedelta(days=29) <= result.attempt_date <= now

            if student.progress_metrics:
                assert 0 <= student.progress_metrics.improvement_rate <= 15
                assert student.progress_metrics.milestones[0].target_date == now + timedelta(days=15)
            if student.behavioral_metrics:
                assert 1 <= student.behavioral_metrics.anxiety_level <= 8

    def test_seeded_generation_is_reproducible(self, now):
        first = generate_sample_student(0, random.Random(42), now=now)
        second = generate_sample_student(0, random.Random(42), now=now)

        assert first == second


class TestPopulateSampleData:
    """Test persisting sample students."""

    def test_saves_students_and_analytics(self, student_repo, analytics_repo):
        created = populate_sample_data(student_repo, analytics_repo, count=5, rng=random.Random(1))

        assert len(created) == 5
        assert all(s.id for s in created)
        assert len(student_repo.load_all()) == 5
        assert analytics_repo.load().total_students == 5
