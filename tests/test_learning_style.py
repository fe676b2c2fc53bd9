"""Unit tests for learning-style quiz scoring."""
import pytest

from pathways.core.errors import ValidationError
from pathways.domain.student import LearningStyle
from pathways.services.learning_style import score_quiz


class TestScoreQuiz:
    """Test quiz tallies and the dominant style."""

    def test_unique_maximum_wins(self):
        result = score_quiz(["Visual", "Auditory", "Visual", "Kinesthetic", "Visual"])

        assert result.dominant_style == LearningStyle.VISUAL
        assert result.counts == {
            "Visual": 3,
            "Auditory": 1,
            "Reading/Writing": 0,
            "Kinesthetic": 1,
            "Multimodal": 0,
        }

    def test_tie_is_multimodal(self):
        assert score_quiz(["Visual", "Auditory"]).dominant_style == LearningStyle.MULTIMODAL

    def test_no_answers_is_multimodal(self):
        result = score_quiz([])

        assert result.dominant_style == LearningStyle.MULTIMODAL
        assert set(result.counts.values()) == {0}

    def test_blank_answers_are_skipped(self):
        result = score_quiz(["Reading/Writing", None, "", "  "])

        assert result.dominant_style == LearningStyle.READING_WRITING
        assert sum(result.counts.values()) == 1

    def test_unknown_style_rejected(self):
        with pytest.raises(ValidationError, match="Question 2"):
            score_quiz(["Visual", "Telepathic"])
