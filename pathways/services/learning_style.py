"""Learning-style quiz scoring."""
from typing import Optional, Sequence

from pathways.core.errors import ValidationError
from pathways.domain.analytics import QuizResult
from pathways.domain.student import LEARNING_STYLES, LearningStyle


def score_quiz(answers: Sequence[Optional[str]]) -> QuizResult:
    """Tally quiz answers and pick the dominant learning style.

    Each answer names the style its option belongs to; blank answers are
    skipped. A tie at the top (or no answers at all) means Multimodal.

    Raises:
        ValidationError: if an answer is not a known learning style
    """
    counts = {style: 0 for style in LEARNING_STYLES}
    unknown = []

    for position, answer in enumerate(answers, start=1):
        if answer is None or not answer.strip():
            continue
        answer = answer.strip()
        if answer not in counts:
            unknown.append(f"Question {position}: unknown learning style '{answer}'")
            continue
        counts[answer] += 1

    if unknown:
        raise ValidationError(unknown)

    top = max(counts.values())
    leaders = [style for style, count in counts.items() if count == top]
    dominant = LearningStyle(leaders[0]) if len(leaders) == 1 else LearningStyle.MULTIMODAL

    return QuizResult(dominant_style=dominant, counts=counts)
