"""AI learning recommendations: prompt construction and response parsing.

The model replies in free text with a JSON object somewhere inside it. The
parser keeps the long-standing "first ``{`` to last ``}``" extraction and
only checks the outer shape; the recommendation contents are passed
through untouched.
"""
import json
import re
from typing import List, Protocol, Sequence

from pathways.core.errors import ParseError
from pathways.core.logging import get_logger
from pathways.domain.analytics import LearningRecommendation
from pathways.domain.student import TestResult

logger = get_logger(__name__)

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

FOCUS_BELOW_PCT = 70


class TextGenerator(Protocol):
    """Anything that turns a prompt into raw model text."""

    async def generate(self, prompt: str) -> str:
        ...


# ----------------
# PARSING
# ----------------

def count_top_level_objects(span: str) -> int:
    """Count balanced top-level ``{...}`` objects in ``span``.

    Braces inside JSON string literals are ignored.
    """
    depth = 0
    objects = 0
    in_string = False
    escaped = False

    for char in span:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                objects += 1

    return objects


def parse(raw_text: str) -> List[LearningRecommendation]:
    """Extract the ``recommendations`` list from a model reply.

    Raises:
        ParseError: "no JSON found" when the text holds no ``{...}`` span,
            "invalid JSON" when the span does not deserialize, or when
            ``recommendations`` is present but not a list

    Examples:
        >>> parse('prefix {"recommendations":[]} suffix')
        []
    """
    match = _JSON_SPAN.search(raw_text or "")
    if match is None:
        raise ParseError("no JSON found")

    span = match.group(0)
    candidates = count_top_level_objects(span)
    if candidates > 1:
        logger.warning(
            "AI response contains several JSON objects; parsing the widest span",
            extra={"candidate_objects": candidates, "span_length": len(span)}
        )

    try:
        payload = json.loads(span)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ParseError("invalid JSON") from e

    recommendations = payload.get("recommendations")
    if recommendations is None:
        return []
    if not isinstance(recommendations, list):
        raise ParseError("invalid JSON: 'recommendations' is not a list")
    return recommendations


# ----------------
# PROMPT
# ----------------

def build_recommendation_prompt(student_name: str, test_results: Sequence[TestResult]) -> str:
    """Prompt asking for per-subject recommendations as JSON."""
    lines = [
        f"- {r.subject}: {r.score}/{r.total_possible} ({r.percentage:.1f}%)"
        for r in test_results
    ]
    scores = "\n".join(lines) if lines else "- No test results recorded"

    return f"""You are an experienced teacher helping a student who struggles in some subjects.

Student: {student_name}
Test results:
{scores}

For every subject scored below {FOCUS_BELOW_PCT}%, suggest a personalised learning plan.
Respond with JSON only, in exactly this shape:
{{
  "recommendations": [
    {{
      "subject": "subject name",
      "learningStyle": "Visual | Auditory | Reading/Writing | Kinesthetic | Multimodal",
      "techniques": ["study technique", "..."],
      "resources": ["specific resource", "..."],
      "strengths": ["what the student does well", "..."],
      "weaknesses": ["what to work on", "..."]
    }}
  ]
}}"""


async def generate_recommendations(
    generator: TextGenerator,
    student_name: str,
    test_results: Sequence[TestResult]
) -> List[LearningRecommendation]:
    """Ask the model for recommendations and parse its reply.

    Connectivity and parse errors propagate unchanged; there is no retry.
    """
    prompt = build_recommendation_prompt(student_name, test_results)
    raw_text = await generator.generate(prompt)
    recommendations = parse(raw_text)
    logger.info(
        f"Generated {len(recommendations)} recommendations for {student_name}",
        extra={"operation": "generate_recommendations"}
    )
    return recommendations
