"""Teaching methods catalog lookups with generated defaults."""
from typing import List

from pathways.core.logging import get_logger
from pathways.domain.analytics import TeachingMethod
from pathways.infrastructure.repositories import TeachingMethodRepository

logger = get_logger(__name__)


def default_teaching_methods(subject: str, learning_style: str) -> List[TeachingMethod]:
    """Three starter methods for a subject/style; the scaffolded one is general."""
    return [
        TeachingMethod(
            name="Interactive Learning Activities",
            description=(
                f"Interactive {subject} activities designed specifically for {learning_style} "
                "learners to reinforce key concepts through hands-on engagement."
            ),
            steps=[
                "Identify the specific concepts the student is struggling with",
                "Create tailored interactive activities that match their learning style",
                "Guide the student through the activity with clear instructions",
                "Ask reflective questions to reinforce understanding",
                "Have the student demonstrate mastery independently",
            ],
            resources=["Interactive digital tools", "Physical manipulatives", "Guided worksheets"],
            benefits=[
                "Increases engagement and motivation",
                "Builds confidence through guided practice",
                "Creates memory anchors for abstract concepts",
                "Allows immediate feedback and correction",
            ],
            effectiveness=8,
            time_required=30,
            subject=subject,
            learning_style=learning_style,
            is_general=False,
        ),
        TeachingMethod(
            name="Visual Concept Mapping",
            description=(
                f"Strategic concept mapping approach for {subject} that helps {learning_style} "
                "learners visualize relationships between key ideas and supporting details."
            ),
            steps=[
                "Identify the central concept or problem area",
                "Break down the concept into component parts",
                "Create a visual map showing relationships",
                "Have student explain the map in their own words",
                "Gradually add complexity as understanding improves",
            ],
            resources=["Mapping software or large paper", "Colored markers", "Reference materials"],
            benefits=[
                "Creates visual memory aids",
                "Demonstrates relationships between concepts",
                "Helps identify knowledge gaps",
                "Provides a structured framework for complex topics",
            ],
            effectiveness=9,
            time_required=45,
            subject=subject,
            learning_style=learning_style,
            is_general=False,
        ),
        TeachingMethod(
            name="Scaffolded Practice Sessions",
            description=(
                f"Progressive approach to {subject} learning that gradually reduces support "
                f"as the {learning_style} student builds confidence and skills."
            ),
            steps=[
                "Begin with fully guided examples",
                "Move to partially completed problems",
                "Provide hints for independent work",
                "Allow completely independent problem-solving",
                "Review and reflect on the learning process",
            ],
            resources=["Structured worksheets", "Progress tracking sheets", "Reference guides"],
            benefits=[
                "Reduces anxiety about difficult concepts",
                "Builds confidence through incremental success",
                "Creates a clear pathway to mastery",
                "Allows personalized pacing",
            ],
            effectiveness=7,
            time_required=60,
            subject=subject,
            learning_style=learning_style,
            is_general=True,
        ),
    ]


def get_teaching_methods(repo: TeachingMethodRepository, subject: str, learning_style: str) -> List[TeachingMethod]:
    """Methods for a subject and learning style.

    Lookup order: exact subject+style, then general methods for the style,
    then freshly generated defaults (which are stored for next time).
    """
    methods = repo.find(subject, learning_style)
    if methods:
        return methods

    methods = repo.find_general(learning_style)
    if methods:
        return methods

    logger.info(f"No teaching methods stored for {subject}/{learning_style}, generating defaults")
    generated = []
    for method in default_teaching_methods(subject, learning_style):
        method.id = repo.add(method)
        generated.append(method)
    return generated
