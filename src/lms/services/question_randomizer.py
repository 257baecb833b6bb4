"""Serve an assessment's questions in a fresh random order."""

import random
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lms.exceptions import NotFoundError
from lms.models.assessment import Assessment
from lms.models.question import Question
from lms.repositories.assessment import AssessmentRepository

T = TypeVar("T")


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a uniformly shuffled copy of ``items``; the input is untouched."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


@dataclass
class ShuffledAssessment:
    """An assessment paired with its questions in presentation order."""

    assessment: Assessment
    questions: list[Question]


class QuestionRandomizer:
    """Shuffle an assessment's questions for every fetch."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.SystemRandom()

    async def get_assessment_for_taking(
        self,
        session: AsyncSession,
        assessment_id: int,
    ) -> ShuffledAssessment:
        """Load an assessment and shuffle its questions.

        Raises:
            NotFoundError: If the assessment does not exist
        """
        assessment = await AssessmentRepository.get_with_questions(
            session, assessment_id
        )
        if assessment is None:
            raise NotFoundError(resource="Assessment", resource_id=assessment_id)

        questions = fisher_yates_shuffle(assessment.questions, self.rng)

        logger.info(
            "Assessment served for taking",
            assessment_id=assessment_id,
            question_count=len(questions),
        )

        return ShuffledAssessment(assessment=assessment, questions=questions)
