"""Repository for question database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms.models.question import Question


class QuestionRepository:
    """Handle question persistence operations."""

    @staticmethod
    async def get_by_ids_and_assessment_id(
        session: AsyncSession,
        question_ids: list[int],
        assessment_id: int,
    ) -> dict[int, Question]:
        """Batch-load questions scoped to one assessment, options included.

        Ids that do not exist or belong to another assessment are simply
        absent from the returned mapping.
        """
        if not question_ids:
            return {}
        result = await session.execute(
            select(Question)
            .where(
                Question.id.in_(sorted(set(question_ids))),
                Question.assessment_id == assessment_id,
            )
            .options(selectinload(Question.options))
        )
        return {question.id: question for question in result.scalars().all()}

