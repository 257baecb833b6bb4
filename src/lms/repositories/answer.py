"""Repository for answer database operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from lms.models.attempt import UserAnswer


class AnswerRepository:
    """Handle answer persistence operations."""

    @staticmethod
    async def create(
        session: AsyncSession,
        attempt_id: int,
        question_id: int,
        selected_option_id: int | None,
        input_answer: str | None,
        is_correct: bool | None,
    ) -> UserAnswer:
        """Create a graded answer record within an attempt."""
        answer = UserAnswer(
            user_attempt_id=attempt_id,
            question_id=question_id,
            selected_option_id=selected_option_id,
            input_answer=input_answer,
            is_correct=is_correct,
        )
        session.add(answer)
        await session.flush()
        return answer

