"""Repository for assessment database operations."""

from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms.models.assessment import Assessment
from lms.models.attempt import Attempt, UserAnswer
from lms.models.question import Question, QuestionOption


class AssessmentRepository:
    """Handle assessment persistence operations."""

    @staticmethod
    async def create(
        session: AsyncSession,
        course_id: int,
        lesson_id: int,
        title: str,
        description: str | None,
        assessment_type: str,
        total_points: int,
        time_limit: int,
        attempt_limit: int,
        date_open: datetime | None,
        date_close: datetime | None,
        questions: list[Question],
    ) -> Assessment:
        """Create an assessment together with its questions and options."""
        assessment = Assessment(
            course_id=course_id,
            lesson_id=lesson_id,
            title=title,
            description=description,
            assessment_type=assessment_type,
            total_points=total_points,
            time_limit=time_limit,
            attempt_limit=attempt_limit,
            date_open=date_open,
            date_close=date_close,
            questions=questions,
        )
        session.add(assessment)
        await session.flush()
        return await AssessmentRepository.get_with_questions(session, assessment.id)

    @staticmethod
    async def get_by_id(session: AsyncSession, assessment_id: int) -> Assessment | None:
        """Retrieve an assessment by its ID."""
        result = await session.execute(
            select(Assessment).where(Assessment.id == assessment_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_for_update(
        session: AsyncSession,
        assessment_id: int,
    ) -> Assessment | None:
        """Retrieve an assessment and lock its row until the transaction ends."""
        result = await session.execute(
            select(Assessment).where(Assessment.id == assessment_id).with_for_update()
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_with_questions(
        session: AsyncSession,
        assessment_id: int,
    ) -> Assessment | None:
        """Retrieve an assessment with its questions and their options loaded."""
        result = await session.execute(
            select(Assessment)
            .where(Assessment.id == assessment_id)
            .options(
                selectinload(Assessment.questions).selectinload(Question.options)
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_lesson_id(
        session: AsyncSession,
        lesson_id: int,
    ) -> list[tuple[Assessment, int]]:
        """List a lesson's assessments, newest first, with their question counts."""
        question_count = func.count(Question.id).label("question_count")
        result = await session.execute(
            select(Assessment, question_count)
            .outerjoin(Question, Question.assessment_id == Assessment.id)
            .where(Assessment.lesson_id == lesson_id)
            .group_by(Assessment.id)
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
        )
        return [(row.Assessment, row.question_count) for row in result.all()]

    @staticmethod
    async def list_by_course_id(
        session: AsyncSession,
        course_id: int,
    ) -> list[Assessment]:
        """List a course's assessments, newest first."""
        result = await session.execute(
            select(Assessment)
            .where(Assessment.course_id == course_id)
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete(session: AsyncSession, assessment_id: int) -> None:
        """Delete an assessment with its questions, options, attempts and answers."""
        attempt_ids = select(Attempt.id).where(Attempt.assessment_id == assessment_id)
        question_ids = select(Question.id).where(
            Question.assessment_id == assessment_id
        )

        await session.execute(
            delete(UserAnswer).where(UserAnswer.user_attempt_id.in_(attempt_ids))
        )
        await session.execute(
            delete(Attempt).where(Attempt.assessment_id == assessment_id)
        )
        await session.execute(
            delete(QuestionOption).where(QuestionOption.question_id.in_(question_ids))
        )
        await session.execute(
            delete(Question).where(Question.assessment_id == assessment_id)
        )
        await session.execute(delete(Assessment).where(Assessment.id == assessment_id))
        await session.flush()
