"""Repository for attempt database operations."""

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lms.models.attempt import Attempt, UserAnswer


def _with_review_details():
    """Loader options needed to render an attempt review."""
    return (
        selectinload(Attempt.assessment),
        selectinload(Attempt.answers).selectinload(UserAnswer.question),
        selectinload(Attempt.answers).selectinload(UserAnswer.selected_option),
    )


class AttemptRepository:
    """Handle attempt persistence operations."""

    @staticmethod
    async def create(
        session: AsyncSession,
        student_id: int,
        assessment_id: int,
        started_at: datetime,
    ) -> Attempt:
        """Create an open attempt with a zero score and no submit time."""
        attempt = Attempt(
            student_id=student_id,
            assessment_id=assessment_id,
            started_at=started_at,
            submitted_at=None,
            score=0,
        )
        session.add(attempt)
        await session.flush()
        return attempt

    @staticmethod
    async def finalize(
        session: AsyncSession,
        attempt: Attempt,
        score: int,
        submitted_at: datetime,
    ) -> Attempt:
        """Record the final score and submit time of a graded attempt."""
        attempt.score = score
        attempt.submitted_at = submitted_at
        await session.flush()
        return attempt

    @staticmethod
    async def update_score(
        session: AsyncSession,
        attempt: Attempt,
        score: int,
    ) -> Attempt:
        """Overwrite an attempt's score after manual review."""
        attempt.score = score
        await session.flush()
        return attempt

    @staticmethod
    async def get_by_id_with_assessment(
        session: AsyncSession,
        attempt_id: int,
    ) -> Attempt | None:
        """Retrieve an attempt by ID together with its assessment."""
        result = await session.execute(
            select(Attempt)
            .where(Attempt.id == attempt_id)
            .options(selectinload(Attempt.assessment))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def count_for_student(
        session: AsyncSession,
        student_id: int,
        assessment_id: int,
    ) -> int:
        """Count how many attempts a learner made on an assessment."""
        result = await session.execute(
            select(func.count(Attempt.id)).where(
                Attempt.student_id == student_id,
                Attempt.assessment_id == assessment_id,
            )
        )
        return result.scalar_one()

    @staticmethod
    async def get_highest_for_student(
        session: AsyncSession,
        student_id: int,
        assessment_id: int,
    ) -> Attempt | None:
        """Retrieve the learner's best attempt; ties go to the earliest one."""
        result = await session.execute(
            select(Attempt)
            .where(
                Attempt.student_id == student_id,
                Attempt.assessment_id == assessment_id,
            )
            .order_by(Attempt.score.desc(), Attempt.id.asc())
            .limit(1)
            .options(*_with_review_details())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_first_for_student(
        session: AsyncSession,
        student_id: int,
        assessment_id: int,
    ) -> Attempt | None:
        """Retrieve the learner's earliest attempt."""
        result = await session.execute(
            select(Attempt)
            .where(
                Attempt.student_id == student_id,
                Attempt.assessment_id == assessment_id,
            )
            .order_by(Attempt.started_at.asc(), Attempt.id.asc())
            .limit(1)
            .options(*_with_review_details())
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_for_student(
        session: AsyncSession,
        student_id: int,
        assessment_ids: list[int],
    ) -> list[Attempt]:
        """List a learner's attempts across assessments, best score first."""
        if not assessment_ids:
            return []
        result = await session.execute(
            select(Attempt)
            .where(
                Attempt.student_id == student_id,
                Attempt.assessment_id.in_(assessment_ids),
            )
            .order_by(Attempt.score.desc(), Attempt.id.asc())
        )
        return list(result.scalars().all())
