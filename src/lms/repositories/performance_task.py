"""Repository for performance task database operations."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from lms.models.performance_task import PerformanceTask, StudentPerformanceTask


class PerformanceTaskRepository:
    """Handle performance task and task score persistence."""

    @staticmethod
    async def create(
        session: AsyncSession,
        course_id: int,
        title: str,
        total_points: int,
    ) -> PerformanceTask:
        """Create a performance task."""
        task = PerformanceTask(
            course_id=course_id,
            title=title,
            total_points=total_points,
        )
        session.add(task)
        await session.flush()
        await session.refresh(task)
        return task

    @staticmethod
    async def get_by_id(
        session: AsyncSession,
        task_id: int,
    ) -> PerformanceTask | None:
        """Retrieve a performance task by its ID."""
        result = await session.execute(
            select(PerformanceTask).where(PerformanceTask.id == task_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_course_id(
        session: AsyncSession,
        course_id: int,
    ) -> list[PerformanceTask]:
        """List a course's performance tasks, newest first."""
        result = await session.execute(
            select(PerformanceTask)
            .where(PerformanceTask.course_id == course_id)
            .order_by(PerformanceTask.created_at.desc(), PerformanceTask.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def delete(session: AsyncSession, task_id: int) -> None:
        """Delete a performance task together with every recorded score."""
        await session.execute(
            delete(StudentPerformanceTask).where(
                StudentPerformanceTask.performance_task_id == task_id
            )
        )
        await session.execute(
            delete(PerformanceTask).where(PerformanceTask.id == task_id)
        )
        await session.flush()

    @staticmethod
    async def replace_score(
        session: AsyncSession,
        student_id: int,
        task_id: int,
        score: int,
    ) -> StudentPerformanceTask:
        """Drop the learner's previous score on the task and store a new one."""
        await session.execute(
            delete(StudentPerformanceTask).where(
                StudentPerformanceTask.student_id == student_id,
                StudentPerformanceTask.performance_task_id == task_id,
            )
        )
        record = StudentPerformanceTask(
            student_id=student_id,
            performance_task_id=task_id,
            score=score,
        )
        session.add(record)
        await session.flush()
        await session.refresh(record)
        return record

    @staticmethod
    async def list_scores_for_task(
        session: AsyncSession,
        task_id: int,
    ) -> list[StudentPerformanceTask]:
        """List every recorded score of a task, by learner."""
        result = await session.execute(
            select(StudentPerformanceTask)
            .where(StudentPerformanceTask.performance_task_id == task_id)
            .order_by(StudentPerformanceTask.student_id)
        )
        return list(result.scalars().all())
