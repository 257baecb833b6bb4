"""Performance task service: faculty-defined tasks scored by hand."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lms.exceptions import DomainValidationError, NotFoundError
from lms.models.performance_task import PerformanceTask, StudentPerformanceTask
from lms.repositories.performance_task import PerformanceTaskRepository


class PerformanceTaskService:
    """Create, list and delete performance tasks and record their scores."""

    async def create_task(
        self,
        session: AsyncSession,
        course_id: int,
        title: str,
        total_points: int,
    ) -> PerformanceTask:
        task = await PerformanceTaskRepository.create(
            session,
            course_id=course_id,
            title=title,
            total_points=total_points,
        )
        await session.commit()

        logger.info(
            "Performance task created",
            performance_task_id=task.id,
            course_id=course_id,
            total_points=total_points,
        )

        return task

    async def list_for_course(
        self,
        session: AsyncSession,
        course_id: int,
    ) -> list[PerformanceTask]:
        return await PerformanceTaskRepository.list_by_course_id(session, course_id)

    async def list_scores(
        self,
        session: AsyncSession,
        task_id: int,
    ) -> list[StudentPerformanceTask]:
        """Return the recorded scores of a task.

        Raises:
            NotFoundError: If the task does not exist
        """
        task = await PerformanceTaskRepository.get_by_id(session, task_id)
        if task is None:
            raise NotFoundError(resource="Performance task", resource_id=task_id)
        return await PerformanceTaskRepository.list_scores_for_task(session, task_id)

    async def delete_task(self, session: AsyncSession, task_id: int) -> None:
        """Delete a task and the scores recorded against it."""
        task = await PerformanceTaskRepository.get_by_id(session, task_id)
        if task is None:
            raise NotFoundError(resource="Performance task", resource_id=task_id)

        await PerformanceTaskRepository.delete(session, task_id)
        await session.commit()

        logger.info("Performance task deleted", performance_task_id=task_id)

    async def record_score(
        self,
        session: AsyncSession,
        student_id: int,
        task_id: int,
        score: int,
    ) -> StudentPerformanceTask:
        """Store a learner's score, replacing any earlier one for the task.

        Raises:
            NotFoundError: If the task does not exist
            DomainValidationError: If the score is outside 0..total_points
        """
        task = await PerformanceTaskRepository.get_by_id(session, task_id)
        if task is None:
            raise NotFoundError(resource="Performance task", resource_id=task_id)

        if score < 0 or score > task.total_points:
            raise DomainValidationError(
                f"Score cannot exceed total points ({task.total_points})",
                field="score",
                details={"total_points": task.total_points},
            )

        record = await PerformanceTaskRepository.replace_score(
            session, student_id=student_id, task_id=task_id, score=score
        )
        await session.commit()

        logger.info(
            "Performance task score recorded",
            performance_task_id=task_id,
            student_id=student_id,
            score=score,
        )

        return record
