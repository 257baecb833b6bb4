"""Performance task endpoints for faculty."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db import get_db
from lms.schemas.common import ErrorResponse
from lms.schemas.performance_task import (
    PerformanceTaskCreateRequest,
    PerformanceTaskResponse,
    TaskScoreRequest,
    TaskScoreResponse,
)
from lms.services.performance_task import PerformanceTaskService

router = APIRouter(prefix="/performance-tasks", tags=["Performance Tasks"])


@router.post(
    "",
    response_model=PerformanceTaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a performance task",
)
async def create_performance_task(
    request: PerformanceTaskCreateRequest,
    session: AsyncSession = Depends(get_db),
) -> PerformanceTaskResponse:
    """Create a performance task in a course."""
    service = PerformanceTaskService()
    task = await service.create_task(
        session,
        course_id=request.course_id,
        title=request.title,
        total_points=request.total_points,
    )
    return PerformanceTaskResponse.model_validate(task)


@router.get(
    "/course/{course_id}",
    response_model=list[PerformanceTaskResponse],
    summary="List a course's performance tasks",
    description="Return the performance tasks of a course, newest first.",
)
async def list_performance_tasks(
    course_id: int,
    session: AsyncSession = Depends(get_db),
) -> list[PerformanceTaskResponse]:
    """List performance tasks by course."""
    service = PerformanceTaskService()
    tasks = await service.list_for_course(session, course_id)
    return [PerformanceTaskResponse.model_validate(t) for t in tasks]


@router.post(
    "/score",
    response_model=TaskScoreResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a learner's task score",
    description=(
        "Store the score, replacing any earlier score the learner had on the "
        "task. The score may not exceed the task's total points."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Score out of range"},
        404: {"model": ErrorResponse},
    },
)
async def record_task_score(
    request: TaskScoreRequest,
    session: AsyncSession = Depends(get_db),
) -> TaskScoreResponse:
    """Record a learner's performance task score."""
    service = PerformanceTaskService()
    record = await service.record_score(
        session,
        student_id=request.student_id,
        task_id=request.performance_task_id,
        score=request.score,
    )
    return TaskScoreResponse.model_validate(record)


@router.get(
    "/{task_id}/scores",
    response_model=list[TaskScoreResponse],
    summary="List a task's recorded scores",
    responses={404: {"model": ErrorResponse}},
)
async def list_task_scores(
    task_id: int,
    session: AsyncSession = Depends(get_db),
) -> list[TaskScoreResponse]:
    """List every learner's score on a task."""
    service = PerformanceTaskService()
    records = await service.list_scores(session, task_id)
    return [TaskScoreResponse.model_validate(r) for r in records]


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a performance task",
    description="Delete a performance task with every score recorded against it.",
    responses={404: {"model": ErrorResponse}},
)
async def delete_performance_task(
    task_id: int,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a performance task."""
    service = PerformanceTaskService()
    await service.delete_task(session, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
