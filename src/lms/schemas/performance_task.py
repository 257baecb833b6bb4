"""Pydantic schemas for performance task endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class PerformanceTaskCreateRequest(BaseModel):
    """Request model for creating a performance task."""

    title: str = Field(..., min_length=1, max_length=255)
    total_points: int = Field(..., ge=1)
    course_id: int


class PerformanceTaskResponse(BaseModel):
    """Response model for a performance task."""

    id: int
    course_id: int
    title: str
    total_points: int
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskScoreRequest(BaseModel):
    """Request model for recording a learner's task score."""

    student_id: int
    performance_task_id: int
    score: int = Field(..., ge=0)


class TaskScoreResponse(BaseModel):
    """A learner's recorded score on a performance task."""

    id: int
    student_id: int
    performance_task_id: int
    score: int
    created_at: datetime

    model_config = {"from_attributes": True}
