"""Performance task models: course-level graded work scored by faculty."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.models.base import Base


class PerformanceTask(Base):
    """A manually scored task (project, recitation, lab) within a course."""

    __tablename__ = "performance_tasks"

    id: Mapped[int] = mapped_column(primary_key=True)
    course_id: Mapped[int] = mapped_column(nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    total_points: Mapped[int] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    scores: Mapped[list[StudentPerformanceTask]] = relationship(
        "StudentPerformanceTask",
        back_populates="performance_task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class StudentPerformanceTask(Base):
    """A learner's score on one performance task; at most one per learner."""

    __tablename__ = "student_performance_tasks"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "performance_task_id",
            name="uq_student_performance_task",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(nullable=False, index=True)
    performance_task_id: Mapped[int] = mapped_column(
        ForeignKey("performance_tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    score: Mapped[int] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    performance_task: Mapped[PerformanceTask] = relationship(
        "PerformanceTask", back_populates="scores"
    )
