"""Assessment model for quizzes and exams attached to a lesson."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.models.base import Base

if TYPE_CHECKING:
    from lms.models.attempt import Attempt
    from lms.models.question import Question


class Assessment(Base):
    """Represents an assessment definition and its scoring rules."""

    __tablename__ = "assessments"

    id: Mapped[int] = mapped_column(primary_key=True)
    course_id: Mapped[int] = mapped_column(nullable=False, index=True)
    lesson_id: Mapped[int] = mapped_column(nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    assessment_type: Mapped[str] = mapped_column(String(50), nullable=False)
    total_points: Mapped[int] = mapped_column(nullable=False, default=0)
    time_limit: Mapped[int] = mapped_column(nullable=False, default=30)
    attempt_limit: Mapped[int] = mapped_column(nullable=False, default=1)
    date_open: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    date_close: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Relationships
    questions: Mapped[list[Question]] = relationship(
        "Question",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="Question.id",
    )
    attempts: Mapped[list[Attempt]] = relationship(
        "Attempt",
        back_populates="assessment",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
