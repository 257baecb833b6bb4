"""Attempt and answer models recording a learner's graded submissions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lms.models.base import Base

if TYPE_CHECKING:
    from lms.models.assessment import Assessment
    from lms.models.question import Question, QuestionOption


class Attempt(Base):
    """One submission of an assessment by a learner."""

    __tablename__ = "user_attempts"

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(nullable=False, index=True)
    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    score: Mapped[int] = mapped_column(nullable=False, default=0)

    # Relationships
    assessment: Mapped[Assessment] = relationship(
        "Assessment", back_populates="attempts"
    )
    answers: Mapped[list[UserAnswer]] = relationship(
        "UserAnswer",
        back_populates="attempt",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="UserAnswer.id",
    )


class UserAnswer(Base):
    """A graded answer to one question within an attempt.

    ``is_correct`` is NULL while the answer waits for manual review.
    """

    __tablename__ = "user_answers"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_attempt_id: Mapped[int] = mapped_column(
        ForeignKey("user_attempts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    selected_option_id: Mapped[int | None] = mapped_column(
        ForeignKey("question_options.id", ondelete="SET NULL")
    )
    input_answer: Mapped[str | None] = mapped_column(Text)
    is_correct: Mapped[bool | None] = mapped_column(Boolean)

    # Relationships
    attempt: Mapped[Attempt] = relationship("Attempt", back_populates="answers")
    question: Mapped[Question] = relationship("Question")
    selected_option: Mapped[QuestionOption | None] = relationship("QuestionOption")
