"""Pydantic schemas for assessment definition endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from lms.models.question import QuestionType


class OptionPayload(BaseModel):
    """An answer option as submitted by faculty."""

    description: str | None = Field(None, description="Option text")
    is_correct: bool = Field(False, description="Whether this option is correct")


class QuestionPayload(BaseModel):
    """A question as submitted by faculty; ``id`` marks an existing question."""

    id: int | None = Field(None, description="Existing question ID (updates only)")
    question: str = Field(..., min_length=1, description="Question text")
    type: QuestionType = Field(..., description="Question type")
    points: int | None = Field(None, ge=0, description="Point value")
    options: list[OptionPayload] = Field(default_factory=list)


class AssessmentPayload(BaseModel):
    """Request model for creating or replacing an assessment."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    assessment_type: str = Field(..., min_length=1, max_length=50)
    course_id: int
    lesson_id: int
    total_points: int | None = Field(
        None,
        ge=0,
        description="Defaults to the sum of question points",
    )
    time_limit: int | None = Field(None, ge=1, description="Minutes")
    attempt_limit: int | None = Field(None, ge=1)
    date_open: datetime | None = None
    date_close: datetime | None = None
    questions: list[QuestionPayload] = Field(
        ...,
        min_length=1,
        description="At least one question is required",
    )

    @model_validator(mode="after")
    def check_window(self) -> "AssessmentPayload":
        """Reject a close date that precedes the open date."""
        if self.date_open and self.date_close and self.date_close < self.date_open:
            raise ValueError("date_close must not be earlier than date_open")
        return self


class OptionResponse(BaseModel):
    """Response model for an option, including its correctness flag."""

    id: int
    description: str | None
    is_correct: bool

    model_config = {"from_attributes": True}


class QuestionResponse(BaseModel):
    """Response model for a question with its options."""

    id: int
    question: str
    type: QuestionType
    points: int
    options: list[OptionResponse]

    model_config = {"from_attributes": True}


class AssessmentSummaryResponse(BaseModel):
    """Response model for assessment listings."""

    id: int = Field(..., description="Assessment ID")
    course_id: int
    lesson_id: int
    title: str
    description: str | None = None
    assessment_type: str
    total_points: int
    time_limit: int = Field(..., description="Minutes")
    attempt_limit: int
    date_open: datetime | None = None
    date_close: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AssessmentResponse(AssessmentSummaryResponse):
    """Full assessment definition for faculty, correct answers included."""

    updated_at: datetime
    questions: list[QuestionResponse]
