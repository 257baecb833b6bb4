"""Pydantic schemas for score reporting endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from lms.models.question import QuestionType
from lms.services.score_aggregation import AttemptBasis, Correctness, GradingStatus


class ReviewedQuestion(BaseModel):
    """Question fields shown in an attempt review."""

    id: int
    question: str
    points: int
    type: QuestionType

    model_config = {"from_attributes": True}


class ReviewedOption(BaseModel):
    """Selected option shown in an attempt review."""

    id: int
    description: str | None
    is_correct: bool

    model_config = {"from_attributes": True}


class AnswerReviewResponse(BaseModel):
    """One answer of a reviewed attempt."""

    question: ReviewedQuestion
    selected_option: ReviewedOption | None = None
    input_answer: str | None = None
    correctness: Correctness
    grading_status: GradingStatus
    display_score: str | None = Field(
        None,
        description="'<earned>/<points>'; null while pending manual review",
    )

    model_config = {"from_attributes": True}


class ReviewedAssessment(BaseModel):
    """Assessment fields shown in an attempt review."""

    id: int
    title: str
    assessment_type: str
    course_id: int
    lesson_id: int
    total_points: int
    date_open: datetime | None = None
    date_close: datetime | None = None

    model_config = {"from_attributes": True}


class AttemptReviewResponse(BaseModel):
    """Response model for a learner's attempt review."""

    message: str | None = None
    id: int | None = None
    student_id: int | None = None
    started_at: datetime | None = None
    submitted_at: datetime | None = None
    score: int | None = None
    score_display: str | None = None
    assessment: ReviewedAssessment | None = None
    answers: list[AnswerReviewResponse] = Field(default_factory=list)


class StudentPerformance(BaseModel):
    """A learner's standing on one assessment."""

    highest_score: int | None
    score_display: str | None
    attempt_count: int
    attempt_display: str


class LessonAssessmentResponse(BaseModel):
    """An assessment listed under a lesson."""

    assessment_id: int
    title: str
    assessment_type: str
    time_limit: int
    attempt_limit: int
    date_open: datetime | None = None
    date_close: datetime | None = None
    total_questions: int
    total_points: int
    student_performance: StudentPerformance | None = None


class LessonAssessmentsResponse(BaseModel):
    """Response model for a lesson's assessments."""

    status: str = "success"
    lesson_id: int
    student_id: int | None = None
    assessments: list[LessonAssessmentResponse]


class CourseScoreEntry(BaseModel):
    """Score of one assessment in a course summary."""

    assessment_id: int
    title: str
    score: int | None
    total_points: int
    score_display: str | None


class CourseScoreSummaryResponse(BaseModel):
    """Response model for a learner's scores in one course."""

    student_id: int
    course_id: int
    basis: AttemptBasis
    assessments: list[CourseScoreEntry]


class ScoreUpdateRequest(BaseModel):
    """Request model for a manual score override."""

    score: int = Field(..., ge=0)


class ScoreUpdateResponse(BaseModel):
    """Response model for a manual score override."""

    message: str = "Score updated successfully."
    attempt_id: int
    score: int
    total_points: int
