"""Pydantic schemas for taking an assessment and submitting attempts."""

from pydantic import BaseModel, Field

from lms.models.question import QuestionType
from lms.services.attempt_grading import AnswerOutcomeStatus


class TakingOptionResponse(BaseModel):
    """An option as shown to a learner; never carries correctness."""

    id: int
    description: str | None

    model_config = {"from_attributes": True}


class TakingQuestionResponse(BaseModel):
    """A question as shown to a learner."""

    id: int
    question: str
    type: QuestionType
    points: int
    options: list[TakingOptionResponse]

    model_config = {"from_attributes": True}


class TakingAssessment(BaseModel):
    """Assessment metadata with questions in presentation order."""

    title: str
    description: str | None
    total_points: int
    time_limit: int
    assessment_type: str
    questions: list[TakingQuestionResponse]


class TakingAssessmentResponse(BaseModel):
    """Response model for fetching an assessment to take."""

    status: str = "success"
    assessment: TakingAssessment


class AnswerSubmissionPayload(BaseModel):
    """A single submitted answer."""

    question_id: int
    selected_option_id: int | None = None
    input_answer: str | None = None


class AttemptSubmissionRequest(BaseModel):
    """Request model for submitting an attempt."""

    student_id: int
    assessment_id: int
    answers: list[AnswerSubmissionPayload] = Field(default_factory=list)


class AnswerOutcomeResponse(BaseModel):
    """Grading outcome of one submitted answer."""

    question_id: int
    status: AnswerOutcomeStatus
    matched_option_id: int | None = None
    points_awarded: int = 0
    reason: str | None = None

    model_config = {"from_attributes": True}


class AttemptSubmissionResponse(BaseModel):
    """Response model for a graded attempt."""

    status: str = "success"
    message: str = "Attempt submitted"
    score: int = Field(..., ge=0)
    attempt_id: int
    answers: list[AnswerOutcomeResponse] = Field(default_factory=list)
