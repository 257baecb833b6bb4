"""Attempt review and manual scoring endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db import get_db
from lms.schemas.common import ErrorResponse
from lms.schemas.score import (
    AnswerReviewResponse,
    AttemptReviewResponse,
    ReviewedAssessment,
    ScoreUpdateRequest,
    ScoreUpdateResponse,
)
from lms.services.score_aggregation import (
    AttemptBasis,
    AttemptReview,
    ScoreAggregationService,
)

router = APIRouter(prefix="/student-attempts", tags=["Attempts"])

NO_ATTEMPT_MESSAGE = "No student attempt yet."


def _to_review_response(review: AttemptReview | None) -> AttemptReviewResponse:
    if review is None:
        return AttemptReviewResponse(message=NO_ATTEMPT_MESSAGE)

    attempt = review.attempt
    return AttemptReviewResponse(
        id=attempt.id,
        student_id=attempt.student_id,
        started_at=attempt.started_at,
        submitted_at=attempt.submitted_at,
        score=attempt.score,
        score_display=review.score_display,
        assessment=ReviewedAssessment.model_validate(attempt.assessment),
        answers=[AnswerReviewResponse.model_validate(a) for a in review.answers],
    )


@router.get(
    "/{student_id}/{assessment_id}",
    response_model=AttemptReviewResponse,
    summary="Review a learner's best attempt",
    description=(
        "Return the highest scoring attempt (earliest on ties) with every "
        "answer. Essay answers stay pending until manually scored."
    ),
)
async def get_best_attempt(
    student_id: int,
    assessment_id: int,
    session: AsyncSession = Depends(get_db),
) -> AttemptReviewResponse:
    """Return the learner's best attempt for review."""
    service = ScoreAggregationService()
    review = await service.get_attempt_review(
        session, student_id, assessment_id, AttemptBasis.HIGHEST
    )
    return _to_review_response(review)


@router.get(
    "/{student_id}/{assessment_id}/first",
    response_model=AttemptReviewResponse,
    summary="Review a learner's first attempt",
    description="Return the earliest attempt with every answer.",
)
async def get_first_attempt(
    student_id: int,
    assessment_id: int,
    session: AsyncSession = Depends(get_db),
) -> AttemptReviewResponse:
    """Return the learner's first attempt for review."""
    service = ScoreAggregationService()
    review = await service.get_attempt_review(
        session, student_id, assessment_id, AttemptBasis.FIRST
    )
    return _to_review_response(review)


@router.patch(
    "/{attempt_id}/score",
    response_model=ScoreUpdateResponse,
    summary="Override an attempt's score",
    responses={
        400: {"model": ErrorResponse, "description": "Score out of range"},
        404: {"model": ErrorResponse},
    },
    description="Set the score after manual review; it may not exceed total points.",
)
async def update_attempt_score(
    attempt_id: int,
    request: ScoreUpdateRequest,
    session: AsyncSession = Depends(get_db),
) -> ScoreUpdateResponse:
    """Manually set an attempt's score."""
    service = ScoreAggregationService()
    attempt = await service.override_score(session, attempt_id, request.score)
    return ScoreUpdateResponse(
        attempt_id=attempt.id,
        score=attempt.score,
        total_points=attempt.assessment.total_points,
    )
