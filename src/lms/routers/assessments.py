"""Assessment definition endpoints for faculty."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db import get_db
from lms.schemas.assessment import (
    AssessmentPayload,
    AssessmentResponse,
    AssessmentSummaryResponse,
)
from lms.schemas.common import ErrorResponse
from lms.services.assessment import AssessmentService

router = APIRouter(prefix="/assessments", tags=["Assessments"])

NOT_FOUND_RESPONSE = {
    404: {"model": ErrorResponse, "description": "Assessment not found"},
}


@router.post(
    "",
    response_model=AssessmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an assessment",
    description=(
        "Create an assessment with its questions and options in one "
        "transaction. Total points default to the sum of question points."
    ),
)
async def create_assessment(
    payload: AssessmentPayload,
    session: AsyncSession = Depends(get_db),
) -> AssessmentResponse:
    """Create an assessment definition."""
    service = AssessmentService()
    assessment = await service.create_assessment(session, payload)
    return AssessmentResponse.model_validate(assessment)


@router.get(
    "/lesson/{lesson_id}",
    response_model=list[AssessmentSummaryResponse],
    summary="List a lesson's assessments",
    description="Return the assessments of a lesson, newest first.",
)
async def list_lesson_assessments(
    lesson_id: int,
    session: AsyncSession = Depends(get_db),
) -> list[AssessmentSummaryResponse]:
    """List assessments by lesson."""
    service = AssessmentService()
    rows = await service.list_for_lesson(session, lesson_id)
    return [AssessmentSummaryResponse.model_validate(a) for a, _ in rows]


@router.get(
    "/course/{course_id}",
    response_model=list[AssessmentSummaryResponse],
    summary="List a course's assessments",
    description="Return the assessments of a course, newest first.",
)
async def list_course_assessments(
    course_id: int,
    session: AsyncSession = Depends(get_db),
) -> list[AssessmentSummaryResponse]:
    """List assessments by course."""
    service = AssessmentService()
    assessments = await service.list_for_course(session, course_id)
    return [AssessmentSummaryResponse.model_validate(a) for a in assessments]


@router.get(
    "/{assessment_id}",
    response_model=AssessmentResponse,
    summary="Get an assessment",
    responses=NOT_FOUND_RESPONSE,
    description="Return the full definition, including which options are correct.",
)
async def get_assessment(
    assessment_id: int,
    session: AsyncSession = Depends(get_db),
) -> AssessmentResponse:
    """Return an assessment definition."""
    service = AssessmentService()
    assessment = await service.get_assessment(session, assessment_id)
    return AssessmentResponse.model_validate(assessment)


@router.put(
    "/{assessment_id}",
    response_model=AssessmentResponse,
    summary="Replace an assessment",
    responses={
        **NOT_FOUND_RESPONSE,
        400: {"model": ErrorResponse, "description": "Unknown question id"},
    },
    description=(
        "Replace scalar fields and questions. Questions with an id are "
        "updated, questions without one are added, missing ones are deleted."
    ),
)
async def update_assessment(
    assessment_id: int,
    payload: AssessmentPayload,
    session: AsyncSession = Depends(get_db),
) -> AssessmentResponse:
    """Replace an assessment definition."""
    service = AssessmentService()
    assessment = await service.update_assessment(session, assessment_id, payload)
    return AssessmentResponse.model_validate(assessment)


@router.delete(
    "/{assessment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an assessment",
    responses=NOT_FOUND_RESPONSE,
    description="Delete an assessment with its questions, attempts and answers.",
)
async def delete_assessment(
    assessment_id: int,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete an assessment definition."""
    service = AssessmentService()
    await service.delete_assessment(session, assessment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
