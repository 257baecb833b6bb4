"""Learner endpoints: take an assessment, submit it, see scores."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lms.db import get_db
from lms.schemas.attempt import (
    AnswerOutcomeResponse,
    AttemptSubmissionRequest,
    AttemptSubmissionResponse,
    TakingAssessment,
    TakingAssessmentResponse,
    TakingQuestionResponse,
)
from lms.schemas.common import ErrorResponse, ErrorResponseWithDetails
from lms.schemas.score import (
    CourseScoreEntry,
    CourseScoreSummaryResponse,
    LessonAssessmentResponse,
    LessonAssessmentsResponse,
    StudentPerformance,
)
from lms.services.attempt_grading import AnswerSubmission, AttemptGradingService
from lms.services.question_randomizer import QuestionRandomizer
from lms.services.score_aggregation import AttemptBasis, ScoreAggregationService

router = APIRouter(prefix="/student", tags=["Student"])


@router.get(
    "/assessment/{assessment_id}/questions",
    response_model=TakingAssessmentResponse,
    summary="Fetch an assessment to take",
    responses={404: {"model": ErrorResponse}},
    description=(
        "Return the assessment with its questions in a fresh random order. "
        "Option correctness is never included."
    ),
)
async def get_assessment_questions(
    assessment_id: int,
    session: AsyncSession = Depends(get_db),
) -> TakingAssessmentResponse:
    """Return an assessment's questions shuffled for this fetch."""
    randomizer = QuestionRandomizer()
    shuffled = await randomizer.get_assessment_for_taking(session, assessment_id)
    assessment = shuffled.assessment

    return TakingAssessmentResponse(
        assessment=TakingAssessment(
            title=assessment.title,
            description=assessment.description,
            total_points=assessment.total_points,
            time_limit=assessment.time_limit,
            assessment_type=assessment.assessment_type,
            questions=[
                TakingQuestionResponse.model_validate(q) for q in shuffled.questions
            ],
        )
    )


@router.post(
    "/submit-attempt",
    response_model=AttemptSubmissionResponse,
    summary="Submit an attempt",
    responses={
        422: {"model": ErrorResponseWithDetails},
        500: {"model": ErrorResponse, "description": "Nothing was stored"},
    },
    description=(
        "Grade the submitted answers and store them as a new attempt. "
        "Every call creates a new attempt."
    ),
)
async def submit_attempt(
    request: AttemptSubmissionRequest,
    session: AsyncSession = Depends(get_db),
) -> AttemptSubmissionResponse:
    """Grade and store a learner's attempt."""
    service = AttemptGradingService()
    report = await service.submit_attempt(
        session=session,
        student_id=request.student_id,
        assessment_id=request.assessment_id,
        answers=[
            AnswerSubmission(
                question_id=answer.question_id,
                selected_option_id=answer.selected_option_id,
                input_answer=answer.input_answer,
            )
            for answer in request.answers
        ],
    )

    return AttemptSubmissionResponse(
        score=report.score,
        attempt_id=report.attempt_id,
        answers=[AnswerOutcomeResponse.model_validate(o) for o in report.outcomes],
    )


@router.get(
    "/lessons/{lesson_id}/assessments",
    response_model=LessonAssessmentsResponse,
    summary="List a lesson's assessments with performance",
    description=(
        "Return a lesson's assessments with question counts and, when a "
        "student id is given, that learner's best score and attempt count."
    ),
)
async def list_lesson_assessments(
    lesson_id: int,
    student_id: int | None = Query(None, description="Learner to report on"),
    session: AsyncSession = Depends(get_db),
) -> LessonAssessmentsResponse:
    """List a lesson's assessments for a learner."""
    service = ScoreAggregationService()
    summaries = await service.list_lesson_assessments(session, lesson_id, student_id)

    assessments = []
    for summary in summaries:
        assessment = summary.assessment
        performance = summary.performance
        assessments.append(
            LessonAssessmentResponse(
                assessment_id=assessment.id,
                title=assessment.title,
                assessment_type=assessment.assessment_type,
                time_limit=assessment.time_limit,
                attempt_limit=assessment.attempt_limit,
                date_open=assessment.date_open,
                date_close=assessment.date_close,
                total_questions=summary.total_questions,
                total_points=assessment.total_points,
                student_performance=(
                    StudentPerformance(
                        highest_score=performance.highest_score,
                        score_display=performance.score_display,
                        attempt_count=performance.attempt_count,
                        attempt_display=performance.attempt_display,
                    )
                    if performance is not None
                    else None
                ),
            )
        )

    return LessonAssessmentsResponse(
        lesson_id=lesson_id,
        student_id=student_id,
        assessments=assessments,
    )


@router.get(
    "/{student_id}/courses/{course_id}/scores",
    response_model=CourseScoreSummaryResponse,
    summary="Summarize a learner's course scores",
    description=(
        "Score every assessment of a course from the learner's highest or "
        "first attempt. Assessments without an attempt have a null score."
    ),
)
async def get_course_scores(
    student_id: int,
    course_id: int,
    basis: AttemptBasis = Query(AttemptBasis.HIGHEST),
    session: AsyncSession = Depends(get_db),
) -> CourseScoreSummaryResponse:
    """Summarize a learner's scores in a course."""
    service = ScoreAggregationService()
    scores = await service.summarize_course_scores(
        session, student_id, course_id, basis
    )

    return CourseScoreSummaryResponse(
        student_id=student_id,
        course_id=course_id,
        basis=basis,
        assessments=[
            CourseScoreEntry(
                assessment_id=s.assessment.id,
                title=s.assessment.title,
                score=s.score,
                total_points=s.assessment.total_points,
                score_display=s.score_display,
            )
            for s in scores
        ],
    )
