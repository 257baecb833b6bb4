"""Assessment definition service for the faculty surface."""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import settings
from lms.exceptions import DomainValidationError, NotFoundError
from lms.models.assessment import Assessment
from lms.models.question import Question, QuestionOption
from lms.repositories.assessment import AssessmentRepository
from lms.schemas.assessment import AssessmentPayload, OptionPayload, QuestionPayload


def _question_points(payload: QuestionPayload) -> int:
    if payload.points is None:
        return settings.default_question_points
    return payload.points


def _build_options(options: list[OptionPayload]) -> list[QuestionOption]:
    return [
        QuestionOption(description=option.description, is_correct=option.is_correct)
        for option in options
    ]


def _build_question(payload: QuestionPayload) -> Question:
    return Question(
        question=payload.question,
        type=payload.type,
        points=_question_points(payload),
        options=_build_options(payload.options),
    )


def _resolve_total_points(payload: AssessmentPayload) -> int:
    """Use the given total, falling back to the sum of question points."""
    if payload.total_points is not None:
        return payload.total_points
    return sum(_question_points(q) for q in payload.questions)


class AssessmentService:
    """Create, read, replace and delete assessment definitions."""

    async def create_assessment(
        self,
        session: AsyncSession,
        payload: AssessmentPayload,
    ) -> Assessment:
        """Store an assessment with its questions and options in one commit."""
        assessment = await AssessmentRepository.create(
            session=session,
            course_id=payload.course_id,
            lesson_id=payload.lesson_id,
            title=payload.title,
            description=payload.description,
            assessment_type=payload.assessment_type,
            total_points=_resolve_total_points(payload),
            time_limit=payload.time_limit or settings.default_time_limit_minutes,
            attempt_limit=payload.attempt_limit or settings.default_attempt_limit,
            date_open=payload.date_open,
            date_close=payload.date_close,
            questions=[_build_question(q) for q in payload.questions],
        )
        await session.commit()

        logger.info(
            "Assessment created",
            assessment_id=assessment.id,
            course_id=assessment.course_id,
            lesson_id=assessment.lesson_id,
            question_count=len(assessment.questions),
            total_points=assessment.total_points,
        )

        return assessment

    async def get_assessment(
        self,
        session: AsyncSession,
        assessment_id: int,
    ) -> Assessment:
        """Return the full definition, correct answers included."""
        assessment = await AssessmentRepository.get_with_questions(
            session, assessment_id
        )
        if assessment is None:
            raise NotFoundError(resource="Assessment", resource_id=assessment_id)
        return assessment

    async def update_assessment(
        self,
        session: AsyncSession,
        assessment_id: int,
        payload: AssessmentPayload,
    ) -> Assessment:
        """Replace an assessment definition.

        Questions carrying an id are updated and their options recreated,
        questions without id are added, stored questions missing from the
        payload are deleted.
        """
        assessment = await AssessmentRepository.get_with_questions(
            session, assessment_id
        )
        if assessment is None:
            raise NotFoundError(resource="Assessment", resource_id=assessment_id)

        existing = {question.id: question for question in assessment.questions}
        unknown_ids = sorted(
            q.id for q in payload.questions if q.id is not None and q.id not in existing
        )
        if unknown_ids:
            raise DomainValidationError(
                "Questions do not belong to this assessment",
                field="questions",
                details={"question_ids": unknown_ids},
            )

        assessment.course_id = payload.course_id
        assessment.lesson_id = payload.lesson_id
        assessment.title = payload.title
        assessment.description = payload.description
        assessment.assessment_type = payload.assessment_type
        assessment.total_points = _resolve_total_points(payload)
        assessment.time_limit = payload.time_limit or settings.default_time_limit_minutes
        assessment.attempt_limit = payload.attempt_limit or settings.default_attempt_limit
        assessment.date_open = payload.date_open
        assessment.date_close = payload.date_close

        kept_ids = {q.id for q in payload.questions if q.id is not None}
        for question_id, question in existing.items():
            if question_id not in kept_ids:
                assessment.questions.remove(question)

        for question_payload in payload.questions:
            if question_payload.id is None:
                assessment.questions.append(_build_question(question_payload))
                continue
            question = existing[question_payload.id]
            question.question = question_payload.question
            question.type = question_payload.type
            question.points = _question_points(question_payload)
            question.options = _build_options(question_payload.options)

        await session.flush()
        await session.commit()

        logger.info(
            "Assessment updated",
            assessment_id=assessment_id,
            removed_questions=len(existing) - len(kept_ids),
            question_count=len(payload.questions),
        )

        return await AssessmentRepository.get_with_questions(session, assessment_id)

    async def list_for_lesson(
        self,
        session: AsyncSession,
        lesson_id: int,
    ) -> list[tuple[Assessment, int]]:
        """List a lesson's assessments, newest first, with question counts."""
        return await AssessmentRepository.list_by_lesson_id(session, lesson_id)

    async def list_for_course(
        self,
        session: AsyncSession,
        course_id: int,
    ) -> list[Assessment]:
        """List a course's assessments, newest first."""
        return await AssessmentRepository.list_by_course_id(session, course_id)

    async def delete_assessment(
        self,
        session: AsyncSession,
        assessment_id: int,
    ) -> None:
        """Delete an assessment and everything recorded against it."""
        assessment = await AssessmentRepository.get_by_id(session, assessment_id)
        if assessment is None:
            raise NotFoundError(resource="Assessment", resource_id=assessment_id)

        await AssessmentRepository.delete(session, assessment_id)
        await session.commit()

        logger.info("Assessment deleted", assessment_id=assessment_id)
