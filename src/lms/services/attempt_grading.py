"""Attempt grading service.

Creates an attempt, grades each submitted answer against the question bank,
stores the answers and finalizes the attempt score in a single transaction.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lms.config import settings
from lms.exceptions import (
    DomainValidationError,
    InternalError,
    LMSException,
    NotFoundError,
)
from lms.models.question import Question, QuestionType
from lms.repositories.answer import AnswerRepository
from lms.repositories.assessment import AssessmentRepository
from lms.repositories.attempt import AttemptRepository
from lms.repositories.question import QuestionRepository


class AnswerOutcomeStatus(StrEnum):
    """Result of grading one submitted answer."""

    CORRECT = "correct"
    INCORRECT = "incorrect"
    PENDING_REVIEW = "pending_review"
    SKIPPED = "skipped"


@dataclass
class AnswerSubmission:
    """A learner's answer to one question."""

    question_id: int
    selected_option_id: int | None = None
    input_answer: str | None = None


@dataclass
class AnswerOutcome:
    """Grading outcome for one submitted answer."""

    question_id: int
    status: AnswerOutcomeStatus
    matched_option_id: int | None = None
    points_awarded: int = 0
    reason: str | None = None

    @property
    def is_correct(self) -> bool | None:
        """Correctness as stored on the answer row; None while pending review."""
        if self.status == AnswerOutcomeStatus.PENDING_REVIEW:
            return None
        return self.status == AnswerOutcomeStatus.CORRECT


@dataclass
class GradingReport:
    """Final score of an attempt plus the outcome of every submitted answer."""

    attempt_id: int
    score: int
    outcomes: list[AnswerOutcome] = field(default_factory=list)

    @property
    def graded_count(self) -> int:
        """Number of answers that were stored on the attempt."""
        return sum(
            1 for o in self.outcomes if o.status != AnswerOutcomeStatus.SKIPPED
        )


def normalize_answer(text: str) -> str:
    """Normalize free text for comparison: trim whitespace and lower-case."""
    return text.strip().lower()


def grade_answer(question: Question, submission: AnswerSubmission) -> AnswerOutcome:
    """Grade a single answer against a question and its loaded options."""
    if question.type == QuestionType.ESSAY:
        return AnswerOutcome(
            question_id=question.id,
            status=AnswerOutcomeStatus.PENDING_REVIEW,
            reason="essay answers are graded manually",
        )

    if submission.selected_option_id is not None:
        option = next(
            (o for o in question.options if o.id == submission.selected_option_id),
            None,
        )
        if option is None:
            return AnswerOutcome(
                question_id=question.id,
                status=AnswerOutcomeStatus.INCORRECT,
                reason="selected option not found",
            )
        if option.is_correct:
            return AnswerOutcome(
                question_id=question.id,
                status=AnswerOutcomeStatus.CORRECT,
                matched_option_id=option.id,
                points_awarded=question.points or 0,
            )
        return AnswerOutcome(
            question_id=question.id,
            status=AnswerOutcomeStatus.INCORRECT,
            matched_option_id=option.id,
        )

    if submission.input_answer:
        normalized = normalize_answer(submission.input_answer)
        # Options are loaded in storage order, so the first match wins
        for option in question.options:
            if (
                option.is_correct
                and option.description is not None
                and normalize_answer(option.description) == normalized
            ):
                return AnswerOutcome(
                    question_id=question.id,
                    status=AnswerOutcomeStatus.CORRECT,
                    matched_option_id=option.id,
                    points_awarded=question.points or 0,
                )
        return AnswerOutcome(
            question_id=question.id,
            status=AnswerOutcomeStatus.INCORRECT,
        )

    return AnswerOutcome(
        question_id=question.id,
        status=AnswerOutcomeStatus.INCORRECT,
        reason="no answer given",
    )


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AttemptGradingService:
    """Grade a learner's submission as one atomic unit of work.

    Submissions are not idempotent: every call creates a new attempt, so
    callers must not blindly retry a failed submission.
    """

    def __init__(self, enforce_attempt_limit: bool | None = None) -> None:
        if enforce_attempt_limit is None:
            enforce_attempt_limit = settings.enforce_attempt_limit
        self.enforce_attempt_limit = enforce_attempt_limit

    async def submit_attempt(
        self,
        session: AsyncSession,
        student_id: int,
        assessment_id: int,
        answers: list[AnswerSubmission],
    ) -> GradingReport:
        """Create, grade and finalize an attempt, then commit.

        Answers naming a question that does not exist in the assessment are
        skipped and reported, not raised.

        Raises:
            InternalError: If any storage step fails; nothing is persisted
            NotFoundError: If attempt limits are enforced and the assessment
                does not exist
            DomainValidationError: If attempt limits are enforced and the
                learner has no attempts left
        """
        try:
            if self.enforce_attempt_limit:
                await self._check_attempt_limit(session, student_id, assessment_id)

            attempt = await AttemptRepository.create(
                session=session,
                student_id=student_id,
                assessment_id=assessment_id,
                started_at=_utcnow(),
            )

            logger.info(
                "Grading attempt",
                attempt_id=attempt.id,
                student_id=student_id,
                assessment_id=assessment_id,
                answer_count=len(answers),
            )

            questions = await QuestionRepository.get_by_ids_and_assessment_id(
                session=session,
                question_ids=[a.question_id for a in answers],
                assessment_id=assessment_id,
            )

            score = 0
            outcomes: list[AnswerOutcome] = []
            for submission in answers:
                question = questions.get(submission.question_id)
                if question is None:
                    logger.warning(
                        "Skipping answer for unknown question",
                        attempt_id=attempt.id,
                        assessment_id=assessment_id,
                        question_id=submission.question_id,
                    )
                    outcomes.append(
                        AnswerOutcome(
                            question_id=submission.question_id,
                            status=AnswerOutcomeStatus.SKIPPED,
                            reason="question not found",
                        )
                    )
                    continue

                outcome = grade_answer(question, submission)
                score += outcome.points_awarded

                await AnswerRepository.create(
                    session=session,
                    attempt_id=attempt.id,
                    question_id=question.id,
                    selected_option_id=outcome.matched_option_id,
                    input_answer=submission.input_answer or None,
                    is_correct=outcome.is_correct,
                )
                outcomes.append(outcome)

            await AttemptRepository.finalize(
                session=session,
                attempt=attempt,
                score=score,
                submitted_at=_utcnow(),
            )
            await session.commit()

        except SQLAlchemyError as exc:
            await session.rollback()
            logger.opt(exception=exc).error(
                "Attempt submission failed",
                student_id=student_id,
                assessment_id=assessment_id,
            )
            raise InternalError("Failed to submit attempt") from exc
        except LMSException:
            await session.rollback()
            raise

        report = GradingReport(attempt_id=attempt.id, score=score, outcomes=outcomes)

        logger.info(
            "Attempt graded",
            attempt_id=attempt.id,
            student_id=student_id,
            assessment_id=assessment_id,
            score=score,
            graded_count=report.graded_count,
            skipped_count=len(outcomes) - report.graded_count,
        )

        return report

    async def _check_attempt_limit(
        self,
        session: AsyncSession,
        student_id: int,
        assessment_id: int,
    ) -> None:
        """Reject the submission when the learner has used every attempt.

        The assessment row stays locked until commit so that concurrent
        submissions by the same learner cannot both pass the check.
        """
        assessment = await AssessmentRepository.get_for_update(session, assessment_id)
        if assessment is None:
            raise NotFoundError(resource="Assessment", resource_id=assessment_id)

        used = await AttemptRepository.count_for_student(
            session, student_id, assessment_id
        )
        if used >= assessment.attempt_limit:
            raise DomainValidationError(
                f"Attempt limit reached ({used}/{assessment.attempt_limit})",
                field="assessment_id",
                details={
                    "attempt_count": used,
                    "attempt_limit": assessment.attempt_limit,
                },
            )
