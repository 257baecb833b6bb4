"""Read back graded attempts to build score views for learners and faculty."""

from dataclasses import dataclass
from enum import StrEnum

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from lms.exceptions import DomainValidationError, NotFoundError
from lms.models.assessment import Assessment
from lms.models.attempt import Attempt, UserAnswer
from lms.models.question import Question, QuestionOption, QuestionType
from lms.repositories.assessment import AssessmentRepository
from lms.repositories.attempt import AttemptRepository


class Correctness(StrEnum):
    """Correctness of an answer as reported to readers."""

    CORRECT = "correct"
    INCORRECT = "incorrect"
    NOT_APPLICABLE = "not_applicable"


class GradingStatus(StrEnum):
    """Whether an answer has a final grade yet."""

    AUTO_GRADED = "auto_graded"
    PENDING_REVIEW = "pending_review"


class AttemptBasis(StrEnum):
    """Which attempt represents a learner on an assessment."""

    HIGHEST = "highest"
    FIRST = "first"


def format_score_display(score: int, total_points: int) -> str:
    """Render a score as ``"<score>/<total_points>"``."""
    return f"{score}/{total_points}"


@dataclass
class AnswerReview:
    """One stored answer prepared for display."""

    question: Question
    selected_option: QuestionOption | None
    input_answer: str | None
    correctness: Correctness
    grading_status: GradingStatus
    display_score: str | None


@dataclass
class AttemptReview:
    """An attempt with its answers prepared for display."""

    attempt: Attempt
    score_display: str
    answers: list[AnswerReview]


@dataclass
class StudentPerformanceSummary:
    """A learner's standing on one assessment."""

    highest_score: int | None
    score_display: str | None
    attempt_count: int
    attempt_display: str


@dataclass
class LessonAssessmentSummary:
    """An assessment listed under a lesson, with optional learner standing."""

    assessment: Assessment
    total_questions: int
    performance: StudentPerformanceSummary | None


@dataclass
class CourseScore:
    """Score of one assessment within a course summary."""

    assessment: Assessment
    score: int | None

    @property
    def score_display(self) -> str | None:
        if self.score is None:
            return None
        return format_score_display(self.score, self.assessment.total_points)


def review_answer(answer: UserAnswer) -> AnswerReview:
    """Prepare a stored answer for display.

    Essays and any answer without a stored correctness stay pending: they
    get no display score rather than a provisional one.
    """
    question = answer.question
    points = question.points or 0

    if question.type == QuestionType.ESSAY or answer.is_correct is None:
        return AnswerReview(
            question=question,
            selected_option=answer.selected_option,
            input_answer=answer.input_answer,
            correctness=Correctness.NOT_APPLICABLE,
            grading_status=GradingStatus.PENDING_REVIEW,
            display_score=None,
        )

    earned = points if answer.is_correct else 0
    return AnswerReview(
        question=question,
        selected_option=answer.selected_option,
        input_answer=answer.input_answer,
        correctness=Correctness.CORRECT if answer.is_correct else Correctness.INCORRECT,
        grading_status=GradingStatus.AUTO_GRADED,
        display_score=format_score_display(earned, points),
    )


def _first_attempt(attempts: list[Attempt]) -> Attempt | None:
    return min(attempts, key=lambda a: (a.started_at, a.id), default=None)


class ScoreAggregationService:
    """Build best-attempt, first-attempt, lesson and course score views."""

    async def get_attempt_review(
        self,
        session: AsyncSession,
        student_id: int,
        assessment_id: int,
        basis: AttemptBasis = AttemptBasis.HIGHEST,
    ) -> AttemptReview | None:
        """Return the learner's highest or first attempt, or None if none exist."""
        if basis == AttemptBasis.FIRST:
            attempt = await AttemptRepository.get_first_for_student(
                session, student_id, assessment_id
            )
        else:
            attempt = await AttemptRepository.get_highest_for_student(
                session, student_id, assessment_id
            )

        if attempt is None:
            return None

        return AttemptReview(
            attempt=attempt,
            score_display=format_score_display(
                attempt.score, attempt.assessment.total_points
            ),
            answers=[review_answer(answer) for answer in attempt.answers],
        )

    async def list_lesson_assessments(
        self,
        session: AsyncSession,
        lesson_id: int,
        student_id: int | None = None,
    ) -> list[LessonAssessmentSummary]:
        """List a lesson's assessments, with learner standing when asked."""
        rows = await AssessmentRepository.list_by_lesson_id(session, lesson_id)

        attempts_by_assessment: dict[int, list[Attempt]] = {}
        if student_id is not None:
            attempts = await AttemptRepository.list_for_student(
                session, student_id, [assessment.id for assessment, _ in rows]
            )
            for attempt in attempts:
                attempts_by_assessment.setdefault(attempt.assessment_id, []).append(
                    attempt
                )

        summaries = []
        for assessment, question_count in rows:
            performance = None
            if student_id is not None:
                # Attempts arrive best score first
                attempts = attempts_by_assessment.get(assessment.id, [])
                highest = attempts[0].score if attempts else None
                performance = StudentPerformanceSummary(
                    highest_score=highest,
                    score_display=(
                        format_score_display(highest, assessment.total_points)
                        if highest is not None
                        else None
                    ),
                    attempt_count=len(attempts),
                    attempt_display=f"{len(attempts)}/{assessment.attempt_limit}",
                )
            summaries.append(
                LessonAssessmentSummary(
                    assessment=assessment,
                    total_questions=question_count,
                    performance=performance,
                )
            )
        return summaries

    async def summarize_course_scores(
        self,
        session: AsyncSession,
        student_id: int,
        course_id: int,
        basis: AttemptBasis = AttemptBasis.HIGHEST,
    ) -> list[CourseScore]:
        """Score every assessment of a course from the chosen attempt."""
        assessments = await AssessmentRepository.list_by_course_id(session, course_id)
        attempts = await AttemptRepository.list_for_student(
            session, student_id, [a.id for a in assessments]
        )

        attempts_by_assessment: dict[int, list[Attempt]] = {}
        for attempt in attempts:
            attempts_by_assessment.setdefault(attempt.assessment_id, []).append(attempt)

        scores = []
        for assessment in assessments:
            candidates = attempts_by_assessment.get(assessment.id, [])
            if basis == AttemptBasis.FIRST:
                chosen = _first_attempt(candidates)
            else:
                chosen = candidates[0] if candidates else None
            scores.append(
                CourseScore(
                    assessment=assessment,
                    score=chosen.score if chosen is not None else None,
                )
            )
        return scores

    async def override_score(
        self,
        session: AsyncSession,
        attempt_id: int,
        score: int,
    ) -> Attempt:
        """Set an attempt's score after manual review.

        Raises:
            NotFoundError: If the attempt does not exist
            DomainValidationError: If the score is outside 0..total_points
        """
        attempt = await AttemptRepository.get_by_id_with_assessment(session, attempt_id)
        if attempt is None:
            raise NotFoundError(resource="Attempt", resource_id=attempt_id)

        total_points = attempt.assessment.total_points
        if score < 0 or score > total_points:
            raise DomainValidationError(
                f"Score must be between 0 and total points ({total_points})",
                field="score",
                details={"total_points": total_points},
            )

        previous = attempt.score
        attempt = await AttemptRepository.update_score(session, attempt, score)
        await session.commit()

        logger.info(
            "Attempt score overridden",
            attempt_id=attempt_id,
            previous_score=previous,
            score=score,
        )

        return attempt
