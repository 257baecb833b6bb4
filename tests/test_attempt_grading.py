"""Tests for attempt submission and auto-grading."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lms.exceptions import DomainValidationError, InternalError
from lms.models import (
    Assessment,
    Attempt,
    Base,
    Question,
    QuestionOption,
    QuestionType,
    UserAnswer,
)
from lms.repositories.answer import AnswerRepository
from lms.services.attempt_grading import (
    AnswerOutcomeStatus,
    AnswerSubmission,
    AttemptGradingService,
    grade_answer,
    normalize_answer,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Create an async SQLite engine for testing."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Create a test session."""
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


async def _create_assessment(
    session: AsyncSession,
    questions: list[Question],
    attempt_limit: int = 1,
) -> Assessment:
    assessment = Assessment(
        course_id=10,
        lesson_id=20,
        title="Capitals",
        assessment_type="quiz",
        total_points=sum(q.points for q in questions),
        attempt_limit=attempt_limit,
        questions=questions,
    )
    session.add(assessment)
    await session.flush()
    return assessment


@pytest.fixture
async def single_choice_assessment(test_session: AsyncSession) -> Assessment:
    """Create an assessment with one 5-point question, options A (correct) and B."""
    return await _create_assessment(
        test_session,
        [
            Question(
                question="Pick A",
                type=QuestionType.MULTIPLE_CHOICE,
                points=5,
                options=[
                    QuestionOption(description="A", is_correct=True),
                    QuestionOption(description="B", is_correct=False),
                ],
            )
        ],
    )


@pytest.fixture
async def identification_assessment(test_session: AsyncSession) -> Assessment:
    """Create an assessment with one 3-point identification question."""
    return await _create_assessment(
        test_session,
        [
            Question(
                question="Capital of France?",
                type=QuestionType.IDENTIFICATION,
                points=3,
                options=[
                    QuestionOption(description="Paris", is_correct=True),
                    QuestionOption(description="paris, France", is_correct=True),
                ],
            )
        ],
    )


@pytest.fixture
async def mixed_assessment(test_session: AsyncSession) -> Assessment:
    """Create an assessment covering every question type."""
    return await _create_assessment(
        test_session,
        [
            Question(
                question="2 + 2?",
                type=QuestionType.MULTIPLE_CHOICE,
                points=2,
                options=[
                    QuestionOption(description="3", is_correct=False),
                    QuestionOption(description="4", is_correct=True),
                ],
            ),
            Question(
                question="The sky is blue.",
                type=QuestionType.TRUE_FALSE,
                points=1,
                options=[
                    QuestionOption(description="True", is_correct=True),
                    QuestionOption(description="False", is_correct=False),
                ],
            ),
            Question(
                question="Capital of the Philippines?",
                type=QuestionType.IDENTIFICATION,
                points=4,
                options=[QuestionOption(description="Manila", is_correct=True)],
            ),
            Question(
                question="Describe photosynthesis.",
                type=QuestionType.ESSAY,
                points=10,
                options=[],
            ),
        ],
        attempt_limit=2,
    )


async def _count(session: AsyncSession, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


class TestNormalizeAnswer:
    """Tests for normalize_answer."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("  PARIS  ", "paris"),
            ("Manila", "manila"),
            ("\tNew York\n", "new york"),
            ("", ""),
        ],
    )
    def test_trims_and_lowercases(self, raw: str, expected: str) -> None:
        """Verify whitespace is trimmed and case folded."""
        assert normalize_answer(raw) == expected


class TestGradeAnswer:
    """Tests for grading one answer in memory."""

    def _question(self, type_: QuestionType, options: list[QuestionOption]) -> Question:
        return Question(id=1, question="Q", type=type_, points=4, options=options)

    def test_first_matching_correct_option_wins(self) -> None:
        """Verify the earliest matching correct option is recorded."""
        first = QuestionOption(id=11, description="Manila", is_correct=True)
        second = QuestionOption(id=12, description="manila", is_correct=True)
        question = self._question(QuestionType.IDENTIFICATION, [first, second])

        outcome = grade_answer(
            question, AnswerSubmission(question_id=1, input_answer="MANILA")
        )

        assert outcome.status == AnswerOutcomeStatus.CORRECT
        assert outcome.matched_option_id == 11
        assert outcome.points_awarded == 4

    def test_incorrect_option_description_does_not_match(self) -> None:
        """Verify text matching only considers correct options."""
        wrong = QuestionOption(id=11, description="Cebu", is_correct=False)
        question = self._question(QuestionType.IDENTIFICATION, [wrong])

        outcome = grade_answer(
            question, AnswerSubmission(question_id=1, input_answer="cebu")
        )

        assert outcome.status == AnswerOutcomeStatus.INCORRECT
        assert outcome.points_awarded == 0

    def test_option_without_description_is_ignored(self) -> None:
        """Verify a correct option with no text never matches."""
        blank = QuestionOption(id=11, description=None, is_correct=True)
        question = self._question(QuestionType.IDENTIFICATION, [blank])

        outcome = grade_answer(question, AnswerSubmission(question_id=1, input_answer=" "))

        assert outcome.status == AnswerOutcomeStatus.INCORRECT

    def test_selected_option_takes_precedence_over_text(self) -> None:
        """Verify an explicit selection is graded even when text is given."""
        right = QuestionOption(id=11, description="4", is_correct=True)
        wrong = QuestionOption(id=12, description="3", is_correct=False)
        question = self._question(QuestionType.MULTIPLE_CHOICE, [right, wrong])

        outcome = grade_answer(
            question,
            AnswerSubmission(question_id=1, selected_option_id=12, input_answer="4"),
        )

        assert outcome.status == AnswerOutcomeStatus.INCORRECT
        assert outcome.matched_option_id == 12

    def test_option_of_another_question_is_incorrect(self) -> None:
        """Verify a selected option must belong to the question."""
        right = QuestionOption(id=11, description="4", is_correct=True)
        question = self._question(QuestionType.MULTIPLE_CHOICE, [right])

        outcome = grade_answer(
            question, AnswerSubmission(question_id=1, selected_option_id=99)
        )

        assert outcome.status == AnswerOutcomeStatus.INCORRECT
        assert outcome.matched_option_id is None

    def test_essay_is_pending(self) -> None:
        """Verify essays are never auto-graded."""
        question = self._question(QuestionType.ESSAY, [])

        outcome = grade_answer(
            question, AnswerSubmission(question_id=1, input_answer="Long answer")
        )

        assert outcome.status == AnswerOutcomeStatus.PENDING_REVIEW
        assert outcome.is_correct is None
        assert outcome.points_awarded == 0

    def test_empty_answer_is_incorrect(self) -> None:
        """Verify an answer with neither option nor text is incorrect."""
        question = self._question(QuestionType.TRUE_FALSE, [])

        outcome = grade_answer(question, AnswerSubmission(question_id=1))

        assert outcome.status == AnswerOutcomeStatus.INCORRECT
        assert outcome.is_correct is False


class TestAttemptGradingService:
    """Tests for AttemptGradingService.submit_attempt."""

    async def test_correct_option_scores_points(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify selecting the correct option awards the question's points."""
        question = single_choice_assessment.questions[0]
        option_a = question.options[0]

        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=1,
            assessment_id=single_choice_assessment.id,
            answers=[
                AnswerSubmission(question_id=question.id, selected_option_id=option_a.id)
            ],
        )

        assert report.score == 5
        attempt = await test_session.get(Attempt, report.attempt_id)
        assert attempt.score == 5
        assert attempt.submitted_at is not None

    async def test_wrong_option_scores_zero(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify selecting the wrong option awards nothing."""
        question = single_choice_assessment.questions[0]
        option_b = question.options[1]

        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=1,
            assessment_id=single_choice_assessment.id,
            answers=[
                AnswerSubmission(question_id=question.id, selected_option_id=option_b.id)
            ],
        )

        assert report.score == 0
        answers = (await test_session.execute(select(UserAnswer))).scalars().all()
        assert len(answers) == 1
        assert answers[0].is_correct is False
        assert answers[0].selected_option_id == option_b.id

    async def test_unknown_question_is_skipped(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify a nonexistent question yields no answer row and no error."""
        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=1,
            assessment_id=single_choice_assessment.id,
            answers=[AnswerSubmission(question_id=9999, selected_option_id=1)],
        )

        assert report.score == 0
        assert report.graded_count == 0
        assert report.outcomes[0].status == AnswerOutcomeStatus.SKIPPED
        assert report.outcomes[0].question_id == 9999
        assert await _count(test_session, UserAnswer) == 0
        assert await _count(test_session, Attempt) == 1

    async def test_question_of_other_assessment_is_skipped(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
        identification_assessment: Assessment,
    ) -> None:
        """Verify answers are only graded against the submitted assessment."""
        foreign = identification_assessment.questions[0]

        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=1,
            assessment_id=single_choice_assessment.id,
            answers=[AnswerSubmission(question_id=foreign.id, input_answer="Paris")],
        )

        assert report.score == 0
        assert report.outcomes[0].status == AnswerOutcomeStatus.SKIPPED
        assert await _count(test_session, UserAnswer) == 0

    async def test_identification_is_case_and_space_insensitive(
        self,
        test_session: AsyncSession,
        identification_assessment: Assessment,
    ) -> None:
        """Verify '  PARIS  ' matches the stored 'Paris'."""
        question = identification_assessment.questions[0]

        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=1,
            assessment_id=identification_assessment.id,
            answers=[AnswerSubmission(question_id=question.id, input_answer="  PARIS  ")],
        )

        assert report.score == 3
        assert report.outcomes[0].matched_option_id == question.options[0].id
        answer = (await test_session.execute(select(UserAnswer))).scalar_one()
        assert answer.is_correct is True
        assert answer.input_answer == "  PARIS  "

    async def test_identification_mismatch_scores_zero(
        self,
        test_session: AsyncSession,
        identification_assessment: Assessment,
    ) -> None:
        """Verify text that matches no correct option is incorrect."""
        question = identification_assessment.questions[0]

        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=1,
            assessment_id=identification_assessment.id,
            answers=[AnswerSubmission(question_id=question.id, input_answer="Lyon")],
        )

        assert report.score == 0
        assert report.outcomes[0].status == AnswerOutcomeStatus.INCORRECT

    async def test_all_correct_scores_sum_of_points(
        self,
        test_session: AsyncSession,
        mixed_assessment: Assessment,
    ) -> None:
        """Verify a fully correct attempt scores every auto-graded point."""
        mc, tf, ident, essay = mixed_assessment.questions

        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=7,
            assessment_id=mixed_assessment.id,
            answers=[
                AnswerSubmission(question_id=mc.id, selected_option_id=mc.options[1].id),
                AnswerSubmission(question_id=tf.id, selected_option_id=tf.options[0].id),
                AnswerSubmission(question_id=ident.id, input_answer=" manila "),
                AnswerSubmission(question_id=essay.id, input_answer="Plants use light."),
            ],
        )

        assert report.score == 2 + 1 + 4
        assert [o.status for o in report.outcomes] == [
            AnswerOutcomeStatus.CORRECT,
            AnswerOutcomeStatus.CORRECT,
            AnswerOutcomeStatus.CORRECT,
            AnswerOutcomeStatus.PENDING_REVIEW,
        ]

    async def test_essay_answer_stored_pending(
        self,
        test_session: AsyncSession,
        mixed_assessment: Assessment,
    ) -> None:
        """Verify essay answers keep their text and a null correctness."""
        essay = mixed_assessment.questions[3]

        await AttemptGradingService().submit_attempt(
            test_session,
            student_id=7,
            assessment_id=mixed_assessment.id,
            answers=[AnswerSubmission(question_id=essay.id, input_answer="Plants.")],
        )

        answer = (await test_session.execute(select(UserAnswer))).scalar_one()
        assert answer.is_correct is None
        assert answer.input_answer == "Plants."
        assert answer.selected_option_id is None

    async def test_answer_rows_match_resolved_questions(
        self,
        test_session: AsyncSession,
        mixed_assessment: Assessment,
    ) -> None:
        """Verify one answer row per submitted answer with a known question."""
        mc, tf, _, _ = mixed_assessment.questions

        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=7,
            assessment_id=mixed_assessment.id,
            answers=[
                AnswerSubmission(question_id=mc.id, selected_option_id=mc.options[0].id),
                AnswerSubmission(question_id=123456),
                AnswerSubmission(question_id=tf.id, selected_option_id=tf.options[0].id),
                AnswerSubmission(question_id=654321, input_answer="x"),
            ],
        )

        assert await _count(test_session, UserAnswer) == 2
        assert report.graded_count == 2
        assert report.score == 1

    async def test_empty_submission_creates_zero_score_attempt(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify an attempt with no answers is still recorded."""
        report = await AttemptGradingService().submit_attempt(
            test_session,
            student_id=1,
            assessment_id=single_choice_assessment.id,
            answers=[],
        )

        assert report.score == 0
        assert report.outcomes == []
        assert await _count(test_session, Attempt) == 1

    async def test_submission_is_not_idempotent(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify identical submissions create separate attempts."""
        question = single_choice_assessment.questions[0]
        answers = [
            AnswerSubmission(
                question_id=question.id, selected_option_id=question.options[0].id
            )
        ]
        service = AttemptGradingService()

        first = await service.submit_attempt(
            test_session, 1, single_choice_assessment.id, answers
        )
        second = await service.submit_attempt(
            test_session, 1, single_choice_assessment.id, answers
        )

        assert first.attempt_id != second.attempt_id
        assert first.score == second.score == 5
        assert await _count(test_session, Attempt) == 2
        assert await _count(test_session, UserAnswer) == 2

    async def test_storage_failure_rolls_back_everything(
        self,
        test_session: AsyncSession,
        mixed_assessment: Assessment,
    ) -> None:
        """Verify a failure mid-loop leaves no attempt and no answers behind."""
        mc, tf, _, _ = mixed_assessment.questions
        assessment_id = mixed_assessment.id
        answers = [
            AnswerSubmission(question_id=mc.id, selected_option_id=mc.options[1].id),
            AnswerSubmission(question_id=tf.id, selected_option_id=tf.options[0].id),
        ]
        await test_session.commit()

        real_create = AnswerRepository.create
        calls = 0

        async def _fail_on_second(**kwargs):
            nonlocal calls
            calls += 1
            if calls == 2:
                raise SQLAlchemyError("disk full")
            return await real_create(**kwargs)

        with patch(
            "lms.services.attempt_grading.AnswerRepository.create",
            new=AsyncMock(side_effect=_fail_on_second),
        ):
            with pytest.raises(InternalError) as exc_info:
                await AttemptGradingService().submit_attempt(
                    test_session, 1, assessment_id, answers
                )

        assert exc_info.value.message == "Failed to submit attempt"
        assert exc_info.value.details == {}
        assert await _count(test_session, Attempt) == 0
        assert await _count(test_session, UserAnswer) == 0


class TestAttemptLimit:
    """Tests for optional attempt limit enforcement."""

    async def test_limit_not_enforced_by_default(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify attempts beyond the limit are accepted when enforcement is off."""
        service = AttemptGradingService(enforce_attempt_limit=False)

        for _ in range(3):
            await service.submit_attempt(test_session, 1, single_choice_assessment.id, [])

        assert await _count(test_session, Attempt) == 3

    async def test_limit_rejects_extra_attempt(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify a learner cannot exceed the attempt limit when enforced."""
        assessment_id = single_choice_assessment.id
        service = AttemptGradingService(enforce_attempt_limit=True)

        await service.submit_attempt(test_session, 1, assessment_id, [])
        with pytest.raises(DomainValidationError) as exc_info:
            await service.submit_attempt(test_session, 1, assessment_id, [])

        assert exc_info.value.details["attempt_limit"] == 1
        assert exc_info.value.details["attempt_count"] == 1
        assert await _count(test_session, Attempt) == 1

    async def test_limit_is_per_student(
        self,
        test_session: AsyncSession,
        single_choice_assessment: Assessment,
    ) -> None:
        """Verify one learner's attempts do not count against another."""
        assessment_id = single_choice_assessment.id
        service = AttemptGradingService(enforce_attempt_limit=True)

        await service.submit_attempt(test_session, 1, assessment_id, [])
        await service.submit_attempt(test_session, 2, assessment_id, [])

        assert await _count(test_session, Attempt) == 2
