"""Repository layer for database operations."""

from lms.repositories.answer import AnswerRepository
from lms.repositories.assessment import AssessmentRepository
from lms.repositories.attempt import AttemptRepository
from lms.repositories.performance_task import PerformanceTaskRepository
from lms.repositories.question import QuestionRepository

__all__ = [
    "AnswerRepository",
    "AssessmentRepository",
    "AttemptRepository",
    "PerformanceTaskRepository",
    "QuestionRepository",
]
