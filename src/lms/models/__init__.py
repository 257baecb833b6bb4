"""Database models package."""

from lms.models.assessment import Assessment
from lms.models.attempt import Attempt, UserAnswer
from lms.models.base import Base
from lms.models.performance_task import PerformanceTask, StudentPerformanceTask
from lms.models.question import Question, QuestionOption, QuestionType

__all__ = [
    "Assessment",
    "Attempt",
    "Base",
    "PerformanceTask",
    "Question",
    "QuestionOption",
    "QuestionType",
    "StudentPerformanceTask",
    "UserAnswer",
]
