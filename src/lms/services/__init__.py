"""Service layer for business logic."""

from lms.services.assessment import AssessmentService
from lms.services.attempt_grading import AttemptGradingService
from lms.services.performance_task import PerformanceTaskService
from lms.services.question_randomizer import QuestionRandomizer
from lms.services.score_aggregation import ScoreAggregationService

__all__ = [
    "AssessmentService",
    "AttemptGradingService",
    "PerformanceTaskService",
    "QuestionRandomizer",
    "ScoreAggregationService",
]
