"""API routers."""

from lms.routers.assessments import router as assessments_router
from lms.routers.attempts import router as attempts_router
from lms.routers.performance_tasks import router as performance_tasks_router
from lms.routers.student import router as student_router

__all__ = [
    "assessments_router",
    "attempts_router",
    "performance_tasks_router",
    "student_router",
]
