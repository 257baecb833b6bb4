"""LMS Assessments FastAPI Application Entry Point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from lms.config import settings
from lms.db import Database
from lms.exception_handlers import register_exception_handlers
from lms.middleware import configure_logging, register_middleware
from lms.routers import (
    assessments_router,
    attempts_router,
    performance_tasks_router,
    student_router,
)
from lms.schemas import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager."""
    configure_logging()
    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        enforce_attempt_limit=settings.enforce_attempt_limit,
    )

    database = Database(settings.database_url, echo=settings.debug)
    if settings.create_tables_on_startup:
        await database.create_all()
    app.state.database = database

    yield

    await database.dispose()
    logger.info("Application shutting down")


app = FastAPI(
    title="LMS Assessments API",
    description="Assessment taking, auto-grading and score reporting",
    version="0.1.0",
    lifespan=lifespan,
)

register_middleware(app)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(student_router, prefix=settings.api_prefix)
app.include_router(attempts_router, prefix=settings.api_prefix)
app.include_router(assessments_router, prefix=settings.api_prefix)
app.include_router(performance_tasks_router, prefix=settings.api_prefix)


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint",
)
async def health_check() -> HealthResponse:
    """Health check endpoint for container orchestration."""
    return HealthResponse(
        status="healthy",
        service="lms-assessments-api",
        version="0.1.0",
    )
