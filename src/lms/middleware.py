"""Request tracing and log setup for the assessments API."""

import sys
import time
import uuid

from fastapi import FastAPI, Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from lms.config import settings

REQUEST_ID_HEADER = "X-Request-ID"


def _resolve_request_id(request: Request) -> str:
    """Reuse a caller-supplied UUID request id, otherwise mint a new one."""
    supplied = request.headers.get(REQUEST_ID_HEADER)
    if supplied:
        try:
            return str(uuid.UUID(supplied))
        except ValueError:
            pass
    return str(uuid.uuid4())


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag every request with a request id and log its outcome.

    The id is bound to the loguru context for the duration of the request,
    so grading and scoring logs emitted by the services carry it too.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = _resolve_request_id(request)
        request.state.request_id = request_id

        with logger.contextualize(request_id=request_id):
            start_time = time.perf_counter()
            logger.info(
                "Request started",
                method=request.method,
                path=request.url.path,
            )

            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

            # Failed submissions and score writes should stand out in the log
            level = "WARNING" if response.status_code >= 500 else "INFO"
            logger.log(
                level,
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def configure_logging(level: str | None = None) -> None:
    """Install the single stderr sink used by the service."""
    logger.remove()
    logger.add(
        sink=sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "{extra} | "
            "<level>{message}</level>"
        ),
        level=level or settings.log_level,
        serialize=False,
    )


def register_middleware(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)
