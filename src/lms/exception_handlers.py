"""Exception handlers for FastAPI application."""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from lms.exceptions import (
    DomainValidationError,
    InternalError,
    LMSException,
    NotFoundError,
)


def get_request_id(request: Request) -> str | None:
    """Extract request_id from request state if available."""
    return getattr(request.state, "request_id", None)


async def lms_exception_handler(
    request: Request,
    exc: LMSException,
) -> JSONResponse:
    """Handle custom service exceptions."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, DomainValidationError):
        status_code = status.HTTP_400_BAD_REQUEST

    content = {
        "status": "error",
        "message": exc.message,
        "error_code": exc.error_code,
        "request_id": get_request_id(request),
    }
    if not isinstance(exc, InternalError):
        content.update(exc.details)

    return JSONResponse(status_code=status_code, content=content)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "status": "error",
            "message": "Validation error",
            "error_code": "VALIDATION_ERROR",
            "request_id": get_request_id(request),
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.opt(exception=exc).error(
        "Unhandled exception",
        request_id=get_request_id(request),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "message": "Internal server error",
            "error_code": "INTERNAL_ERROR",
            "request_id": get_request_id(request),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the app."""
    app.add_exception_handler(LMSException, lms_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
