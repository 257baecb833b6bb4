"""Pydantic schemas for the LMS assessment API."""

from lms.schemas.common import ErrorResponse, ErrorResponseWithDetails, HealthResponse

__all__ = [
    "ErrorResponse",
    "ErrorResponseWithDetails",
    "HealthResponse",
]
