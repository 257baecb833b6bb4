"""Custom exceptions for the LMS assessment service."""

from typing import Any


class LMSException(Exception):
    """Base exception for all assessment service errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(LMSException):
    """Resource not found."""

    def __init__(
        self,
        resource: str,
        resource_id: Any,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=f"{resource} not found",
            error_code="NOT_FOUND",
            details={
                "resource": resource,
                "resource_id": str(resource_id),
                **(details or {}),
            },
        )


class DomainValidationError(LMSException):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field, **(details or {})} if field else details,
        )


class InternalError(LMSException):
    """Storage or other server-side failure.

    The message is shown to the caller as-is, so it must not carry
    internal detail; the underlying exception is chained for logging.
    """

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message=message, error_code="INTERNAL_ERROR")
