"""
Exception hierarchy for the image processing service.

Provides layered exception structure for domain-specific errors.
Each exception carries a stable error code that the API layer renders
as {"error": {"code", "message"}}; all include context for observability.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class ImgProcException(Exception):
    """Base exception for all image processing service errors."""

    code: str = "internal"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class BadRequestError(ImgProcException):
    """Raised when request input is malformed or fails validation."""

    code = "bad_request"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize bad request error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class UnauthenticatedError(ImgProcException):
    """Raised when the bearer credential is missing or invalid."""

    code = "unauthenticated"


class ForbiddenError(ImgProcException):
    """Raised when the principal does not own the job or lacks a capability."""

    code = "forbidden"


class JobNotFoundError(ImgProcException):
    """Raised when a job cannot be found."""

    code = "not_found"

    def __init__(self, job_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["job_id"] = job_id
        super().__init__(f"Job not found: {job_id}", details)


class BadStateError(ImgProcException):
    """Raised when a job is not in a state that permits the operation."""

    code = "bad_state"

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        status: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if job_id:
            details["job_id"] = job_id
        if status:
            details["status"] = status
        super().__init__(message, details)


class ConflictError(ImgProcException):
    """Raised when inserting a record whose id already exists."""

    code = "conflict"


class ProcessingError(ImgProcException):
    """Raised when the image transformation pipeline fails."""

    code = "processing_failed"

    def __init__(
        self,
        message: str,
        job_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if job_id:
            details["job_id"] = job_id
        super().__init__(message, details)


class StorageError(ImgProcException):
    """Raised when a blob store read, write or presign fails."""

    def __init__(
        self,
        message: str,
        s3_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if s3_key:
            details["s3_key"] = s3_key
        super().__init__(message, details)


class ConfigurationError(ImgProcException):
    """Raised when required configuration for the selected mode is missing."""

    pass
