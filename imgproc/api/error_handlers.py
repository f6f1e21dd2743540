"""
API exception handlers.

Render domain exceptions, request validation failures and unexpected errors
as {"error": {"code", "message"}} with the matching HTTP status.

Dependencies: fastapi, imgproc.core.exceptions
System role: Error envelope for every endpoint
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from imgproc.core.exceptions import (
    BadRequestError,
    BadStateError,
    ConflictError,
    ForbiddenError,
    ImgProcException,
    JobNotFoundError,
    ProcessingError,
    UnauthenticatedError,
)
from imgproc.models.common import ErrorBody, ErrorResponse
from imgproc.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went wrong"

_STATUS_BY_TYPE: list[tuple[type[ImgProcException], int]] = [
    (BadRequestError, status.HTTP_400_BAD_REQUEST),
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (JobNotFoundError, status.HTTP_404_NOT_FOUND),
    (BadStateError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ProcessingError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def error_body(code: str, message: str) -> dict:
    return ErrorResponse(error=ErrorBody(code=code, message=message)).model_dump()


def status_for(exc: ImgProcException) -> int:
    for exc_type, status_code in _STATUS_BY_TYPE:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def imgproc_exception_handler(request: Request, exc: ImgProcException) -> JSONResponse:
    """Render a domain exception; 5xx causes are logged, not exposed."""
    status_code = status_for(exc)

    if isinstance(exc, ProcessingError):
        logger.warning("Processing failed", extra={"path": request.url.path, **exc.details})
        message = "Image processing failed"
    elif status_code >= 500:
        log_exception_with_context(logger, "Internal error", exc, path=request.url.path)
        message = GENERIC_MESSAGE
    else:
        logger.info(
            "Request rejected",
            extra={"path": request.url.path, "code": exc.code, "reason": exc.message},
        )
        message = exc.message

    return JSONResponse(status_code=status_code, content=error_body(exc.code, message))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render request validation failures as bad_request."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(BadRequestError.code, message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unexpected exceptions."""
    log_exception_with_context(logger, "Unhandled exception", exc, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("internal", GENERIC_MESSAGE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error envelope handlers to an application."""
    app.add_exception_handler(ImgProcException, imgproc_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
