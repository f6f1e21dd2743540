"""
Core business logic module.

Contains the exception hierarchy and the image processing pipeline
(Pillow transforms, S3-backed processor and processing invokers).
"""

from imgproc.core.exceptions import (
    BadRequestError,
    BadStateError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    ImgProcException,
    JobNotFoundError,
    ProcessingError,
    StorageError,
    UnauthenticatedError,
)

__all__ = [
    "BadRequestError",
    "BadStateError",
    "ConfigurationError",
    "ConflictError",
    "ForbiddenError",
    "ImgProcException",
    "JobNotFoundError",
    "ProcessingError",
    "StorageError",
    "UnauthenticatedError",
]
