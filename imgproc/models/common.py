"""
Common response models.

Error envelope shared by every endpoint.

Dependencies: pydantic
System role: Common API response structures
"""

from pydantic import BaseModel, Field


class ErrorBody(BaseModel):
    """Error code and message."""

    code: str = Field(description="Stable error code (bad_request, not_found, ...)")
    message: str = Field(description="Human-readable error message")


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: ErrorBody
