"""
Job domain models and schemas.

Transform step types plus request/response schemas for the job API,
the remote worker endpoint and the SQS message body.

Dependencies: pydantic
System role: Job API contracts
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel


class ResizeStep(BaseModel):
    """Resize to exact dimensions (aspect ratio is not preserved)."""

    op: Literal["resize"]
    width: int = Field(gt=0, description="Target width in pixels")
    height: int = Field(gt=0, description="Target height in pixels")


class BlurStep(BaseModel):
    """Gaussian blur."""

    op: Literal["blur"]
    sigma: float = Field(ge=0, description="Blur radius")


class SharpenStep(BaseModel):
    """Sharpen; mild fixed kernel when sigma is omitted."""

    op: Literal["sharpen"]
    sigma: float | None = Field(default=None, ge=0, description="Unsharp mask radius")


Step = Annotated[Union[ResizeStep, BlurStep, SharpenStep], Field(discriminator="op")]

_steps_adapter = TypeAdapter(list[Step])


def parse_steps(raw: Any) -> list[Step]:
    """
    Validate a raw ops payload into typed steps.

    Raises:
        pydantic.ValidationError: Unknown op kind or invalid parameters
    """
    return _steps_adapter.validate_python(raw)


def dump_steps(steps: list[Step]) -> list[dict]:
    """Serialize steps for storage and message payloads."""
    return [step.model_dump(exclude_none=True) for step in steps]


class CamelModel(BaseModel):
    """Base schema exposing camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CreateJobRequest(CamelModel):
    """Request schema for creating a job."""

    ops: list[Step] = Field(min_length=1, description="Ordered transform steps")
    source_id: Literal["seed", "upload"] = Field(
        default="upload",
        description="seed processes the shared seed image; upload waits for a client upload",
    )
    content_type: str | None = Field(
        default=None,
        description="Content type the client will upload with",
    )


class JobResponse(CamelModel):
    """Response schema for a single job record."""

    id: str
    owner_id: str
    source_id: str
    ops: list[dict]
    status: str
    created_at: datetime
    finished_at: datetime | None = None
    input_key: str | None = None
    output_key: str | None = None

    @field_validator("source_id", "status", mode="before")
    @classmethod
    def _enum_value(cls, value: Any) -> Any:
        return getattr(value, "value", value)

    def to_wire(self) -> dict:
        """Dump with camelCase keys and JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json")


class UploadTarget(CamelModel):
    """Presigned upload target returned to clients."""

    url: str
    key: str
    content_type: str
    expires_at: datetime


class OutputTarget(CamelModel):
    """Presigned download of a finished job's output."""

    image_id: str
    url: str


class ProcessingMessage(CamelModel):
    """
    SQS message body for queued processing.

    Also the body accepted by the remote worker (job_id/owner_id optional there).
    """

    job_id: str | None = None
    owner_id: str | None = None
    input_key: str = Field(min_length=1)
    output_key: str = Field(min_length=1)
    ops: list[Step] = Field(min_length=1)

    def to_wire(self) -> dict:
        """Dump with camelCase keys, omitting absent ids."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
