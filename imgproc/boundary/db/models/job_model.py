"""
Job ORM model.

Persists one image transformation job per row, keyed by an opaque id and
partitioned by owner. Status moves through the lifecycle
waiting_upload -> processing -> done | failed (failed may be re-processed).

Dependencies: sqlalchemy, imgproc.boundary.db.base
System role: Job record persistence for the processing lifecycle
"""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from imgproc.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class JobStatus(str, enum.Enum):
    """
    Job lifecycle states.

    WAITING_UPLOAD: Record created; client must upload the input via presigned URL
    PROCESSING: Input available; transforms dispatched or running
    DONE: Output written; download available
    FAILED: Processing failed; may be re-triggered
    """

    WAITING_UPLOAD = "waiting_upload"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


class JobSource(str, enum.Enum):
    """Origin of a job's input image."""

    SEED = "seed"
    UPLOAD = "upload"


# States from which "trigger processing" is accepted
TRIGGERABLE_STATUSES = frozenset({JobStatus.WAITING_UPLOAD, JobStatus.FAILED})


class JobModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Job ORM model.

    Attributes:
        id: Opaque job id (UUID string), immutable
        owner_id: Subject of the principal that created the job (indexed)
        source_id: seed | upload
        ops: Ordered transform steps as JSON, immutable after creation
        status: Current lifecycle state
        created_at: Creation timestamp (UTC)
        finished_at: Set on transition into done or failed
        input_key: S3 key of the input image
        output_key: S3 key the PNG output is written to
    """

    __tablename__ = "jobs"

    owner_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    source_id: Mapped[JobSource] = mapped_column(
        Enum(JobSource, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    ops: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=JobStatus.WAITING_UPLOAD,
    )

    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    input_key: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    output_key: Mapped[str | None] = mapped_column(String(1024), nullable=True)
