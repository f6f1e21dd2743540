"""
Database models package.

Exports:
  - JobModel, JobStatus, JobSource: Job ORM model and related enums

Dependencies: sqlalchemy, imgproc.boundary.db.base
System role: Database model definitions for domain entities
"""

from imgproc.boundary.db.models.job_model import (
    TRIGGERABLE_STATUSES,
    JobModel,
    JobSource,
    JobStatus,
)

__all__ = [
    "JobModel",
    "JobSource",
    "JobStatus",
    "TRIGGERABLE_STATUSES",
]
