"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, CreatedAtMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - JobModel, JobStatus, JobSource: Job entity and enums
  - job_crud: CRUD operation singleton

Dependencies: sqlalchemy, imgproc.configs
System role: Database adapter providing persistent storage for job records.
"""

from imgproc.boundary.db.base import Base, CreatedAtMixin, UUIDMixin
from imgproc.boundary.db.connection import (
    dispose_engine,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from imgproc.boundary.db.models.job_model import JobModel, JobSource, JobStatus
from imgproc.boundary.db.CRUD import BaseCRUD, JobCRUD, job_crud

__all__ = [
    # Base classes
    "Base",
    "CreatedAtMixin",
    "UUIDMixin",
    # Connection
    "dispose_engine",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "JobModel",
    "JobSource",
    "JobStatus",
    # CRUD
    "BaseCRUD",
    "JobCRUD",
    "job_crud",
]
