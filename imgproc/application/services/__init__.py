"""Service orchestrators."""

from .job_service import CreateResult, DispatchResult, JobService

__all__ = ["CreateResult", "DispatchResult", "JobService"]
