"""
Job CRUD operations.

Job store contract: insert, partial patch, point lookup, owner-scoped
paginated listing, capped administrative listing, and a conditional
status transition used to close the duplicate-trigger race.

Dependencies: sqlalchemy, imgproc.boundary.db.models.job_model
System role: Job persistence operations for the processing lifecycle
"""

from typing import Any, Iterable, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from imgproc.boundary.db.CRUD.base_crud import BaseCRUD
from imgproc.boundary.db.models.job_model import JobModel, JobStatus


class JobCRUD(BaseCRUD[JobModel]):
    """
    CRUD operations for JobModel.

    patch() is a plain read-free merge with last-write-wins semantics per
    field; transition() is the compare-and-swap variant that only applies
    when the stored status is one of the expected prior statuses.
    """

    def __init__(self) -> None:
        """Initialize JobCRUD with JobModel."""
        super().__init__(JobModel)

    async def patch(
        self,
        session: AsyncSession,
        id: str,
        **fields: Any,
    ) -> None:
        """
        Merge the provided fields into an existing job.

        Silently does nothing when the job does not exist.

        Args:
            session: Async database session
            id: Job id
            **fields: Columns to overwrite
        """
        await self.update_by_id(session, id, **fields)

    async def transition(
        self,
        session: AsyncSession,
        id: str,
        expected: Iterable[JobStatus],
        status: JobStatus,
        **fields: Any,
    ) -> bool:
        """
        Atomically move a job to `status` if its current status is expected.

        Single conditional UPDATE; of two concurrent callers with the same
        expectation only one observes a changed row.

        Args:
            session: Async database session
            id: Job id
            expected: Statuses the job must currently be in
            status: New status
            **fields: Extra columns to set together with the status

        Returns:
            True if the transition was applied, False otherwise
        """
        stmt = (
            update(JobModel)
            .where(JobModel.id == id, JobModel.status.in_(list(expected)))
            .values(status=status, **fields)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def list_by_owner(
        self,
        session: AsyncSession,
        owner_id: str,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[Sequence[JobModel], int]:
        """
        List one page of an owner's jobs, newest first.

        Args:
            session: Async database session
            owner_id: Owner whose jobs are listed
            page: 1-based page number
            page_size: Items per page

        Returns:
            (items, total) where total counts all of the owner's jobs;
            pages past the end are empty
        """
        page = max(page, 1)
        total = await self.count(session, JobModel.owner_id == owner_id)
        offset = (page - 1) * page_size
        # Offsets past the end never reach the database (they may not fit a BIGINT)
        if offset >= total:
            return [], total

        stmt = (
            select(JobModel)
            .where(JobModel.owner_id == owner_id)
            .order_by(JobModel.created_at.desc(), JobModel.id.desc())
            .offset(offset)
            .limit(page_size)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().all(), total

    async def list_all(
        self,
        session: AsyncSession,
        limit: int = 50,
    ) -> tuple[Sequence[JobModel], int]:
        """
        Administrative listing across all owners, newest first.

        Args:
            session: Async database session
            limit: Maximum number of jobs returned

        Returns:
            (items, total) where total counts every job in the store
        """
        stmt = (
            select(JobModel)
            .order_by(JobModel.created_at.desc(), JobModel.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        items = result.scalars().all()
        total = await self.count(session)
        return items, total


job_crud = JobCRUD()
