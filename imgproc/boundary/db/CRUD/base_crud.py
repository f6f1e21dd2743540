"""
Base CRUD operations for SQLAlchemy models.

Provides generic Create, Read and Update operations that can be
inherited and extended by model-specific CRUD classes.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from imgproc.boundary.db.base import Base
from imgproc.core.exceptions import ConflictError

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Provides standard database operations that work with any SQLAlchemy model.
    Methods flush but never commit; the calling service owns the transaction.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        """
        Initialize CRUD with target model.

        Args:
            model: SQLAlchemy model class for database operations
        """
        self.model = model

    async def create(self, session: AsyncSession, **kwargs: Any) -> ModelT:
        """
        Insert a new record.

        Args:
            session: Async database session
            **kwargs: Model field values

        Returns:
            Created model instance with generated ID and defaults

        Raises:
            ConflictError: A record with the same primary key already exists
        """
        record_id = kwargs.get("id")
        if record_id is not None and await self.exists(session, record_id):
            raise ConflictError(
                f"{self.model.__name__} already exists: {record_id}",
                {"id": record_id},
            )

        instance = self.model(**kwargs)
        session.add(instance)
        try:
            await session.flush()
        except IntegrityError as e:
            await session.rollback()
            raise ConflictError(
                f"{self.model.__name__} already exists: {record_id}",
                {"id": record_id},
            ) from e
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: str) -> ModelT | None:
        """
        Retrieve a single record by primary key.

        Always reloads column values so rows changed by bulk UPDATEs are current.

        Args:
            session: Async database session
            id: Primary key

        Returns:
            Model instance if found, None otherwise
        """
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_by_id(
        self,
        session: AsyncSession,
        id: str,
        **kwargs: Any,
    ) -> bool:
        """
        Merge the given fields into a record, leaving other columns untouched.

        Args:
            session: Async database session
            id: Primary key
            **kwargs: Fields to update with new values

        Returns:
            True if a row was updated, False if not found
        """
        if not kwargs:
            return False
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def count(self, session: AsyncSession, *criteria: Any) -> int:
        """
        Count records matching optional WHERE criteria.

        Args:
            session: Async database session
            *criteria: SQLAlchemy boolean expressions

        Returns:
            Number of matching rows
        """
        stmt = select(func.count()).select_from(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def exists(self, session: AsyncSession, id: str) -> bool:
        """
        Check if a record exists by primary key.

        Args:
            session: Async database session
            id: Primary key

        Returns:
            True if record exists, False otherwise
        """
        stmt = select(self.model.id).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None
