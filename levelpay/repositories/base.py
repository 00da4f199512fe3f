"""
Base repository.

Shared query helpers for the engine's repositories. Every repository works
inside the caller's session and never commits; transaction boundaries belong
to the service layer.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository bound to one model and one session.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class PayoutRepository(BaseRepository[Payout]):
            def __init__(self, session: AsyncSession):
                super().__init__(Payout, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def get_by(self, **filters: Any) -> ModelType | None:
        """
        Get the single row matching column filters.

        Args:
            **filters: Column filters

        Returns:
            Matching row or None
        """
        stmt = select(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """
        Insert a row and flush it.

        Constraint violations (e.g. a taken idempotency key) raise here,
        inside the caller's transaction.

        Args:
            **data: Column values

        Returns:
            Persisted row with database defaults loaded
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def count(self, **filters: Any) -> int:
        """
        Count rows matching column filters.

        Args:
            **filters: Column filters

        Returns:
            Row count
        """
        stmt = select(func.count()).select_from(self.model)
        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, **filters: Any) -> bool:
        """Whether any row matches the column filters."""
        return await self.count(**filters) > 0
