"""
Payout repository.

Data access layer for Payout model.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.models.enums import PayoutType, ReferenceType
from levelpay.models.payout import Payout
from levelpay.repositories.base import BaseRepository


class PayoutRepository(BaseRepository[Payout]):
    """Payout repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payout repository."""
        super().__init__(Payout, session)

    async def exists_for_key(
        self,
        user_id: int,
        reference_id: str,
        reference_type: ReferenceType,
        level: int,
        payout_type: PayoutType,
    ) -> bool:
        """
        Check whether a payout with this idempotency key is recorded.

        Args:
            user_id: Recipient user ID
            reference_id: Event reference
            reference_type: Event reference type
            level: Level number
            payout_type: Payout type

        Returns:
            True if the key is already taken
        """
        return await self.exists(
            user_id=user_id,
            reference_id=reference_id,
            reference_type=reference_type,
            level=level,
            payout_type=payout_type,
        )

    async def get_by_reference(
        self, reference_id: str, reference_type: ReferenceType
    ) -> list[Payout]:
        """
        Get all payouts of one event, ordered by level.

        Args:
            reference_id: Event reference
            reference_type: Event reference type

        Returns:
            List of payouts
        """
        stmt = (
            select(Payout)
            .where(
                Payout.reference_id == reference_id,
                Payout.reference_type == reference_type,
            )
            .order_by(Payout.level)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_by_reference(
        self, reference_id: str, reference_type: ReferenceType
    ) -> Decimal:
        """
        Total amount paid out for one event.

        Args:
            reference_id: Event reference
            reference_type: Event reference type

        Returns:
            Sum of payout amounts (0 if none)
        """
        stmt = select(
            func.coalesce(func.sum(Payout.amount), Decimal("0"))
        ).where(
            Payout.reference_id == reference_id,
            Payout.reference_type == reference_type,
        )
        result = await self.session.execute(stmt)
        return Decimal(result.scalar() or 0)
