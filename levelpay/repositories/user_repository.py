"""
User repository.

Data access layer for User model: sponsor links, eligibility reads and the
atomic earnings credit.
"""

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.models.enums import PackageStatus, PayoutType
from levelpay.models.user import User
from levelpay.models.user_package import UserPackage
from levelpay.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_sponsor_id(self, user_id: int) -> int | None:
        """
        Get the upline sponsor of a user.

        Args:
            user_id: User ID

        Returns:
            Sponsor user ID, or None if the user has no sponsor
            or does not exist
        """
        stmt = select(User.sponsor_id).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_direct_recruits(self, user_id: int) -> int:
        """
        Count users directly sponsored by a user.

        Args:
            user_id: Sponsor user ID

        Returns:
            Number of direct recruits
        """
        return await self.count(sponsor_id=user_id)

    async def has_active_package(self, user_id: int) -> bool:
        """
        Check whether a user currently holds at least one active package.

        Args:
            user_id: User ID

        Returns:
            True if an active package exists
        """
        stmt = (
            select(func.count(UserPackage.id))
            .where(
                UserPackage.user_id == user_id,
                UserPackage.status == PackageStatus.ACTIVE,
            )
        )
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def credit_earnings(
        self, user_id: int, amount: Decimal, payout_type: PayoutType
    ) -> bool:
        """
        Atomically add a commission to a user's wallet and earnings.

        Runs as a single UPDATE ... SET col = col + :amount so concurrent
        credits to the same user never lose updates.

        Args:
            user_id: Recipient user ID
            amount: Amount to add
            payout_type: Decides which per-kind earnings counter grows

        Returns:
            True if the user row was updated, False if it does not exist
        """
        values = {
            "wallet_balance": User.wallet_balance + amount,
            "total_earnings": User.total_earnings + amount,
        }
        if payout_type == PayoutType.LEVEL_INCOME:
            values["commission_earnings"] = User.commission_earnings + amount
        else:
            values["roi_on_roi_earnings"] = User.roi_on_roi_earnings + amount

        stmt = update(User).where(User.id == user_id).values(**values)
        result = await self.session.execute(stmt)
        return result.rowcount > 0
