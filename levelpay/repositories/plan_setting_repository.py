"""
Plan setting repository.

Data access layer for PlanSetting model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.models.plan_setting import PlanSetting
from levelpay.repositories.base import BaseRepository


class PlanSettingRepository(BaseRepository[PlanSetting]):
    """Plan setting repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize plan setting repository."""
        super().__init__(PlanSetting, session)

    async def get_by_feature_key(
        self, feature_key: str
    ) -> PlanSetting | None:
        """
        Get plan setting by feature key, active or not.

        Args:
            feature_key: Feature key (e.g. level_income_30)

        Returns:
            PlanSetting or None if not found
        """
        return await self.get_by(feature_key=feature_key)

    async def get_active(self, feature_key: str) -> PlanSetting | None:
        """
        Get the active plan setting for a feature.

        Args:
            feature_key: Feature key (e.g. level_income_30)

        Returns:
            Active PlanSetting or None
        """
        stmt = (
            select(PlanSetting)
            .where(PlanSetting.feature_key == feature_key)
            .where(PlanSetting.is_active == True)  # noqa: E712
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
