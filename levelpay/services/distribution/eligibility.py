"""
Eligibility evaluator.

Decides whether an ancestor may receive commission at a given level.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.config.constants import (
    REASON_LEVEL_LOCKED,
    REASON_NO_ACTIVE_PACKAGE,
    REASON_NOT_FOUND,
)
from levelpay.repositories.user_repository import UserRepository
from levelpay.services.distribution.schedule import CommissionSchedule


@dataclass(frozen=True)
class Eligibility:
    """Outcome of an eligibility check."""

    eligible: bool
    reason: str | None = None


ELIGIBLE = Eligibility(eligible=True)


def unlocked_levels(direct_count: int, max_levels: int) -> int:
    """
    Number of levels a user unlocks: N direct recruits unlock levels 1..N.

    Args:
        direct_count: User's direct recruit count
        max_levels: Levels in the schedule

    Returns:
        Unlocked level count, between 0 and max_levels
    """
    return max(0, min(direct_count, max_levels))


class EligibilityEvaluator:
    """Evaluates per-level eligibility rules against the user directory."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize eligibility evaluator."""
        self.user_repo = UserRepository(session)

    async def is_eligible(
        self, ancestor_id: int, level: int, schedule: CommissionSchedule
    ) -> Eligibility:
        """
        Check an ancestor against the schedule's gates.

        Checks run in order and stop at the first failure:
        user exists, holds an active package (if required), has unlocked
        the level (if required).

        Args:
            ancestor_id: Candidate recipient
            level: Level the ancestor sits at (1-based)
            schedule: Active commission schedule

        Returns:
            Eligibility with the failure reason when not eligible
        """
        if not await self.user_repo.exists(id=ancestor_id):
            return Eligibility(eligible=False, reason=REASON_NOT_FOUND)

        if schedule.require_active_status:
            if not await self.user_repo.has_active_package(ancestor_id):
                return Eligibility(
                    eligible=False, reason=REASON_NO_ACTIVE_PACKAGE
                )

        if schedule.require_level_unlock:
            directs = await self.user_repo.count_direct_recruits(ancestor_id)
            if unlocked_levels(directs, schedule.max_levels) < level:
                return Eligibility(
                    eligible=False,
                    reason=REASON_LEVEL_LOCKED.format(
                        level=level, directs=directs
                    ),
                )

        return ELIGIBLE
