"""
Sponsor chain walker.

Walks the upline one sponsor at a time with a bounded loop.
"""

from collections.abc import AsyncIterator

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.repositories.user_repository import UserRepository


class SponsorChainWalker:
    """Produces (level, ancestor_id) pairs up a user's sponsor chain."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain walker."""
        self.user_repo = UserRepository(session)

    async def walk(
        self, start_user_id: int, max_levels: int
    ) -> AsyncIterator[tuple[int, int]]:
        """
        Lazily yield the upline of a user, nearest sponsor first.

        Stops at the top of the tree, after ``max_levels`` levels, or when an
        ancestor repeats (malformed cyclic chain). The next sponsor is only
        read once the caller asks for it.

        Args:
            start_user_id: User whose upline is walked (not yielded)
            max_levels: Hard limit on levels yielded

        Yields:
            Tuples of (level, ancestor_id), level starting at 1
        """
        sponsor_id = await self.user_repo.get_sponsor_id(start_user_id)
        if sponsor_id is None:
            logger.debug(
                "No sponsor found, chain is empty",
                extra={"user_id": start_user_id},
            )
            return

        visited = {start_user_id}
        level = 1

        while sponsor_id is not None and level <= max_levels:
            if sponsor_id in visited:
                logger.error(
                    "Cycle detected in sponsor chain",
                    extra={
                        "start_user_id": start_user_id,
                        "user_id": sponsor_id,
                        "level": level,
                    },
                )
                return
            visited.add(sponsor_id)

            yield level, sponsor_id

            if level == max_levels:
                break

            sponsor_id = await self.user_repo.get_sponsor_id(sponsor_id)
            level += 1

        if sponsor_id is None:
            logger.debug(
                "Reached top of sponsor chain",
                extra={"start_user_id": start_user_id, "level": level},
            )
