"""
Fixtures for integration tests.

Runs the real models and repositories against a temporary SQLite file
database. Each session opens its own connection (NullPool), as separate
service processes would against PostgreSQL.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import update

from levelpay.config.constants import LEVEL_INCOME_FEATURE_KEY
from levelpay.database import create_engine, create_session_maker
from levelpay.models import Base, PlanSetting, User, UserPackage
from levelpay.models.enums import PackageStatus, ReferenceType
from levelpay.repositories.payout_repository import PayoutRepository


class LedgerFixture:
    """Seeds users, packages and schedules; reads back ledger state."""

    def __init__(self, session_maker) -> None:
        self.session_maker = session_maker

    async def add_user(
        self,
        sponsor_id: int | None = None,
        package_status: str | None = PackageStatus.ACTIVE,
    ) -> int:
        """Create a user, optionally holding one package."""
        async with self.session_maker() as session:
            async with session.begin():
                user = User(sponsor_id=sponsor_id)
                session.add(user)
                await session.flush()
                if package_status is not None:
                    session.add(
                        UserPackage(
                            user_id=user.id,
                            package_ref="starter",
                            amount=Decimal("100"),
                            status=package_status,
                        )
                    )
                return user.id

    async def set_package_status(self, user_id: int, status: str) -> None:
        """Move every package of a user to a new status."""
        async with self.session_maker() as session:
            async with session.begin():
                await session.execute(
                    update(UserPackage)
                    .where(UserPackage.user_id == user_id)
                    .values(status=status)
                )

    async def add_chain(self, length: int) -> list[int]:
        """
        Create a straight sponsor line.

        Returns:
            User IDs from the top of the tree down; the last one is
            the deepest user (the usual buyer)
        """
        user_ids: list[int] = []
        sponsor_id = None
        for _ in range(length):
            sponsor_id = await self.add_user(sponsor_id=sponsor_id)
            user_ids.append(sponsor_id)
        return user_ids

    async def set_schedule(
        self,
        percentages,
        is_active: bool = True,
        **flags,
    ) -> None:
        """Store the level income schedule payload."""
        payload = {
            "max_levels": len(percentages),
            "level_percentages": [str(p) for p in percentages],
            **flags,
        }
        await self.set_payload(payload, is_active=is_active)

    async def set_payload(self, payload, is_active: bool = True) -> None:
        """Store a raw plan_settings payload."""
        async with self.session_maker() as session:
            async with session.begin():
                session.add(
                    PlanSetting(
                        feature_key=LEVEL_INCOME_FEATURE_KEY,
                        feature_name="30 Level Income",
                        is_active=is_active,
                        payload=payload,
                    )
                )

    async def user(self, user_id: int) -> User:
        """Reload a user."""
        async with self.session_maker() as session:
            return await session.get(User, user_id)

    async def balance(self, user_id: int) -> Decimal:
        """Current wallet balance of a user."""
        return (await self.user(user_id)).wallet_balance

    async def payouts(
        self,
        event_ref: str,
        reference_type: ReferenceType = ReferenceType.PACKAGE_PURCHASE,
    ):
        """Payout rows of one event, by level."""
        async with self.session_maker() as session:
            return await PayoutRepository(session).get_by_reference(
                event_ref, reference_type
            )

    async def paid_total(
        self,
        event_ref: str,
        reference_type: ReferenceType = ReferenceType.PACKAGE_PURCHASE,
    ) -> Decimal:
        """Sum of payout rows of one event."""
        async with self.session_maker() as session:
            return await PayoutRepository(session).sum_by_reference(
                event_ref, reference_type
            )


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Temporary database with all tables created."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'levelpay.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    """Session maker bound to the temporary database."""
    return create_session_maker(engine)


@pytest.fixture
def ledger(session_maker):
    """Seeding and read-back helper."""
    return LedgerFixture(session_maker)
