"""
Integration tests for commission distribution.

Exercise the orchestrator with the real repositories, ledger writer and
unique idempotency key against a SQLite database.
"""

import asyncio
from decimal import Decimal

import pytest

from levelpay.config.settings import get_settings
from levelpay.models.enums import PackageStatus, ReferenceType
from levelpay.services.distribution import (
    DistributionOrchestrator,
    LevelOutcome,
    distribute_on_purchase,
    distribute_on_return,
)

pytestmark = pytest.mark.integration


@pytest.fixture
def orchestrator(session_maker):
    """Orchestrator on the temporary database."""
    return DistributionOrchestrator(session_maker)


class TestLevelIncome:
    """Level income on package purchases."""

    @pytest.mark.asyncio
    async def test_three_level_scenario(self, orchestrator, ledger):
        """A <- B <- C <- D, D buys 1000 with 10/5/3: C 100, B 50, A 30."""
        a, b, c, d = await ledger.add_chain(4)
        await ledger.set_schedule(["10", "5", "3"])

        summary = await orchestrator.distribute_on_purchase(
            d, Decimal("1000"), "starter", "purchase-1"
        )

        assert summary.success is True
        assert summary.levels_paid == 3
        assert summary.total_amount == Decimal("180")
        assert await ledger.balance(c) == Decimal("100")
        assert await ledger.balance(b) == Decimal("50")
        assert await ledger.balance(a) == Decimal("30")
        assert await ledger.balance(d) == Decimal("0")

        user_c = await ledger.user(c)
        assert user_c.total_earnings == Decimal("100")
        assert user_c.commission_earnings == Decimal("100")
        assert user_c.roi_on_roi_earnings == Decimal("0")

        payouts = await ledger.payouts("purchase-1")
        assert [(p.level, p.user_id, p.from_user_id) for p in payouts] == [
            (1, c, d),
            (2, b, d),
            (3, a, d),
        ]
        assert payouts[0].description == "Level 1 income from package purchase"
        assert payouts[0].package_ref == "starter"

    @pytest.mark.asyncio
    async def test_module_level_entry_point(self, session_maker, ledger):
        """Convenience coroutine runs a full distribution."""
        a, b = await ledger.add_chain(2)
        await ledger.set_schedule(["10"])

        summary = await distribute_on_purchase(
            session_maker, b, Decimal("250"), "starter", "purchase-9"
        )

        assert summary.levels_paid == 1
        assert await ledger.balance(a) == Decimal("25")

    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, orchestrator, ledger):
        """Same event twice pays once."""
        a, b, c, d = await ledger.add_chain(4)
        await ledger.set_schedule(["10", "5", "3"])

        await orchestrator.distribute_on_purchase(
            d, Decimal("1000"), "starter", "purchase-1"
        )
        rerun = await orchestrator.distribute_on_purchase(
            d, Decimal("1000"), "starter", "purchase-1"
        )

        assert rerun.success is True
        assert rerun.levels_paid == 0
        assert rerun.levels_skipped == 3
        assert all(
            detail.reason == "already paid" for detail in rerun.details
        )
        assert await ledger.balance(c) == Decimal("100")
        assert await ledger.balance(b) == Decimal("50")
        assert await ledger.balance(a) == Decimal("30")
        assert len(await ledger.payouts("purchase-1")) == 3

    @pytest.mark.asyncio
    async def test_distinct_events_both_pay(self, orchestrator, ledger):
        """Two purchases by the same buyer are separate events."""
        a, b = await ledger.add_chain(2)
        await ledger.set_schedule(["10"])

        for event_ref in ("purchase-1", "purchase-2"):
            await orchestrator.distribute_on_purchase(
                b, Decimal("100"), "starter", event_ref
            )

        assert await ledger.balance(a) == Decimal("20")

    @pytest.mark.asyncio
    async def test_walk_bounded_to_thirty_levels(self, orchestrator, ledger):
        """50-deep upline with a 30-level schedule pays exactly 30 levels."""
        users = await ledger.add_chain(51)
        await ledger.set_schedule(["1"] * 30)

        summary = await orchestrator.distribute_on_purchase(
            users[-1], Decimal("100"), "starter", "purchase-deep"
        )

        assert summary.levels_paid == 30
        assert len(summary.details) == 30
        assert summary.details[-1].level == 30
        assert summary.details[-1].recipient_id == users[-31]
        assert await ledger.balance(users[-32]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_chain_top_buyer(self, orchestrator, ledger):
        """Buyer without sponsor: nothing paid, nothing skipped."""
        top = await ledger.add_user()
        await ledger.set_schedule(["10", "5", "3"])

        summary = await orchestrator.distribute_on_purchase(
            top, Decimal("1000"), "starter", "purchase-1"
        )

        assert summary.success is True
        assert summary.levels_paid == 0
        assert summary.levels_skipped == 0

    @pytest.mark.asyncio
    async def test_conservation(self, orchestrator, ledger):
        """Paid total matches payout rows and never exceeds the schedule."""
        users = await ledger.add_chain(6)
        await ledger.set_schedule(["7.5", "0", "3.3333", "2", "1"])

        summary = await orchestrator.distribute_on_purchase(
            users[-1], Decimal("777.77"), "starter", "purchase-odd"
        )

        assert summary.total_amount == await ledger.paid_total("purchase-odd")
        assert summary.total_amount <= Decimal("777.77") * Decimal("13.8333") / 100
        assert summary.details[1].reason == "zero percentage"

    @pytest.mark.asyncio
    async def test_below_minimum_package_amount(self, orchestrator, ledger):
        """Small purchases pay no level income."""
        a, b = await ledger.add_chain(2)
        await ledger.set_schedule(["10"], min_package_amount="500")

        summary = await orchestrator.distribute_on_purchase(
            b, Decimal("100"), "starter", "purchase-small"
        )

        assert summary.levels_skipped == 1
        assert summary.details[0].reason == "below minimum package amount"
        assert await ledger.payouts("purchase-small") == []
        assert await ledger.balance(a) == Decimal("0")


    @pytest.mark.asyncio
    async def test_rerun_after_recipient_state_change(
        self, orchestrator, ledger
    ):
        """Paid levels stay "already paid" even if the ancestor lapses."""
        a, b = await ledger.add_chain(2)
        await ledger.set_schedule(["10"], require_active_status=True)

        await orchestrator.distribute_on_purchase(
            b, Decimal("1000"), "starter", "purchase-1"
        )
        await ledger.set_package_status(a, PackageStatus.EXPIRED)
        rerun = await orchestrator.distribute_on_purchase(
            b, Decimal("1000"), "starter", "purchase-1"
        )

        assert [d.reason for d in rerun.details] == ["already paid"]
        assert await ledger.balance(a) == Decimal("100")

    @pytest.mark.asyncio
    async def test_float_purchase_amount(self, orchestrator, ledger):
        """Float amounts pay the same as their decimal text."""
        a, b = await ledger.add_chain(2)
        await ledger.set_schedule(["10"])

        summary = await orchestrator.distribute_on_purchase(
            b, 99.9, "starter", "purchase-float"
        )

        assert summary.total_amount == Decimal("9.99")
        assert await ledger.balance(a) == Decimal("9.99")

class TestEligibilityGates:
    """Active status and level unlock against real data."""

    @pytest.mark.asyncio
    async def test_level_unlock(self, orchestrator, ledger):
        """Level N needs N directs; level 5 with 3 directs is skipped."""
        users = await ledger.add_chain(6)
        buyer = users[-1]
        # Ancestor at level L already has one direct (the chain member below)
        for level in range(1, 6):
            ancestor = users[-1 - level]
            extra = 2 if level == 5 else level - 1
            for _ in range(extra):
                await ledger.add_user(sponsor_id=ancestor)
        await ledger.set_schedule(["1"] * 5, require_level_unlock=True)

        summary = await orchestrator.distribute_on_purchase(
            buyer, Decimal("1000"), "starter", "purchase-1"
        )

        assert [d.outcome for d in summary.details[:4]] == [
            LevelOutcome.PAID
        ] * 4
        assert summary.details[4].outcome == LevelOutcome.SKIPPED
        assert summary.details[4].reason == "level 5 requires 5 directs, has 3"
        assert await ledger.balance(users[0]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_active_status_required(self, orchestrator, ledger):
        """Ancestors without an active package are skipped."""
        top = await ledger.add_user(package_status=PackageStatus.EXPIRED)
        middle = await ledger.add_user(sponsor_id=top, package_status=None)
        sponsor = await ledger.add_user(sponsor_id=middle)
        buyer = await ledger.add_user(sponsor_id=sponsor)
        await ledger.set_schedule(
            ["10", "5", "3"], require_active_status=True
        )

        summary = await orchestrator.distribute_on_purchase(
            buyer, Decimal("1000"), "starter", "purchase-1"
        )

        assert summary.levels_paid == 1
        assert [d.reason for d in summary.details] == [
            None,
            "no active package",
            "no active package",
        ]
        assert await ledger.balance(sponsor) == Decimal("100")


class TestScheduleErrors:
    """Missing or malformed schedule."""

    @pytest.mark.asyncio
    async def test_no_schedule(self, orchestrator, ledger):
        """Distribution fails without an active schedule."""
        a, b = await ledger.add_chain(2)

        summary = await orchestrator.distribute_on_purchase(
            b, Decimal("1000"), "starter", "purchase-1"
        )

        assert summary.success is False
        assert "level_income_30" in summary.error_message
        assert summary.details == []

    @pytest.mark.asyncio
    async def test_inactive_schedule(self, orchestrator, ledger):
        """Inactive schedule counts as missing."""
        a, b = await ledger.add_chain(2)
        await ledger.set_schedule(["10"], is_active=False)

        summary = await orchestrator.distribute_on_purchase(
            b, Decimal("1000"), "starter", "purchase-1"
        )

        assert summary.success is False

    @pytest.mark.asyncio
    async def test_malformed_schedule(self, orchestrator, ledger):
        """Percentage count not matching max_levels is rejected."""
        a, b = await ledger.add_chain(2)
        await ledger.set_payload(
            {"max_levels": 3, "level_percentages": ["10", "5"]}
        )

        summary = await orchestrator.distribute_on_purchase(
            b, Decimal("1000"), "starter", "purchase-1"
        )

        assert summary.success is False
        assert await ledger.balance(a) == Decimal("0")


class TestRoiOnRoi:
    """ROI-on-ROI distribution."""

    @pytest.mark.asyncio
    async def test_return_distribution(self, session_maker, ledger):
        """ROI credited to D pays its upline as roi_on_roi."""
        a, b, c, d = await ledger.add_chain(4)
        await ledger.set_schedule(
            ["10", "5", "3"], min_package_amount="500"
        )

        summary = await distribute_on_return(
            session_maker, d, Decimal("20"), "roi-1"
        )

        assert summary.levels_paid == 3
        assert summary.total_amount == Decimal("3.6")

        user_c = await ledger.user(c)
        assert user_c.wallet_balance == Decimal("2")
        assert user_c.roi_on_roi_earnings == Decimal("2")
        assert user_c.commission_earnings == Decimal("0")

        payouts = await ledger.payouts(
            "roi-1", ReferenceType.ROI_DISTRIBUTION
        )
        assert payouts[0].description == f"Level 1 ROI-on-ROI from user {d}"
        assert payouts[0].package_ref is None

    @pytest.mark.asyncio
    async def test_same_ref_for_purchase_and_return(
        self, orchestrator, ledger
    ):
        """Purchase and ROI events never collide on the idempotency key."""
        a, b = await ledger.add_chain(2)
        await ledger.set_schedule(["10"])

        await orchestrator.distribute_on_purchase(
            b, Decimal("100"), "starter", "event-1"
        )
        summary = await orchestrator.distribute_on_return(
            b, Decimal("100"), "event-1"
        )

        assert summary.levels_paid == 1
        assert await ledger.balance(a) == Decimal("20")


class TestConcurrency:
    """Concurrent distributions."""

    @pytest.mark.asyncio
    async def test_concurrent_events_lose_no_credit(
        self, orchestrator, ledger
    ):
        """Credits to a shared sponsor from parallel events all land."""
        sponsor = await ledger.add_user()
        buyers = [await ledger.add_user(sponsor_id=sponsor) for _ in range(8)]
        await ledger.set_schedule(["10"])

        summaries = await asyncio.gather(*(
            orchestrator.distribute_on_purchase(
                buyer, Decimal("100"), "starter", f"purchase-{buyer}"
            )
            for buyer in buyers
        ))

        assert sum(s.levels_paid for s in summaries) == 8
        assert await ledger.balance(sponsor) == Decimal("80")

    @pytest.mark.asyncio
    async def test_concurrent_replay_pays_once(self, orchestrator, ledger):
        """Duplicate delivery racing the original pays each level once."""
        a, b, c, d = await ledger.add_chain(4)
        await ledger.set_schedule(["10", "5", "3"])

        first, second = await asyncio.gather(
            orchestrator.distribute_on_purchase(
                d, Decimal("1000"), "starter", "purchase-1"
            ),
            orchestrator.distribute_on_purchase(
                d, Decimal("1000"), "starter", "purchase-1"
            ),
        )

        assert first.levels_paid + second.levels_paid == 3
        assert first.total_amount + second.total_amount == Decimal("180")
        assert await ledger.paid_total("purchase-1") == Decimal("180")
        assert await ledger.balance(c) == Decimal("100")


class TestSettingsDefaults:
    """Module-level entry points honour the configured settings."""

    @pytest.fixture
    def single_level_cap(self, monkeypatch):
        """Cap runs at one level through the environment."""
        monkeypatch.setenv("MAX_COMMISSION_LEVELS", "1")
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    @pytest.mark.asyncio
    async def test_configured_level_cap(
        self, session_maker, ledger, single_level_cap
    ):
        """A 3-level schedule pays one level when settings cap it at 1."""
        a, b, c, d = await ledger.add_chain(4)
        await ledger.set_schedule(["10", "5", "3"])

        summary = await distribute_on_purchase(
            session_maker, d, Decimal("1000"), "starter", "purchase-1"
        )

        assert summary.levels_paid == 1
        assert len(summary.details) == 1
        assert await ledger.balance(c) == Decimal("100")
        assert await ledger.balance(b) == Decimal("0")
