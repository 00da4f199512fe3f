"""
Distribution orchestrator.

Drives one commission distribution: resolve schedule, walk the sponsor chain,
and for every level evaluate, calculate and credit. A level never aborts the
run; only a missing schedule fails the whole call.
"""

import time
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from levelpay.config.constants import (
    MAX_COMMISSION_LEVELS,
    REASON_ALREADY_PAID,
    REASON_BELOW_MINIMUM,
    REASON_WRITE_FAILED,
    REASON_ZERO_AMOUNT,
    REASON_ZERO_PERCENTAGE,
)
from levelpay.config.settings import get_settings
from levelpay.models.enums import REFERENCE_TYPE_FOR_PAYOUT, PayoutType
from levelpay.repositories.payout_repository import PayoutRepository
from levelpay.services.distribution.calculator import CommissionCalculator
from levelpay.services.distribution.chain_walker import SponsorChainWalker
from levelpay.services.distribution.eligibility import EligibilityEvaluator
from levelpay.services.distribution.ledger_writer import (
    CreditStatus,
    LedgerWriter,
)
from levelpay.services.distribution.schedule import (
    CommissionSchedule,
    ConfigResolver,
)
from levelpay.services.distribution.summary import (
    DistributionState,
    DistributionSummary,
)
from levelpay.utils.exceptions import ConfigMissing


def to_amount(value: Decimal | int | float | str) -> Decimal:
    """
    Read an event amount as Decimal.

    Floats go through their shortest repr, so 0.1 becomes Decimal("0.1").

    Raises:
        TypeError: Value is not a number
        ValueError: Value is NaN or infinite
    """
    if isinstance(value, bool) or not isinstance(
        value, (Decimal, int, float, str)
    ):
        raise TypeError(f"amount must be a number, got {type(value).__name__}")

    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"amount must be finite, got {value}")
    return amount


class DistributionOrchestrator:
    """
    Multi-level commission distribution.

    Handles both level income on package purchases and ROI-on-ROI on
    returns credited to a downline; the two differ only in payout type,
    reference type and the minimum purchase gate.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        feature_key: str | None = None,
        max_levels_cap: int | None = None,
        calculator: CommissionCalculator | None = None,
        ledger_writer: LedgerWriter | None = None,
    ) -> None:
        """
        Initialize distribution orchestrator.

        Args:
            session_maker: Session factory (reads and ledger writes)
            feature_key: plan_settings key of the schedule
                (settings.level_income_feature_key by default)
            max_levels_cap: Upper bound on levels, on top of the schedule
                (settings.max_commission_levels by default)
            calculator: Commission calculator
            ledger_writer: Ledger writer
        """
        self.session_maker = session_maker
        if feature_key is None or max_levels_cap is None:
            settings = get_settings()
            if feature_key is None:
                feature_key = settings.level_income_feature_key
            if max_levels_cap is None:
                max_levels_cap = settings.max_commission_levels

        self.feature_key = feature_key
        self.max_levels_cap = min(max_levels_cap, MAX_COMMISSION_LEVELS)
        self.calculator = calculator or CommissionCalculator()
        self.ledger_writer = ledger_writer or LedgerWriter(session_maker)
        self.logger = logger.bind(service=self.__class__.__name__)

    async def distribute_on_purchase(
        self,
        buyer_id: int,
        purchase_amount: Decimal | int | float | str,
        package_ref: str,
        event_ref: str,
    ) -> DistributionSummary:
        """
        Pay level income up the buyer's sponsor chain.

        Args:
            buyer_id: User who bought the package
            purchase_amount: Package price (floats are read via str)
            package_ref: Purchased package
            event_ref: Purchase reference (idempotency)

        Returns:
            DistributionSummary
        """
        return await self._distribute(
            source_user_id=buyer_id,
            base_amount=to_amount(purchase_amount),
            payout_type=PayoutType.LEVEL_INCOME,
            event_ref=event_ref,
            package_ref=package_ref,
        )

    async def distribute_on_return(
        self,
        recipient_id: int,
        return_amount: Decimal | int | float | str,
        event_ref: str,
    ) -> DistributionSummary:
        """
        Pay ROI-on-ROI up the sponsor chain of a user who just received ROI.

        Uses the same schedule as level income. The payouts made here are
        not themselves returns and trigger no further distribution.

        Args:
            recipient_id: User credited with the ROI
            return_amount: ROI amount (floats are read via str)
            event_ref: ROI event reference (idempotency)

        Returns:
            DistributionSummary
        """
        return await self._distribute(
            source_user_id=recipient_id,
            base_amount=to_amount(return_amount),
            payout_type=PayoutType.ROI_ON_ROI,
            event_ref=event_ref,
        )

    async def _distribute(
        self,
        source_user_id: int,
        base_amount: Decimal,
        payout_type: PayoutType,
        event_ref: str,
        package_ref: str | None = None,
    ) -> DistributionSummary:
        """Run one distribution and build its summary."""
        start_time = time.time()
        log = self.logger.bind(event_ref=event_ref, payout_type=payout_type)

        summary = DistributionSummary(
            payout_type=payout_type,
            event_ref=event_ref,
            source_user_id=source_user_id,
            base_amount=base_amount,
        )

        async with self.session_maker() as session:
            summary.state = DistributionState.RESOLVING_CONFIG
            try:
                schedule = await ConfigResolver(
                    session, self.feature_key, self.max_levels_cap
                ).resolve()
            except ConfigMissing as e:
                log.error(
                    "Commission distribution aborted",
                    extra={"source_user_id": source_user_id, "error": str(e)},
                )
                summary.fail(str(e))
                return summary

            below_minimum = (
                payout_type == PayoutType.LEVEL_INCOME
                and base_amount < schedule.min_package_amount
            )
            summary.max_amount = self.calculator.max_payout(
                base_amount, schedule.total_percentage
            )

            if below_minimum:
                log.info(
                    "Purchase below minimum package amount, no level income",
                    extra={
                        "source_user_id": source_user_id,
                        "base_amount": str(base_amount),
                        "min_package_amount": str(
                            schedule.min_package_amount
                        ),
                    },
                )

            walker = SponsorChainWalker(session)
            evaluator = EligibilityEvaluator(session)
            payout_repo = PayoutRepository(session)

            summary.state = DistributionState.WALKING
            async for level, ancestor_id in walker.walk(
                source_user_id, schedule.max_levels
            ):
                if below_minimum:
                    summary.record_skip(
                        level, ancestor_id, REASON_BELOW_MINIMUM
                    )
                    continue

                await self._process_level(
                    summary,
                    schedule,
                    evaluator,
                    payout_repo,
                    level,
                    ancestor_id,
                    package_ref,
                )

        summary.state = DistributionState.DONE
        duration = time.time() - start_time

        if summary.total_amount > summary.max_amount:
            log.error(
                "Distribution paid more than its schedule allows",
                extra={
                    "total_amount": str(summary.total_amount),
                    "max_amount": str(summary.max_amount),
                },
            )

        log.info(
            "Commission distribution completed",
            extra={
                "source_user_id": source_user_id,
                "base_amount": str(base_amount),
                "levels_paid": summary.levels_paid,
                "levels_skipped": summary.levels_skipped,
                "total_amount": str(summary.total_amount),
                "max_amount": str(summary.max_amount),
                "duration_seconds": round(duration, 3),
            },
        )
        return summary

    async def _process_level(
        self,
        summary: DistributionSummary,
        schedule: CommissionSchedule,
        evaluator: EligibilityEvaluator,
        payout_repo: PayoutRepository,
        level: int,
        ancestor_id: int,
        package_ref: str | None,
    ) -> None:
        """Evaluate, calculate and credit a single level."""
        already_paid = await payout_repo.exists_for_key(
            user_id=ancestor_id,
            reference_id=summary.event_ref,
            reference_type=REFERENCE_TYPE_FOR_PAYOUT[summary.payout_type],
            level=level,
            payout_type=summary.payout_type,
        )
        if already_paid:
            self._skip(summary, level, ancestor_id, REASON_ALREADY_PAID)
            return

        percentage = schedule.percentage_for(level)
        if percentage <= 0:
            self._skip(summary, level, ancestor_id, REASON_ZERO_PERCENTAGE)
            return

        summary.state = DistributionState.EVALUATING
        eligibility = await evaluator.is_eligible(ancestor_id, level, schedule)
        if not eligibility.eligible:
            self._skip(summary, level, ancestor_id, eligibility.reason)
            return

        summary.state = DistributionState.CALCULATING
        amount = self.calculator.amount(summary.base_amount, percentage)
        if amount <= 0:
            self._skip(summary, level, ancestor_id, REASON_ZERO_AMOUNT)
            return

        summary.state = DistributionState.CREDITING
        result = await self.ledger_writer.credit(
            recipient_id=ancestor_id,
            amount=amount,
            level=level,
            payout_type=summary.payout_type,
            source_user_id=summary.source_user_id,
            event_ref=summary.event_ref,
            package_ref=package_ref,
        )

        if result.status == CreditStatus.RECORDED:
            summary.record_paid(level, ancestor_id, amount)
        elif result.status == CreditStatus.DUPLICATE:
            self._skip(summary, level, ancestor_id, REASON_ALREADY_PAID)
        else:
            self.logger.error(
                "Level commission not written",
                extra={
                    "event_ref": summary.event_ref,
                    "level": level,
                    "recipient_id": ancestor_id,
                    "amount": str(amount),
                    "error": result.reason,
                },
            )
            summary.record_skip(level, ancestor_id, REASON_WRITE_FAILED)

        summary.state = DistributionState.WALKING

    def _skip(
        self,
        summary: DistributionSummary,
        level: int,
        ancestor_id: int,
        reason: str | None,
    ) -> None:
        self.logger.debug(
            "Level skipped",
            extra={
                "event_ref": summary.event_ref,
                "level": level,
                "recipient_id": ancestor_id,
                "reason": reason,
            },
        )
        summary.record_skip(level, ancestor_id, reason or "")


async def distribute_on_purchase(
    session_maker: async_sessionmaker[AsyncSession],
    buyer_id: int,
    purchase_amount: Decimal,
    package_ref: str,
    event_ref: str,
) -> DistributionSummary:
    """Distribute level income for one package purchase."""
    orchestrator = DistributionOrchestrator(session_maker)
    return await orchestrator.distribute_on_purchase(
        buyer_id, purchase_amount, package_ref, event_ref
    )


async def distribute_on_return(
    session_maker: async_sessionmaker[AsyncSession],
    recipient_id: int,
    return_amount: Decimal,
    event_ref: str,
) -> DistributionSummary:
    """Distribute ROI-on-ROI for one ROI credit."""
    orchestrator = DistributionOrchestrator(session_maker)
    return await orchestrator.distribute_on_return(
        recipient_id, return_amount, event_ref
    )
