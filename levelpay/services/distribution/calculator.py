"""
Commission calculator.

Pure decimal arithmetic, no I/O.
"""

from decimal import ROUND_DOWN, Decimal

from loguru import logger

from levelpay.config.constants import MONEY_QUANTUM, ZERO


class CommissionCalculator:
    """Computes per-level commission amounts."""

    def amount(self, base_amount: Decimal, percentage: Decimal) -> Decimal:
        """
        Calculate a level commission.

        Formula: base_amount * percentage / 100, truncated to the ledger's
        8 fractional digits so a run never pays more than its schedule.

        Args:
            base_amount: Purchase or ROI amount
            percentage: Level percentage (e.g. 10 = 10%)

        Returns:
            Commission amount (0 for non-positive inputs)

        Example:
            >>> CommissionCalculator().amount(Decimal("1000"), Decimal("10"))
            Decimal('100.00000000')
        """
        if base_amount <= 0:
            logger.warning(
                "Invalid base amount for commission calculation",
                extra={"base_amount": str(base_amount)}
            )
            return ZERO

        if percentage < 0:
            logger.warning(
                "Invalid percentage for commission calculation",
                extra={"percentage": str(percentage)}
            )
            return ZERO

        commission = (base_amount * percentage) / 100
        return commission.quantize(MONEY_QUANTUM, rounding=ROUND_DOWN)

    def max_payout(
        self, base_amount: Decimal, total_percentage: Decimal
    ) -> Decimal:
        """
        Upper bound of what one event may pay across all levels.

        Args:
            base_amount: Purchase or ROI amount
            total_percentage: Sum of the schedule's level percentages

        Returns:
            base_amount * total_percentage / 100 (0 for non-positive inputs)
        """
        if base_amount <= 0 or total_percentage <= 0:
            return ZERO
        return (base_amount * total_percentage) / 100
