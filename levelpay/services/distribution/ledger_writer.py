"""
Ledger writer.

Credits one commission as a single all-or-nothing database transaction:
payout row (idempotency key), wallet journal row and atomic balance add.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from levelpay.models.enums import (
    REFERENCE_TYPE_FOR_PAYOUT,
    PayoutStatus,
    PayoutType,
    ReferenceType,
)
from levelpay.repositories.payout_repository import PayoutRepository
from levelpay.repositories.user_repository import UserRepository
from levelpay.repositories.wallet_transaction_repository import (
    WalletTransactionRepository,
)
from levelpay.utils.exceptions import LedgerWriteError


class CreditStatus(StrEnum):
    """Outcome of a ledger credit."""

    RECORDED = "recorded"
    DUPLICATE = "duplicate"
    FAILED = "failed"


@dataclass(frozen=True)
class CreditResult:
    """Result of LedgerWriter.credit."""

    status: CreditStatus
    payout_id: int | None = None
    reason: str | None = None

    @property
    def recorded(self) -> bool:
        """Whether the credit took effect."""
        return self.status == CreditStatus.RECORDED


def payout_description(
    payout_type: PayoutType, level: int, source_user_id: int
) -> str:
    """Statement line for a payout."""
    if payout_type == PayoutType.LEVEL_INCOME:
        return f"Level {level} income from package purchase"
    return f"Level {level} ROI-on-ROI from user {source_user_id}"


class LedgerWriter:
    """Writes idempotent commission credits."""

    def __init__(
        self, session_maker: async_sessionmaker[AsyncSession]
    ) -> None:
        """
        Initialize ledger writer.

        Args:
            session_maker: Factory for one short-lived session per credit
        """
        self.session_maker = session_maker

    async def credit(
        self,
        recipient_id: int,
        amount: Decimal,
        level: int,
        payout_type: PayoutType,
        source_user_id: int,
        event_ref: str,
        package_ref: str | None = None,
    ) -> CreditResult:
        """
        Credit a commission exactly once per idempotency key.

        The payout insert, the journal insert and the balance increment
        commit together or not at all. A unique-key violation on the payout
        means the event was already paid at this level and is reported as
        DUPLICATE with no balance change.

        Args:
            recipient_id: Ancestor credited
            amount: Commission amount (> 0)
            level: Ancestor's level
            payout_type: level_income or roi_on_roi
            source_user_id: User whose event is distributed
            event_ref: Event reference (idempotency)
            package_ref: Purchased package, level income only

        Returns:
            CreditResult
        """
        reference_type = REFERENCE_TYPE_FOR_PAYOUT[payout_type]
        description = payout_description(payout_type, level, source_user_id)

        try:
            async with self.session_maker() as session:
                async with session.begin():
                    payout = await PayoutRepository(session).create(
                        user_id=recipient_id,
                        from_user_id=source_user_id,
                        payout_type=payout_type,
                        level=level,
                        amount=amount,
                        reference_id=event_ref,
                        reference_type=reference_type,
                        package_ref=package_ref,
                        description=description,
                        status=PayoutStatus.COMPLETED,
                    )

                    await WalletTransactionRepository(session).create(
                        user_id=recipient_id,
                        transaction_type=payout_type,
                        amount=amount,
                        description=description,
                        status=PayoutStatus.COMPLETED,
                    )

                    credited = await UserRepository(session).credit_earnings(
                        recipient_id, amount, payout_type
                    )
                    if not credited:
                        raise LedgerWriteError(
                            f"recipient {recipient_id} not found"
                        )

                    payout_id = payout.id

        except IntegrityError as exc:
            if await self._is_recorded(
                recipient_id, event_ref, reference_type, level, payout_type
            ):
                logger.debug(
                    "Payout already recorded, credit skipped",
                    extra={
                        "recipient_id": recipient_id,
                        "event_ref": event_ref,
                        "level": level,
                        "payout_type": payout_type,
                    },
                )
                return CreditResult(status=CreditStatus.DUPLICATE)

            logger.error(
                "Integrity violation while crediting commission",
                extra={
                    "recipient_id": recipient_id,
                    "event_ref": event_ref,
                    "level": level,
                    "error": str(exc.orig),
                },
            )
            return CreditResult(
                status=CreditStatus.FAILED, reason=str(exc.orig)
            )

        except LedgerWriteError as exc:
            logger.warning(
                "Commission credit rolled back",
                extra={
                    "recipient_id": recipient_id,
                    "event_ref": event_ref,
                    "level": level,
                    "error": str(exc),
                },
            )
            return CreditResult(status=CreditStatus.FAILED, reason=str(exc))

        except SQLAlchemyError as exc:
            logger.error(
                "Database error while crediting commission",
                extra={
                    "recipient_id": recipient_id,
                    "event_ref": event_ref,
                    "level": level,
                    "error": str(exc),
                },
            )
            return CreditResult(
                status=CreditStatus.FAILED, reason=type(exc).__name__
            )

        logger.info(
            "Commission credited",
            extra={
                "payout_id": payout_id,
                "recipient_id": recipient_id,
                "source_user_id": source_user_id,
                "level": level,
                "amount": str(amount),
                "payout_type": payout_type,
                "event_ref": event_ref,
            },
        )
        return CreditResult(status=CreditStatus.RECORDED, payout_id=payout_id)

    async def _is_recorded(
        self,
        recipient_id: int,
        event_ref: str,
        reference_type: ReferenceType,
        level: int,
        payout_type: PayoutType,
    ) -> bool:
        """Look up the idempotency key after an integrity error."""
        try:
            async with self.session_maker() as session:
                return await PayoutRepository(session).exists_for_key(
                    user_id=recipient_id,
                    reference_id=event_ref,
                    reference_type=reference_type,
                    level=level,
                    payout_type=payout_type,
                )
        except SQLAlchemyError as exc:
            logger.error(
                "Could not classify integrity error",
                extra={"event_ref": event_ref, "error": str(exc)},
            )
            return False
