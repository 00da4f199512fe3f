"""
Payout model.

One row per commission credited to a recipient. The composite unique key
(recipient, reference, level, payout type) makes every event payable at most
once per level.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from levelpay.models.base import Base
from levelpay.models.enums import PayoutStatus
from levelpay.models.types import MoneyType

IDEMPOTENCY_CONSTRAINT = "uq_payouts_idempotency_key"


class Payout(Base):
    """
    Payout entity.

    Attributes:
        id: Primary key
        user_id: Recipient (ancestor credited)
        from_user_id: User whose event triggered the payout
        payout_type: level_income or roi_on_roi
        level: Distance from the source user (1-based)
        amount: Amount credited
        reference_id: Event identifier (purchase / ROI event)
        reference_type: package_purchase or roi_distribution
        package_ref: Purchased package (level income only)
        description: Human readable line for statements
        status: Always "completed" (written atomically with the credit)
        created_at: When the payout was recorded
    """

    __tablename__ = "payouts"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "reference_id",
            "reference_type",
            "level",
            "payout_type",
            name=IDEMPOTENCY_CONSTRAINT,
        ),
        CheckConstraint('amount > 0', name='check_payout_amount_positive'),
        CheckConstraint('level >= 1', name='check_payout_level_positive'),
        Index("idx_payouts_reference", "reference_id", "reference_type"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    payout_type: Mapped[str] = mapped_column(String(32), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    reference_id: Mapped[str] = mapped_column(String(128), nullable=False)
    reference_type: Mapped[str] = mapped_column(String(32), nullable=False)
    package_ref: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=PayoutStatus.COMPLETED, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Payout(id={self.id}, user_id={self.user_id}, "
            f"type={self.payout_type}, level={self.level}, "
            f"amount={self.amount}, ref={self.reference_id})>"
        )
