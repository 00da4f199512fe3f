"""
User model.

Represents a participant in the sponsor tree. The commission engine only
reads users and atomically increments their balance and earnings fields.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from levelpay.models.base import Base
from levelpay.models.types import MoneyType


class User(Base):
    """User model - a node of the sponsor tree with a wallet."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            'wallet_balance >= 0', name='check_user_wallet_balance_non_negative'
        ),
        CheckConstraint(
            'total_earnings >= 0',
            name='check_user_total_earnings_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    username: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )

    # Upline sponsor (NULL = top of the tree)
    sponsor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Balances
    wallet_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    commission_earnings: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0"),
        nullable=False,
        comment="Level income received from downline package purchases",
    )
    roi_on_roi_earnings: Mapped[Decimal] = mapped_column(
        MoneyType,
        default=Decimal("0"),
        nullable=False,
        comment="ROI-on-ROI received from downline ROI credits",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, sponsor_id={self.sponsor_id}, "
            f"wallet_balance={self.wallet_balance})>"
        )
