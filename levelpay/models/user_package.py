"""
UserPackage model.

A package bought by a user. A user is "active" while at least one of their
packages has status ``active``.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from levelpay.models.base import Base
from levelpay.models.enums import PackageStatus
from levelpay.models.types import MoneyType


class UserPackage(Base):
    """Package held by a user."""

    __tablename__ = "user_packages"
    __table_args__ = (
        Index("idx_user_packages_user_status", "user_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    package_ref: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=PackageStatus.ACTIVE, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<UserPackage(id={self.id}, user_id={self.user_id}, "
            f"package_ref={self.package_ref}, status={self.status})>"
        )
