"""
Plan setting model.

Stores versioned compensation plan configuration as a JSON payload keyed by
feature (e.g. ``level_income_30``). Managed by configuration tooling; the
commission engine only reads the active row.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from levelpay.models.base import Base


class PlanSetting(Base):
    """Feature-keyed plan configuration."""

    __tablename__ = "plan_settings"

    id: Mapped[int] = mapped_column(primary_key=True)

    # level_income_30, ...
    feature_key: Mapped[str] = mapped_column(
        String(64), unique=True, index=True, nullable=False
    )
    feature_name: Mapped[str] = mapped_column(String(128), nullable=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, index=True, nullable=False
    )

    # Schedule body, validated by CommissionSchedule on load
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Bumped by configuration tooling on every payload change
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PlanSetting(id={self.id}, "
            f"feature_key={self.feature_key}, "
            f"is_active={self.is_active}, "
            f"version={self.version})>"
        )
