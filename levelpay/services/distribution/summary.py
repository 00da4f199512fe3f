"""
Distribution summary.

Per-run result of a commission distribution: one detail per level reached,
paid or skipped, plus the totals.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum
from typing import Any

from levelpay.config.constants import ZERO
from levelpay.models.enums import PayoutType


class DistributionState(StrEnum):
    """Lifecycle of a distribution run."""

    INIT = "init"
    RESOLVING_CONFIG = "resolving_config"
    WALKING = "walking"
    EVALUATING = "evaluating"
    CALCULATING = "calculating"
    CREDITING = "crediting"
    DONE = "done"
    FAILED = "failed"


class LevelOutcome(StrEnum):
    """What happened at one level."""

    PAID = "paid"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class LevelDetail:
    """Outcome of one level of the sponsor chain."""

    level: int
    recipient_id: int
    outcome: LevelOutcome
    amount: Decimal | None = None
    reason: str | None = None


@dataclass
class DistributionSummary:
    """Result of distributing one event up the sponsor chain."""

    payout_type: PayoutType
    event_ref: str
    source_user_id: int
    base_amount: Decimal
    success: bool = True
    error_message: str | None = None
    state: DistributionState = DistributionState.INIT
    details: list[LevelDetail] = field(default_factory=list)
    levels_paid: int = 0
    levels_skipped: int = 0
    total_amount: Decimal = ZERO
    max_amount: Decimal = ZERO

    def record_paid(
        self, level: int, recipient_id: int, amount: Decimal
    ) -> None:
        """Append a paid level and update the totals."""
        self.details.append(
            LevelDetail(
                level=level,
                recipient_id=recipient_id,
                outcome=LevelOutcome.PAID,
                amount=amount,
            )
        )
        self.levels_paid += 1
        self.total_amount += amount

    def record_skip(self, level: int, recipient_id: int, reason: str) -> None:
        """Append a skipped level."""
        self.details.append(
            LevelDetail(
                level=level,
                recipient_id=recipient_id,
                outcome=LevelOutcome.SKIPPED,
                reason=reason,
            )
        )
        self.levels_skipped += 1

    def fail(self, error_message: str) -> None:
        """Mark the whole run failed."""
        self.success = False
        self.error_message = error_message
        self.state = DistributionState.FAILED

    @property
    def paid_details(self) -> list[LevelDetail]:
        """Details of paid levels only."""
        return [d for d in self.details if d.outcome == LevelOutcome.PAID]

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation (amounts as strings)."""
        return {
            "payout_type": str(self.payout_type),
            "event_ref": self.event_ref,
            "source_user_id": self.source_user_id,
            "base_amount": str(self.base_amount),
            "success": self.success,
            "error_message": self.error_message,
            "state": str(self.state),
            "levels_paid": self.levels_paid,
            "levels_skipped": self.levels_skipped,
            "total_amount": str(self.total_amount),
            "max_amount": str(self.max_amount),
            "details": [
                {
                    "level": d.level,
                    "recipient_id": d.recipient_id,
                    "outcome": str(d.outcome),
                    "amount": str(d.amount) if d.amount is not None else None,
                    "reason": d.reason,
                }
                for d in self.details
            ],
        }
