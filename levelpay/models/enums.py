"""
Model enumerations.
"""

from enum import StrEnum


class PayoutType(StrEnum):
    """Kind of commission a payout represents."""

    LEVEL_INCOME = "level_income"  # package purchase by a downline
    ROI_ON_ROI = "roi_on_roi"  # ROI credited to a downline


class ReferenceType(StrEnum):
    """Kind of event a payout's reference_id names."""

    PACKAGE_PURCHASE = "package_purchase"
    ROI_DISTRIBUTION = "roi_distribution"


class PackageStatus(StrEnum):
    """User package lifecycle status."""

    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PayoutStatus(StrEnum):
    """Payout / journal row status."""

    COMPLETED = "completed"


# Reference type paired with each payout type
REFERENCE_TYPE_FOR_PAYOUT = {
    PayoutType.LEVEL_INCOME: ReferenceType.PACKAGE_PURCHASE,
    PayoutType.ROI_ON_ROI: ReferenceType.ROI_DISTRIBUTION,
}
