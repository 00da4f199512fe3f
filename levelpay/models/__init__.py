"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from levelpay.models.base import Base
from levelpay.models.enums import (
    PackageStatus,
    PayoutStatus,
    PayoutType,
    ReferenceType,
)
from levelpay.models.payout import Payout
from levelpay.models.plan_setting import PlanSetting
from levelpay.models.user import User
from levelpay.models.user_package import UserPackage
from levelpay.models.wallet_transaction import WalletTransaction

__all__ = [
    # Base
    "Base",
    # Enums
    "PackageStatus",
    "PayoutStatus",
    "PayoutType",
    "ReferenceType",
    # Core Models
    "User",
    "UserPackage",
    "PlanSetting",
    # Ledger Models
    "Payout",
    "WalletTransaction",
]
