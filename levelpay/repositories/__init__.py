"""Data access layer."""

from levelpay.repositories.base import BaseRepository
from levelpay.repositories.payout_repository import PayoutRepository
from levelpay.repositories.plan_setting_repository import (
    PlanSettingRepository,
)
from levelpay.repositories.user_repository import UserRepository
from levelpay.repositories.wallet_transaction_repository import (
    WalletTransactionRepository,
)

__all__ = [
    "BaseRepository",
    "PayoutRepository",
    "PlanSettingRepository",
    "UserRepository",
    "WalletTransactionRepository",
]
