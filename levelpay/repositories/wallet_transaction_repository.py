"""
Wallet transaction repository.

Data access layer for WalletTransaction model.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from levelpay.models.wallet_transaction import WalletTransaction
from levelpay.repositories.base import BaseRepository


class WalletTransactionRepository(BaseRepository[WalletTransaction]):
    """Wallet journal repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize wallet transaction repository."""
        super().__init__(WalletTransaction, session)
