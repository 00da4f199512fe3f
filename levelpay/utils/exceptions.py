"""
Commission engine exceptions.

Only ConfigMissing ever fails a whole distribution run; every other
condition is captured per level in the DistributionSummary.
"""


class DistributionError(Exception):
    """Base class for commission distribution errors."""
    pass


class ConfigMissing(DistributionError):
    """Raised when no valid active commission schedule can be loaded."""

    def __init__(self, feature_key: str, detail: str) -> None:
        self.feature_key = feature_key
        self.detail = detail
        super().__init__(f"Commission schedule '{feature_key}' unavailable: {detail}")


class LedgerWriteError(DistributionError):
    """Raised inside a ledger transaction to force its rollback."""
    pass
