"""
Commission engine constants.

Centralized constants for schedule limits, ledger precision and
per-level skip reasons.
"""

from decimal import Decimal

# ========================================================================
# SCHEDULE LIMITS
# ========================================================================

# Hard cap on traversable upline levels, regardless of schedule payload
MAX_COMMISSION_LEVELS = 30

# plan_settings.feature_key holding the level income schedule
LEVEL_INCOME_FEATURE_KEY = "level_income_30"

# ========================================================================
# MONEY
# ========================================================================

# Ledger columns are DECIMAL(18, 8)
MONEY_QUANTUM = Decimal("0.00000001")
ZERO = Decimal("0")

# ========================================================================
# SKIP REASONS (recorded in DistributionSummary.details)
# ========================================================================

REASON_NOT_FOUND = "not found"
REASON_NO_ACTIVE_PACKAGE = "no active package"
REASON_LEVEL_LOCKED = "level {level} requires {level} directs, has {directs}"
REASON_ZERO_PERCENTAGE = "zero percentage"
REASON_BELOW_MINIMUM = "below minimum package amount"
REASON_ALREADY_PAID = "already paid"
REASON_WRITE_FAILED = "write failed"
REASON_ZERO_AMOUNT = "amount rounds to zero"
