"""
Commission distribution.

Multi-level commission engine: level income on package purchases and
ROI-on-ROI on returns, paid up the sponsor chain.
"""

from levelpay.services.distribution.calculator import CommissionCalculator
from levelpay.services.distribution.chain_walker import SponsorChainWalker
from levelpay.services.distribution.eligibility import (
    Eligibility,
    EligibilityEvaluator,
    unlocked_levels,
)
from levelpay.services.distribution.ledger_writer import (
    CreditResult,
    CreditStatus,
    LedgerWriter,
)
from levelpay.services.distribution.orchestrator import (
    DistributionOrchestrator,
    distribute_on_purchase,
    distribute_on_return,
)
from levelpay.services.distribution.schedule import (
    CommissionSchedule,
    ConfigResolver,
)
from levelpay.services.distribution.summary import (
    DistributionState,
    DistributionSummary,
    LevelDetail,
    LevelOutcome,
)

__all__ = [
    "CommissionCalculator",
    "CommissionSchedule",
    "ConfigResolver",
    "CreditResult",
    "CreditStatus",
    "DistributionOrchestrator",
    "DistributionState",
    "DistributionSummary",
    "Eligibility",
    "EligibilityEvaluator",
    "LedgerWriter",
    "LevelDetail",
    "LevelOutcome",
    "SponsorChainWalker",
    "distribute_on_purchase",
    "distribute_on_return",
    "unlocked_levels",
]
