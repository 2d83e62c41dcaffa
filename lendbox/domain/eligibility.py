"""Advisory loan ceiling derived from income and risk tier"""

from typing import Dict
from lendbox.domain.models import RiskTier

TIER_MULTIPLIERS: Dict[RiskTier, int] = {
    RiskTier.HIGH: 2,
    RiskTier.MEDIUM: 4,
    RiskTier.LOW: 8,
}

DEFAULT_MULTIPLIER = 5


def max_eligible_principal(monthly_income: float, tier: RiskTier) -> float:
    """
    Maximum principal a borrower should be offered, as a multiple of monthly income.

    Display only - a submitted loan amount is never rejected against this.
    Unrecognised tiers fall back to 5x income.
    """
    multiplier = TIER_MULTIPLIERS.get(tier, DEFAULT_MULTIPLIER)
    return monthly_income * multiplier
