"""Unit tests for the advisory eligibility ceiling"""

from lendbox.domain.eligibility import max_eligible_principal
from lendbox.domain.models import RiskTier


def test_max_eligible_principal_by_tier():
    """Test income multiplier per tier"""
    assert max_eligible_principal(10000, RiskTier.HIGH) == 20000
    assert max_eligible_principal(10000, RiskTier.MEDIUM) == 40000
    assert max_eligible_principal(10000, RiskTier.LOW) == 80000


def test_max_eligible_principal_unknown_tier_fallback():
    """Test unrecognised tier falls back to 5x income"""
    assert max_eligible_principal(10000, "Unrated") == 50000


def test_max_eligible_principal_zero_income():
    assert max_eligible_principal(0, RiskTier.LOW) == 0
