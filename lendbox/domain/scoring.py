"""Risk scoring engine - default probability and risk tier for a borrower"""

import math
from lendbox.domain.models import CreditProfile, RiskAssessment, RiskTier

# Logistic regression coefficients
INTERCEPT = -2.0
PREVIOUS_LOANS_WEIGHT = 0.2
MISSED_PAYMENTS_WEIGHT = 0.8
IDENTITY_VERIFIED_WEIGHT = -1.0

HIGH_RISK_THRESHOLD = 0.6
MEDIUM_RISK_THRESHOLD = 0.25


def score(profile: CreditProfile) -> float:
    """
    Calculate default probability from 0.0 (lowest risk) to 1.0 (highest risk).

    Logit terms:
    - every previous loan adds a little risk
    - every missed payment adds a lot of risk
    - a verified identity lowers risk

    Counts are not validated; zero values are the common new-borrower case.
    """
    logit = (
        INTERCEPT
        + PREVIOUS_LOANS_WEIGHT * profile.previous_loan_count
        + MISSED_PAYMENTS_WEIGHT * profile.missed_payment_count
        + IDENTITY_VERIFIED_WEIGHT * (1 if profile.identity_verified else 0)
    )
    return 1 / (1 + math.exp(-logit))


def tier_of(probability: float) -> RiskTier:
    """
    Map default probability to a risk tier.

    Bands (lower bound exclusive):
    - > 0.6:        High
    - > 0.25, ≤0.6: Medium
    - ≤ 0.25:       Low
    """
    if probability > HIGH_RISK_THRESHOLD:
        return RiskTier.HIGH
    elif probability > MEDIUM_RISK_THRESHOLD:
        return RiskTier.MEDIUM
    else:
        return RiskTier.LOW


def assess(profile: CreditProfile) -> RiskAssessment:
    """Score a profile and pair the probability with its tier"""
    probability = score(profile)
    return RiskAssessment(score=probability, tier=tier_of(probability))
