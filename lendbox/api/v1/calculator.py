"""POST /v1/calculator/* - stateless access to the loan financial engine"""

from fastapi import APIRouter, Depends

from lendbox.api.dependencies import get_clock
from lendbox.api.v1.schemas import (
    CreditProfileSchema,
    EligibilityRequest,
    EligibilityResponse,
    LoanTermsSchema,
    RiskResponse,
    ScheduleResponse,
)
from lendbox.domain.eligibility import max_eligible_principal
from lendbox.domain.installments import generate_schedule
from lendbox.domain.scoring import assess
from lendbox.services.portfolio import Clock

router = APIRouter()


@router.post("/calculator/risk", response_model=RiskResponse)
def calculate_risk(profile: CreditProfileSchema):
    """Default probability and risk tier for a credit profile"""
    assessment = assess(profile.to_domain())
    return RiskResponse(score=assessment.score, tier=assessment.tier)


@router.post("/calculator/eligibility", response_model=EligibilityResponse)
def calculate_eligibility(request_body: EligibilityRequest):
    """Advisory loan ceiling for an income and tier"""
    return EligibilityResponse(
        max_eligible_principal=max_eligible_principal(request_body.monthly_income, request_body.tier)
    )


@router.post("/calculator/schedule", response_model=ScheduleResponse)
def preview_schedule(terms: LoanTermsSchema, clock: Clock = Depends(get_clock)):
    """
    Preview the repayment schedule a loan would get, without storing anything.

    Returns:
        Installments plus totals for the "total payable" display
    """
    schedule = generate_schedule(terms.to_terms(), now=clock())
    return ScheduleResponse.from_schedule(schedule)
