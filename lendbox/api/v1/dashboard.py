"""GET /v1/dashboard/* and /v1/activity - portfolio overview"""

from dataclasses import asdict
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from lendbox.api.dependencies import get_portfolio_service
from lendbox.api.v1.schemas import ActivityItemSchema, SummaryResponse, UpcomingRepaymentSchema
from lendbox.services.portfolio import PortfolioService

router = APIRouter()


@router.get("/dashboard/summary", response_model=SummaryResponse)
def get_summary(service: PortfolioService = Depends(get_portfolio_service)):
    return SummaryResponse(**asdict(service.portfolio_summary()))


@router.get("/dashboard/upcoming", response_model=List[UpcomingRepaymentSchema])
def get_upcoming_repayments(
    window_days: Optional[int] = Query(None, ge=0, description="Defaults to the configured reminder window"),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Installments of active loans due between today and the end of the window"""
    return [UpcomingRepaymentSchema.from_domain(r) for r in service.upcoming_repayments(window_days)]


@router.get("/activity", response_model=List[ActivityItemSchema])
def get_activity(
    limit: int = Query(50, ge=1, le=500),
    service: PortfolioService = Depends(get_portfolio_service),
):
    return [ActivityItemSchema.from_domain(item) for item in service.activity_log(limit=limit)]
