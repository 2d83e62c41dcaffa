"""/v1/loans - loan applications, status workflow and repayments"""

from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from lendbox.api.dependencies import commit_and_dispatch, get_event_client, get_portfolio_service
from lendbox.api.v1.schemas import LoanCreateRequest, LoanResponse, LoanStatusRequest
from lendbox.domain.models import LoanData
from lendbox.infrastructure.clients.events import EventClient
from lendbox.infrastructure.database.session import get_db
from lendbox.services.portfolio import PortfolioService

router = APIRouter()


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(
    request_body: LoanCreateRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """
    Create a loan application for an existing client.

    Flow:
    1. Validate terms (principal within the configured loan amount range,
       duration 1 to 1200 months, rate 0 to 1000%)
    2. Generate the repayment schedule
    3. Persist loan as Pending with its schedule
    4. Queue loan.created event
    """
    loan = service.add_loan(
        LoanData(
            client_id=request_body.client_id,
            loan_type=request_body.loan_type,
            terms=request_body.to_terms(),
        )
    )
    commit_and_dispatch(db, service, background_tasks, event_client)
    return LoanResponse.from_domain(loan)


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(
    client_id: Optional[str] = Query(None, description="Only loans of this client"),
    service: PortfolioService = Depends(get_portfolio_service),
):
    return [LoanResponse.from_domain(loan) for loan in service.list_loans(client_id=client_id)]


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: str, service: PortfolioService = Depends(get_portfolio_service)):
    return LoanResponse.from_domain(service.get_loan(loan_id))


@router.patch("/loans/{loan_id}/status", response_model=LoanResponse)
def update_loan_status(
    loan_id: str,
    request_body: LoanStatusRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """Move a loan through its workflow (approve, activate, default, ...)"""
    loan = service.update_loan_status(loan_id, request_body.status)
    commit_and_dispatch(db, service, background_tasks, event_client)
    return LoanResponse.from_domain(loan)


@router.post("/loans/{loan_id}/installments/{installment_no}/pay", response_model=LoanResponse)
def pay_installment(
    loan_id: str,
    installment_no: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """Mark an installment as paid for its scheduled amount"""
    loan = service.mark_repayment_paid(loan_id, installment_no)
    commit_and_dispatch(db, service, background_tasks, event_client)
    return LoanResponse.from_domain(loan)
