"""/v1/loan-products and /v1/settings/loan-defaults - loan catalog and application defaults"""

from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Response
from sqlalchemy.orm import Session

from lendbox.api.dependencies import commit_and_dispatch, get_event_client, get_portfolio_service
from lendbox.api.v1.schemas import LoanDefaultsResponse, LoanProductRequest, LoanProductResponse
from lendbox.infrastructure.clients.events import EventClient
from lendbox.infrastructure.database.session import get_db
from lendbox.services.portfolio import PortfolioService

router = APIRouter()


@router.post("/loan-products", response_model=LoanProductResponse, status_code=201)
def create_loan_product(
    request_body: LoanProductRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """Add a product to the catalog (min principal must not exceed max)"""
    product = service.add_loan_product(request_body.to_domain())
    commit_and_dispatch(db, service, background_tasks, event_client)
    return LoanProductResponse.from_domain(product)


@router.get("/loan-products", response_model=List[LoanProductResponse])
def list_loan_products(service: PortfolioService = Depends(get_portfolio_service)):
    return [LoanProductResponse.from_domain(p) for p in service.list_loan_products()]


@router.get("/loan-products/{product_id}", response_model=LoanProductResponse)
def get_loan_product(product_id: str, service: PortfolioService = Depends(get_portfolio_service)):
    return LoanProductResponse.from_domain(service.get_loan_product(product_id))


@router.delete("/loan-products/{product_id}", status_code=204)
def delete_loan_product(
    product_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    service.delete_loan_product(product_id)
    commit_and_dispatch(db, service, background_tasks, event_client)
    return Response(status_code=204)


@router.get("/settings/loan-defaults", response_model=LoanDefaultsResponse)
def get_loan_defaults(service: PortfolioService = Depends(get_portfolio_service)):
    """Amount range and default rate applied to new loan applications"""
    return LoanDefaultsResponse.from_domain(service.loan_defaults())
