"""/v1/clients - borrower CRUD with risk scoring"""

from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from lendbox.api.dependencies import commit_and_dispatch, get_event_client, get_portfolio_service
from lendbox.api.v1.schemas import ClientRequest, ClientResponse, EligibilityResponse, VerificationRequest
from lendbox.domain.eligibility import max_eligible_principal
from lendbox.domain.models import Client
from lendbox.infrastructure.clients.events import EventClient
from lendbox.infrastructure.database.session import get_db
from lendbox.services.portfolio import PortfolioService

router = APIRouter()


def _to_response(client: Client) -> ClientResponse:
    return ClientResponse.from_domain(
        client,
        max_eligible_principal=max_eligible_principal(client.monthly_income, client.risk_tier),
    )


@router.post("/clients", response_model=ClientResponse, status_code=201)
def create_client(
    request_body: ClientRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """Register a borrower; risk score and tier are derived from the credit profile"""
    client = service.add_client(request_body.to_domain())
    commit_and_dispatch(db, service, background_tasks, event_client)
    return _to_response(client)


@router.get("/clients", response_model=List[ClientResponse])
def list_clients(service: PortfolioService = Depends(get_portfolio_service)):
    return [_to_response(c) for c in service.list_clients()]


@router.get("/clients/{client_id}", response_model=ClientResponse)
def get_client(client_id: str, service: PortfolioService = Depends(get_portfolio_service)):
    return _to_response(service.get_client(client_id))


@router.get("/clients/{client_id}/eligibility", response_model=EligibilityResponse)
def get_client_eligibility(client_id: str, service: PortfolioService = Depends(get_portfolio_service)):
    """Advisory ceiling shown on the loan form; never enforced"""
    return EligibilityResponse(max_eligible_principal=service.client_eligibility(client_id))


@router.put("/clients/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: str,
    request_body: ClientRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """Replace borrower details and re-score"""
    client = service.update_client(client_id, request_body.to_domain())
    commit_and_dispatch(db, service, background_tasks, event_client)
    return _to_response(client)


@router.post("/clients/{client_id}/verification", response_model=ClientResponse)
def set_verification(
    client_id: str,
    request_body: VerificationRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """Toggle identity (KYC) verification; the risk tier follows"""
    client = service.set_identity_verification(client_id, request_body.identity_verified)
    commit_and_dispatch(db, service, background_tasks, event_client)
    return _to_response(client)
