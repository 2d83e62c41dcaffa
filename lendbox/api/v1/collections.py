"""/v1/collections - field collections against installments"""

from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from lendbox.api.dependencies import commit_and_dispatch, get_event_client, get_portfolio_service
from lendbox.api.v1.schemas import CollectionRequest, CollectionResponse
from lendbox.infrastructure.clients.events import EventClient
from lendbox.infrastructure.database.session import get_db
from lendbox.services.portfolio import PortfolioService

router = APIRouter()


@router.post("/collections", response_model=CollectionResponse, status_code=201)
def create_collection(
    request_body: CollectionRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    service: PortfolioService = Depends(get_portfolio_service),
    event_client: Optional[EventClient] = Depends(get_event_client),
):
    """Record a collection; the installment it covers becomes Paid"""
    collection = service.add_collection(
        loan_id=request_body.loan_id,
        installment_no=request_body.installment_no,
        amount_collected=request_body.amount_collected,
        collected_by=request_body.collected_by,
        remarks=request_body.remarks,
    )
    commit_and_dispatch(db, service, background_tasks, event_client)
    return CollectionResponse.from_domain(collection)


@router.get("/collections", response_model=List[CollectionResponse])
def list_collections(
    loan_id: Optional[str] = Query(None),
    service: PortfolioService = Depends(get_portfolio_service),
):
    return [CollectionResponse.from_domain(c) for c in service.list_collections(loan_id=loan_id)]
