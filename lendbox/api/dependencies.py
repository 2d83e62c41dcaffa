"""Dependency injection for FastAPI endpoints"""

from datetime import datetime
from typing import Optional
from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from lendbox.config import settings
from lendbox.infrastructure.clients.events import EventClient
from lendbox.infrastructure.database.session import get_db
from lendbox.services.portfolio import Clock, PortfolioService
from lendbox.utils.ids import IdGenerator, UuidIdGenerator

_id_generator = UuidIdGenerator()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_id_generator() -> IdGenerator:
    return _id_generator


def get_clock() -> Clock:
    return datetime.now


def get_event_client() -> Optional[EventClient]:
    """Provide webhook client, or None when no subscriber is configured"""
    if not settings.event_webhook_url:
        return None
    return EventClient(settings.event_webhook_url)


def get_portfolio_service(
    db: Session = Depends(get_db),
    id_generator: IdGenerator = Depends(get_id_generator),
    clock: Clock = Depends(get_clock),
) -> PortfolioService:
    return PortfolioService(db, id_generator=id_generator, clock=clock)


def commit_and_dispatch(
    db: Session,
    service: PortfolioService,
    background_tasks: BackgroundTasks,
    event_client: Optional[EventClient],
) -> None:
    """Commit the unit of work, then hand queued events to the webhook"""
    db.commit()
    if event_client is not None:
        for event, payload in service.pending_events:
            background_tasks.add_task(event_client.send_event, event, payload)
    service.pending_events.clear()
