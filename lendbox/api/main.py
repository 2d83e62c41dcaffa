"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from lendbox.api.middleware import RequestIDMiddleware, MetricsMiddleware
from lendbox.api.v1 import calculator, clients, collections, dashboard, loans, products
from lendbox.config import settings
from lendbox.domain.exceptions import (
    ClientNotFoundError,
    DomainException,
    InstallmentAlreadyPaidError,
    InstallmentNotFoundError,
    InvalidLoanProductError,
    InvalidLoanTermsError,
    LoanNotFoundError,
    LoanProductNotFoundError,
)
from lendbox.infrastructure.database.session import init_db
from lendbox.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)

ERROR_STATUS = {
    ClientNotFoundError: 404,
    LoanNotFoundError: 404,
    InstallmentNotFoundError: 404,
    InstallmentAlreadyPaidError: 409,
    InvalidLoanTermsError: 422,
    LoanProductNotFoundError: 404,
    InvalidLoanProductError: 422,
}


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Translate domain errors; the request's session is closed uncommitted"""
    status_code = ERROR_STATUS.get(type(exc), 400)
    request_id = getattr(request.state, "request_id", "unknown")
    logging.warning(f"Request rejected: {exc}", extra={"request_id": request_id, "status": status_code})
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Lendbox Loan Engine",
        description="Risk scoring, eligibility, repayment schedules and portfolio administration",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(calculator.router, prefix="/v1", tags=["calculator"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(collections.router, prefix="/v1", tags=["collections"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(products.router, prefix="/v1", tags=["loan-products"])

    return app


init_db()
app = create_app()
