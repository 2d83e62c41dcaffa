"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from lendbox.api.dependencies import get_clock, get_id_generator
from lendbox.api.main import create_app
from lendbox.domain.models import ClientData, InterestMethod, LoanData, LoanTerms, RepaymentCycle
from lendbox.infrastructure.database.models import Base
from lendbox.infrastructure.database.session import get_db
from lendbox.services.portfolio import PortfolioService
from lendbox.utils.ids import SequentialIdGenerator

# Fixed "now" so Due/Overdue classification is reproducible
NOW = datetime(2024, 6, 15, 10, 30)

# Test database
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def service(db: Session) -> PortfolioService:
    """Portfolio service with deterministic ids and clock"""
    return PortfolioService(db, id_generator=SequentialIdGenerator(), clock=fixed_clock)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()
    id_generator = SequentialIdGenerator()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_id_generator] = lambda: id_generator
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    return TestClient(app)


@pytest.fixture
def medium_risk_client_data() -> ClientData:
    """Unverified borrower with two missed payments (score ≈ 0.40, Medium)"""
    return ClientData(
        name="Ali Raza",
        email="aliraza@example.com",
        cnic="42201-1234567-1",
        phone="03001234567",
        monthly_income=45000,
        previous_loan_count=0,
        missed_payment_count=2,
        identity_verified=False,
        city="Karachi",
        occupation="Shopkeeper",
    )


@pytest.fixture
def monthly_loan_terms() -> LoanTerms:
    """3-month reducing-balance loan whose first due date is 5 days after NOW"""
    return LoanTerms(
        principal=30000,
        duration_months=3,
        annual_interest_rate=12,
        start_date=date(2024, 5, 20),
        interest_method=InterestMethod.REDUCING,
        repayment_cycle=RepaymentCycle.MONTHLY,
    )


@pytest.fixture
def loan_data(monthly_loan_terms: LoanTerms) -> LoanData:
    return LoanData(client_id="c1", loan_type="Business", terms=monthly_loan_terms)
