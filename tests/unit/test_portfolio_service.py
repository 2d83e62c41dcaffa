"""Unit tests for loan lifecycle coordination"""

import pytest
from dataclasses import replace
from datetime import date, datetime
from lendbox.domain.exceptions import (
    ClientNotFoundError,
    InstallmentAlreadyPaidError,
    InstallmentNotFoundError,
    InvalidLoanProductError,
    InvalidLoanTermsError,
    LoanNotFoundError,
    LoanProductNotFoundError,
)
from lendbox.domain.models import (
    ActivityKind,
    ClientData,
    InstallmentStatus,
    LoanData,
    LoanProductData,
    LoanStatus,
    LoanTerms,
    RepaymentCycle,
    RiskTier,
)
from lendbox.services.portfolio import PortfolioService

NOW = datetime(2024, 6, 15, 10, 30)


def test_add_client_scores_and_logs(service: PortfolioService, medium_risk_client_data: ClientData):
    """Test new client gets id, risk fields and an activity entry"""
    client = service.add_client(medium_risk_client_data)

    assert client.id == "c1"
    assert client.risk_tier == RiskTier.MEDIUM
    assert client.risk_score == pytest.approx(0.4013, abs=1e-4)
    assert client.created_at == NOW

    log = service.activity_log()
    assert log[0].message == "Created borrower Ali Raza."
    assert log[0].kind == ActivityKind.CREATE
    assert ("client.created", {"client_id": "c1", "risk_tier": "Medium"}) in service.pending_events


def test_identity_verification_rescores(service: PortfolioService, medium_risk_client_data: ClientData):
    """Test toggling KYC updates score and tier together"""
    service.add_client(medium_risk_client_data)

    verified = service.set_identity_verification("c1", True)
    assert verified.identity_verified is True
    assert verified.risk_tier == RiskTier.LOW
    assert service.get_client("c1").risk_tier == RiskTier.LOW

    unverified = service.set_identity_verification("c1", False)
    assert unverified.risk_tier == RiskTier.MEDIUM
    assert service.activity_log()[0].kind == ActivityKind.SECURITY


def test_update_client_rescores(service: PortfolioService, medium_risk_client_data: ClientData):
    """Test credit profile changes flow into the stored risk fields"""
    service.add_client(medium_risk_client_data)

    # -2.0 + 0.2*6 + 0.8*3 = 1.6 → ≈ 0.83
    worse = replace(medium_risk_client_data, previous_loan_count=6, missed_payment_count=3, city="Lahore")
    client = service.update_client("c1", worse)

    assert client.risk_tier == RiskTier.HIGH
    assert client.city == "Lahore"
    assert client.created_at == NOW


def test_unknown_client(service: PortfolioService, medium_risk_client_data: ClientData):
    with pytest.raises(ClientNotFoundError):
        service.get_client("missing")
    with pytest.raises(ClientNotFoundError):
        service.update_client("missing", medium_risk_client_data)


def test_client_eligibility(service: PortfolioService, medium_risk_client_data: ClientData):
    """Test ceiling uses stored income and tier (Medium → 4x)"""
    service.add_client(medium_risk_client_data)
    assert service.client_eligibility("c1") == 180000


def test_add_loan_generates_schedule(
    service: PortfolioService,
    medium_risk_client_data: ClientData,
    loan_data: LoanData,
):
    """Test loan is stored Pending with its full schedule"""
    service.add_client(medium_risk_client_data)
    loan = service.add_loan(loan_data)

    assert loan.id == "l1"
    assert loan.status == LoanStatus.PENDING
    assert loan.client_name == "Ali Raza"
    assert [inst.due_date for inst in loan.repayment_schedule] == [
        date(2024, 6, 20),
        date(2024, 7, 20),
        date(2024, 8, 20),
    ]
    assert sum(inst.principal for inst in loan.repayment_schedule) == pytest.approx(30000)
    assert loan.repayment_schedule[-1].remaining_balance == 0

    stored = service.get_loan("l1")
    assert stored.repayment_schedule == loan.repayment_schedule
    assert stored.terms == loan_data.terms


def test_add_loan_classifies_past_installments(service: PortfolioService, medium_risk_client_data: ClientData):
    """Test schedule status is evaluated against the service clock"""
    service.add_client(medium_risk_client_data)
    terms = LoanTerms(principal=12000, duration_months=6, annual_interest_rate=10, start_date=date(2024, 3, 1))
    loan = service.add_loan(LoanData(client_id="c1", loan_type="Personal", terms=terms))

    statuses = [inst.status for inst in loan.repayment_schedule]
    # Due 04-01 and 05-01 and 06-01 are before 2024-06-15
    assert statuses[:3] == [InstallmentStatus.OVERDUE] * 3
    assert statuses[3:] == [InstallmentStatus.DUE] * 3
    assert service.portfolio_summary().overdue_installments == 3


def test_add_loan_unknown_client(service: PortfolioService, loan_data: LoanData):
    with pytest.raises(ClientNotFoundError):
        service.add_loan(loan_data)


def test_mark_repayment_paid(service: PortfolioService, medium_risk_client_data: ClientData, loan_data: LoanData):
    """Test paying an installment records a collection for its amount"""
    service.add_client(medium_risk_client_data)
    created = service.add_loan(loan_data)
    service.update_loan_status("l1", LoanStatus.ACTIVE)

    loan = service.mark_repayment_paid("l1", 1)

    paid = loan.installment(1)
    assert paid.status == InstallmentStatus.PAID
    assert paid.paid_at == NOW
    assert paid.amount == created.installment(1).amount
    assert loan.status == LoanStatus.ACTIVE

    collections = service.list_collections()
    assert len(collections) == 1
    assert collections[0].amount_collected == pytest.approx(paid.amount)
    assert collections[0].collected_by == "System"
    assert service.activity_log()[0].message == "Payment received for Loan l1, Installment #1."


def test_paying_all_installments_settles_loan(
    service: PortfolioService,
    medium_risk_client_data: ClientData,
    loan_data: LoanData,
):
    service.add_client(medium_risk_client_data)
    service.add_loan(loan_data)
    service.update_loan_status("l1", LoanStatus.ACTIVE)

    for installment_no in (1, 2, 3):
        loan = service.mark_repayment_paid("l1", installment_no)

    assert loan.status == LoanStatus.PAID
    assert all(inst.status == InstallmentStatus.PAID for inst in loan.repayment_schedule)
    assert service.portfolio_summary().total_collected == pytest.approx(loan.total_payable)


def test_repayment_errors(service: PortfolioService, medium_risk_client_data: ClientData, loan_data: LoanData):
    service.add_client(medium_risk_client_data)
    service.add_loan(loan_data)
    service.mark_repayment_paid("l1", 1)

    with pytest.raises(InstallmentAlreadyPaidError):
        service.mark_repayment_paid("l1", 1)
    with pytest.raises(InstallmentNotFoundError):
        service.mark_repayment_paid("l1", 4)
    with pytest.raises(LoanNotFoundError):
        service.mark_repayment_paid("l404", 1)


def test_add_collection(service: PortfolioService, medium_risk_client_data: ClientData, loan_data: LoanData):
    """Test field collection settles the installment and keeps collector details"""
    service.add_client(medium_risk_client_data)
    service.add_loan(loan_data)

    collection = service.add_collection("l1", 2, 10000, collected_by="Kyle Reese", remarks="Cash at shop")

    assert collection.id == "col1"
    assert collection.collected_by == "Kyle Reese"
    assert collection.client_name == "Ali Raza"
    assert service.get_loan("l1").installment(2).status == InstallmentStatus.PAID
    assert service.get_loan("l1").installment(1).status == InstallmentStatus.DUE


def test_upcoming_repayments(service: PortfolioService, medium_risk_client_data: ClientData, loan_data: LoanData):
    """Test only Due installments of Active loans inside the window are listed"""
    service.add_client(medium_risk_client_data)
    service.add_loan(loan_data)

    # Pending loans are not reminded
    assert service.upcoming_repayments(7) == []

    service.update_loan_status("l1", LoanStatus.ACTIVE)
    upcoming = service.upcoming_repayments(7)

    assert len(upcoming) == 1
    assert upcoming[0].loan_id == "l1"
    assert upcoming[0].installment_no == 1
    assert upcoming[0].due_date == date(2024, 6, 20)
    assert service.upcoming_repayments(3) == []
    assert len(service.upcoming_repayments(40)) == 2

    service.mark_repayment_paid("l1", 1)
    assert service.upcoming_repayments(7) == []


def test_portfolio_summary(service: PortfolioService, medium_risk_client_data: ClientData, loan_data: LoanData):
    service.add_client(medium_risk_client_data)
    service.add_loan(loan_data)
    once_terms = replace(loan_data.terms, principal=5000, repayment_cycle=RepaymentCycle.ONCE)
    service.add_loan(LoanData(client_id="c1", loan_type="Education", terms=once_terms))
    service.update_loan_status("l1", LoanStatus.ACTIVE)
    service.update_loan_status("l2", LoanStatus.DEFAULT)

    summary = service.portfolio_summary()

    assert summary.client_count == 1
    assert summary.loan_count == 2
    assert summary.total_principal == 35000
    assert summary.active_loans == 1
    assert summary.defaulted_loans == 1
    assert summary.status_counts == {"Active": 1, "Default": 1}
    assert summary.total_collected == 0


def test_activity_log_newest_first(service: PortfolioService, medium_risk_client_data: ClientData, loan_data: LoanData):
    service.add_client(medium_risk_client_data)
    service.add_loan(loan_data)
    service.update_loan_status("l1", LoanStatus.APPROVED)

    messages = [item.message for item in service.activity_log()]
    assert messages == [
        "Loan l1 status updated to Approved.",
        "New loan application created for Ali Raza.",
        "Created borrower Ali Raza.",
    ]
    assert len(service.activity_log(limit=1)) == 1


def test_add_loan_outside_amount_range(service: PortfolioService, medium_risk_client_data: ClientData, loan_data: LoanData):
    """Test principal must sit inside the configured min/max loan amount"""
    service.add_client(medium_risk_client_data)

    for principal in (999, 500001):
        terms = replace(loan_data.terms, principal=principal)
        with pytest.raises(InvalidLoanTermsError):
            service.add_loan(LoanData(client_id="c1", loan_type="Business", terms=terms))

    assert service.list_loans() == []


def test_loan_defaults(service: PortfolioService):
    defaults = service.loan_defaults()

    assert defaults.min_loan_amount == 1000
    assert defaults.max_loan_amount == 500000
    assert defaults.default_interest_rate == 12


def test_loan_product_catalog(service: PortfolioService):
    """Test products are listed in creation order and deletion is logged"""
    starter = service.add_loan_product(
        LoanProductData(title="Starter Business", min_principal=5000, max_principal=50000, duration_value=12, interest_rate=14)
    )
    service.add_loan_product(
        LoanProductData(title="Bullet Education", min_principal=10000, max_principal=100000, duration_value=6, interest_rate=10)
    )

    assert starter.id == "lp1"
    assert starter.created_at == NOW
    assert [p.title for p in service.list_loan_products()] == ["Starter Business", "Bullet Education"]
    assert service.get_loan_product("lp1") == starter

    deleted = service.delete_loan_product("lp1")

    assert deleted.title == "Starter Business"
    assert [p.id for p in service.list_loan_products()] == ["lp2"]
    log = service.activity_log()
    assert log[0].message == "Deleted loan product Starter Business."
    assert log[0].kind == ActivityKind.DELETE
    assert log[1].message == "Created loan product Bullet Education."


def test_loan_product_errors(service: PortfolioService):
    with pytest.raises(LoanProductNotFoundError):
        service.delete_loan_product("lp404")
    with pytest.raises(LoanProductNotFoundError):
        service.get_loan_product("lp404")
    with pytest.raises(InvalidLoanProductError):
        LoanProductData(title="Inverted", min_principal=50000, max_principal=5000, duration_value=12, interest_rate=14)
    with pytest.raises(InvalidLoanProductError):
        LoanProductData(title=" ", min_principal=5000, max_principal=50000, duration_value=12, interest_rate=14)


def test_settling_loan_logs_system_entry(
    service: PortfolioService,
    medium_risk_client_data: ClientData,
    loan_data: LoanData,
):
    service.add_client(medium_risk_client_data)
    service.add_loan(loan_data)
    for installment_no in (1, 2, 3):
        service.mark_repayment_paid("l1", installment_no)

    system_entries = [item for item in service.activity_log() if item.kind == ActivityKind.SYSTEM]
    assert [item.message for item in system_entries] == ["Loan l1 fully repaid."]
