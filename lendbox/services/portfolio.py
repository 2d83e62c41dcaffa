"""Loan lifecycle coordination - clients, loans, repayments and collections"""

import logging
from collections import Counter
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from lendbox.config import settings
from lendbox.domain.eligibility import max_eligible_principal
from lendbox.domain.exceptions import (
    ClientNotFoundError,
    InstallmentAlreadyPaidError,
    InstallmentNotFoundError,
    InvalidLoanTermsError,
    LoanNotFoundError,
    LoanProductNotFoundError,
)
from lendbox.domain.installments import generate_schedule
from lendbox.domain.models import (
    ActivityKind,
    ActivityLogItem,
    Client,
    ClientData,
    Collection,
    InstallmentStatus,
    Loan,
    LoanData,
    LoanDefaults,
    LoanProduct,
    LoanProductData,
    LoanStatus,
    PortfolioSummary,
    UpcomingRepayment,
)
from lendbox.domain.scoring import assess
from lendbox.infrastructure.database.repositories import (
    ActivityLogRepository,
    ClientRepository,
    CollectionRepository,
    LoanProductRepository,
    LoanRepository,
)
from lendbox.infrastructure.observability.logging import (
    log_client_scored,
    log_loan_created,
    log_repayment_recorded,
)
from lendbox.infrastructure.observability.metrics import (
    record_client_scored,
    record_collection,
    record_loan_created,
)
from lendbox.utils.date_utils import days_from, today_from
from lendbox.utils.ids import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class PortfolioService:
    """
    Owns the client and loan collections.

    Every write runs the financial engine first (scoring on client changes,
    schedule generation on new loans), stores the derived fields alongside the
    record, appends to the activity log and queues an event for subscribers.
    Callers commit the session once an operation returns.
    """

    def __init__(
        self,
        db: Session,
        id_generator: Optional[IdGenerator] = None,
        clock: Optional[Clock] = None,
    ):
        self.clients = ClientRepository(db)
        self.loans = LoanRepository(db)
        self.collections = CollectionRepository(db)
        self.products = LoanProductRepository(db)
        self.activity = ActivityLogRepository(db)
        self.ids = id_generator or UuidIdGenerator()
        self.clock = clock or datetime.now
        self.pending_events: List[Tuple[str, Dict[str, Any]]] = []

    # --- Clients -------------------------------------------------------

    def add_client(self, data: ClientData) -> Client:
        """Score a new borrower and store them with their risk tier"""
        assessment = assess(data.credit_profile)
        client = Client(
            **vars(data),
            id=self.ids.next_id("c"),
            risk_score=assessment.score,
            risk_tier=assessment.tier,
            created_at=self.clock(),
        )
        client = self.clients.add(client)

        self._log(f"Created borrower {client.name}.", ActivityKind.CREATE)
        self._emit("client.created", {"client_id": client.id, "risk_tier": client.risk_tier.value})
        record_client_scored(client.risk_tier.value)
        log_client_scored(client.id, client.risk_score, client.risk_tier.value)
        return client

    def update_client(self, client_id: str, data: ClientData) -> Client:
        """Replace borrower details; the risk score follows the new credit profile"""
        existing = self.get_client(client_id)
        assessment = assess(data.credit_profile)
        client = Client(
            **vars(data),
            id=existing.id,
            risk_score=assessment.score,
            risk_tier=assessment.tier,
            created_at=existing.created_at,
        )
        client = self.clients.update(client)

        self._log(f"Updated profile for {client.name}.", ActivityKind.UPDATE)
        if client.risk_tier != existing.risk_tier:
            record_client_scored(client.risk_tier.value)
        log_client_scored(client.id, client.risk_score, client.risk_tier.value)
        return client

    def set_identity_verification(self, client_id: str, verified: bool) -> Client:
        """Toggle KYC verification and re-score"""
        existing = self.get_client(client_id)
        updated = replace(existing, identity_verified=verified)
        assessment = assess(updated.credit_profile)
        client = self.clients.update(replace(updated, risk_score=assessment.score, risk_tier=assessment.tier))

        status = "Verified" if verified else "Unverified"
        self._log(f"KYC status changed for client {client_id} to {status}.", ActivityKind.SECURITY)
        log_client_scored(client.id, client.risk_score, client.risk_tier.value)
        return client

    def get_client(self, client_id: str) -> Client:
        client = self.clients.get(client_id)
        if client is None:
            raise ClientNotFoundError(f"Client {client_id} not found")
        return client

    def list_clients(self) -> List[Client]:
        return self.clients.list()

    def client_eligibility(self, client_id: str) -> float:
        """Advisory principal ceiling for a stored borrower"""
        client = self.get_client(client_id)
        return max_eligible_principal(client.monthly_income, client.risk_tier)

    # --- Loans ---------------------------------------------------------

    def add_loan(self, data: LoanData) -> Loan:
        """
        Create a pending loan application with its repayment schedule.

        The schedule is generated once here and never recomputed; later
        changes only move installment statuses to Paid. The principal must
        fall within the configured loan amount range.
        """
        client = self.get_client(data.client_id)
        defaults = self.loan_defaults()
        if not defaults.min_loan_amount <= data.terms.principal <= defaults.max_loan_amount:
            raise InvalidLoanTermsError(
                f"Principal {data.terms.principal} is outside the allowed range "
                f"{defaults.min_loan_amount} to {defaults.max_loan_amount}"
            )
        now = self.clock()
        schedule = generate_schedule(data.terms, now=now)

        loan = Loan(
            id=self.ids.next_id("l"),
            client_id=client.id,
            client_name=client.name,
            loan_type=data.loan_type,
            terms=data.terms,
            status=LoanStatus.PENDING,
            repayment_schedule=schedule,
        )
        loan = self.loans.add(loan, created_at=now)

        self._log(f"New loan application created for {client.name}.", ActivityKind.CREATE)
        self._emit(
            "loan.created",
            {"loan_id": loan.id, "client_id": client.id, "principal": data.terms.principal},
        )
        record_loan_created(
            data.terms.interest_method.value,
            data.terms.repayment_cycle.value,
            data.terms.principal,
        )
        log_loan_created(loan.id, client.id, data.terms.principal, len(schedule), loan.total_payable)
        return loan

    def get_loan(self, loan_id: str) -> Loan:
        loan = self.loans.get(loan_id)
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return loan

    def list_loans(self, client_id: Optional[str] = None) -> List[Loan]:
        return self.loans.list(client_id=client_id)

    def update_loan_status(self, loan_id: str, status: LoanStatus) -> Loan:
        loan = self.loans.update_status(loan_id, status)
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")

        self._log(f"Loan {loan_id} status updated to {status.value}.", ActivityKind.UPDATE)
        self._emit("loan.status_changed", {"loan_id": loan_id, "status": status.value})
        return loan

    def loan_defaults(self) -> LoanDefaults:
        return LoanDefaults(
            min_loan_amount=settings.min_loan_amount,
            max_loan_amount=settings.max_loan_amount,
            default_interest_rate=settings.default_interest_rate,
            default_grace_period_days=settings.default_grace_period_days,
            default_penalty_rate=settings.default_penalty_rate,
        )

    # --- Loan products -------------------------------------------------

    def add_loan_product(self, data: LoanProductData) -> LoanProduct:
        product = LoanProduct(**vars(data), id=self.ids.next_id("lp"), created_at=self.clock())
        product = self.products.add(product)
        self._log(f"Created loan product {product.title}.", ActivityKind.CREATE)
        return product

    def get_loan_product(self, product_id: str) -> LoanProduct:
        product = self.products.get(product_id)
        if product is None:
            raise LoanProductNotFoundError(f"Loan product {product_id} not found")
        return product

    def list_loan_products(self) -> List[LoanProduct]:
        return self.products.list()

    def delete_loan_product(self, product_id: str) -> LoanProduct:
        """Remove a product from the catalog; existing loans are unaffected"""
        product = self.products.delete(product_id)
        if product is None:
            raise LoanProductNotFoundError(f"Loan product {product_id} not found")
        self._log(f"Deleted loan product {product.title}.", ActivityKind.DELETE)
        return product

    # --- Repayments ----------------------------------------------------

    def mark_repayment_paid(self, loan_id: str, installment_no: int) -> Loan:
        """Settle an installment for its scheduled amount and record the collection"""
        loan = self.get_loan(loan_id)
        installment = self._unpaid_installment(loan, installment_no)

        self._record_collection(
            loan,
            installment_no,
            amount=installment.amount,
            collected_by=settings.default_collector,
            remarks="Marked as paid from Dashboard",
        )
        loan = self._settle(loan, installment_no)
        self._log(f"Payment received for Loan {loan_id}, Installment #{installment_no}.", ActivityKind.PAYMENT)
        return loan

    def add_collection(
        self,
        loan_id: str,
        installment_no: int,
        amount_collected: float,
        collected_by: str,
        remarks: str = "",
    ) -> Collection:
        """Log a field collection and settle the installment it was taken against"""
        loan = self.get_loan(loan_id)
        self._unpaid_installment(loan, installment_no)

        collection = self._record_collection(
            loan,
            installment_no,
            amount=amount_collected,
            collected_by=collected_by,
            remarks=remarks,
        )
        self._settle(loan, installment_no)
        self._log(f"Collection logged: {amount_collected} for Loan {loan_id}.", ActivityKind.PAYMENT)
        return collection

    def list_collections(self, loan_id: Optional[str] = None) -> List[Collection]:
        return self.collections.list(loan_id=loan_id)

    # --- Dashboard -----------------------------------------------------

    def upcoming_repayments(self, window_days: Optional[int] = None) -> List[UpcomingRepayment]:
        """Due installments of active loans falling within the reminder window"""
        if window_days is None:
            window_days = settings.upcoming_window_days
        today = today_from(self.clock())
        horizon = days_from(today, window_days)

        reminders = [
            UpcomingRepayment(
                loan_id=loan.id,
                installment_no=inst.installment_no,
                client_name=loan.client_name,
                due_date=inst.due_date,
                amount=inst.amount,
            )
            for loan in self.loans.list()
            if loan.status == LoanStatus.ACTIVE
            for inst in loan.repayment_schedule
            if inst.status == InstallmentStatus.DUE and today <= inst.due_date <= horizon
        ]
        return sorted(reminders, key=lambda r: r.due_date)

    def portfolio_summary(self) -> PortfolioSummary:
        loans = self.loans.list()
        status_counts = Counter(loan.status.value for loan in loans)
        overdue = sum(
            1
            for loan in loans
            for inst in loan.repayment_schedule
            if inst.status == InstallmentStatus.OVERDUE
        )
        return PortfolioSummary(
            client_count=self.clients.count(),
            loan_count=len(loans),
            total_principal=sum(loan.terms.principal for loan in loans),
            active_loans=status_counts.get(LoanStatus.ACTIVE.value, 0),
            defaulted_loans=status_counts.get(LoanStatus.DEFAULT.value, 0),
            status_counts=dict(status_counts),
            total_collected=self.collections.total_collected(),
            overdue_installments=overdue,
        )

    def activity_log(self, limit: int = 50) -> List[ActivityLogItem]:
        return self.activity.list(limit=limit)

    # --- Internals -----------------------------------------------------

    def _unpaid_installment(self, loan: Loan, installment_no: int):
        installment = loan.installment(installment_no)
        if installment is None:
            raise InstallmentNotFoundError(f"Loan {loan.id} has no installment #{installment_no}")
        if installment.status == InstallmentStatus.PAID:
            raise InstallmentAlreadyPaidError(f"Installment #{installment_no} of loan {loan.id} is already paid")
        return installment

    def _record_collection(
        self,
        loan: Loan,
        installment_no: int,
        amount: float,
        collected_by: str,
        remarks: str,
    ) -> Collection:
        collection = Collection(
            id=self.ids.next_id("col"),
            loan_id=loan.id,
            client_name=loan.client_name,
            installment_no=installment_no,
            amount_collected=amount,
            collected_by=collected_by,
            collected_at=self.clock(),
            remarks=remarks,
        )
        record_collection(amount)
        return self.collections.add(collection)

    def _settle(self, loan: Loan, installment_no: int) -> Loan:
        """Mark an installment paid; the loan is Paid once nothing is outstanding"""
        self.loans.mark_installment_paid(loan.id, installment_no, paid_at=self.clock())
        loan = self.get_loan(loan.id)

        settled = all(inst.status == InstallmentStatus.PAID for inst in loan.repayment_schedule)
        if settled and loan.status != LoanStatus.PAID:
            loan = self.loans.update_status(loan.id, LoanStatus.PAID)
            self._log(f"Loan {loan.id} fully repaid.", ActivityKind.SYSTEM)

        installment = loan.installment(installment_no)
        log_repayment_recorded(loan.id, installment_no, installment.amount, settled)
        self._emit(
            "installment.paid",
            {"loan_id": loan.id, "installment_no": installment_no, "loan_settled": settled},
        )
        return loan

    def _log(self, message: str, kind: ActivityKind) -> None:
        self.activity.add(
            ActivityLogItem(
                id=self.ids.next_id("log"),
                message=message,
                timestamp=self.clock(),
                kind=kind,
            )
        )

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        self.pending_events.append((event, payload))
