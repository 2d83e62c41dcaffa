"""Data access layer for portfolio entities"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from lendbox.infrastructure.database.models import (
    ActivityLogRecord,
    ClientRecord,
    CollectionRecord,
    InstallmentRecord,
    LoanProductRecord,
    LoanRecord,
)
from lendbox.domain.models import (
    ActivityKind,
    ActivityLogItem,
    Client,
    Collection,
    DurationPeriod,
    DurationType,
    Installment,
    InstallmentStatus,
    InterestCycle,
    InterestMethod,
    Loan,
    LoanProduct,
    LoanStatus,
    LoanTerms,
    RepaymentCycle,
    RiskTier,
)


def _client_from_record(record: ClientRecord) -> Client:
    return Client(
        id=record.id,
        name=record.name,
        email=record.email,
        cnic=record.cnic,
        phone=record.phone,
        address=record.address,
        city=record.city,
        occupation=record.occupation,
        monthly_income=record.monthly_income,
        previous_loan_count=record.previous_loan_count,
        missed_payment_count=record.missed_payment_count,
        identity_verified=record.identity_verified,
        risk_score=record.risk_score,
        risk_tier=RiskTier(record.risk_tier),
        created_at=record.created_at,
    )


def _loan_from_record(record: LoanRecord) -> Loan:
    terms = LoanTerms(
        principal=record.principal,
        duration_months=record.duration_months,
        annual_interest_rate=record.annual_interest_rate,
        start_date=record.start_date,
        interest_method=InterestMethod(record.interest_method),
        repayment_cycle=RepaymentCycle(record.repayment_cycle),
    )
    schedule = [
        Installment(
            installment_no=inst.installment_no,
            due_date=inst.due_date,
            amount=inst.amount,
            principal=inst.principal,
            interest=inst.interest,
            remaining_balance=inst.remaining_balance,
            status=InstallmentStatus(inst.status),
            paid_at=inst.paid_at,
        )
        for inst in record.installments
    ]
    return Loan(
        id=record.id,
        client_id=record.client_id,
        client_name=record.client_name,
        loan_type=record.loan_type,
        terms=terms,
        status=LoanStatus(record.status),
        repayment_schedule=schedule,
    )


def _collection_from_record(record: CollectionRecord) -> Collection:
    return Collection(
        id=record.id,
        loan_id=record.loan_id,
        client_name=record.client_name,
        installment_no=record.installment_no,
        amount_collected=record.amount_collected,
        collected_by=record.collected_by,
        collected_at=record.collected_at,
        remarks=record.remarks,
    )


def _product_from_record(record: LoanProductRecord) -> LoanProduct:
    return LoanProduct(
        id=record.id,
        title=record.title,
        description=record.description,
        min_principal=record.min_principal,
        max_principal=record.max_principal,
        duration_value=record.duration_value,
        duration_period=DurationPeriod(record.duration_period),
        duration_type=DurationType(record.duration_type),
        interest_method=InterestMethod(record.interest_method),
        interest_rate=record.interest_rate,
        interest_cycle=InterestCycle(record.interest_cycle),
        repayment_cycle=RepaymentCycle(record.repayment_cycle),
        created_at=record.created_at,
    )


class ClientRepository:
    """Repository for borrowers"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, client: Client) -> Client:
        """Persist a scored client"""
        record = ClientRecord(id=client.id, created_at=client.created_at)
        self._apply(record, client)
        self.db.add(record)
        self.db.flush()
        return _client_from_record(record)

    def update(self, client: Client) -> Optional[Client]:
        """Overwrite stored fields; returns None when the client does not exist"""
        record = self.db.get(ClientRecord, client.id)
        if record is None:
            return None
        self._apply(record, client)
        self.db.flush()
        return _client_from_record(record)

    def get(self, client_id: str) -> Optional[Client]:
        record = self.db.get(ClientRecord, client_id)
        return _client_from_record(record) if record else None

    def list(self) -> List[Client]:
        records = self.db.query(ClientRecord).order_by(ClientRecord.created_at, ClientRecord.id).all()
        return [_client_from_record(r) for r in records]

    def count(self) -> int:
        return self.db.query(func.count(ClientRecord.id)).scalar() or 0

    @staticmethod
    def _apply(record: ClientRecord, client: Client) -> None:
        record.name = client.name
        record.email = client.email
        record.cnic = client.cnic
        record.phone = client.phone
        record.address = client.address
        record.city = client.city
        record.occupation = client.occupation
        record.monthly_income = client.monthly_income
        record.previous_loan_count = client.previous_loan_count
        record.missed_payment_count = client.missed_payment_count
        record.identity_verified = client.identity_verified
        record.risk_score = client.risk_score
        record.risk_tier = client.risk_tier.value


class LoanRepository:
    """Repository for loans and their repayment schedules"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, loan: Loan, created_at: datetime) -> Loan:
        """Persist loan with its full installment schedule"""
        terms = loan.terms
        record = LoanRecord(
            id=loan.id,
            client_id=loan.client_id,
            client_name=loan.client_name,
            loan_type=loan.loan_type,
            principal=terms.principal,
            duration_months=terms.duration_months,
            annual_interest_rate=terms.annual_interest_rate,
            start_date=terms.start_date,
            interest_method=terms.interest_method.value,
            repayment_cycle=terms.repayment_cycle.value,
            status=loan.status.value,
            created_at=created_at,
        )
        for inst in loan.repayment_schedule:
            record.installments.append(
                InstallmentRecord(
                    installment_no=inst.installment_no,
                    due_date=inst.due_date,
                    amount=inst.amount,
                    principal=inst.principal,
                    interest=inst.interest,
                    remaining_balance=inst.remaining_balance,
                    status=inst.status.value,
                    paid_at=inst.paid_at,
                )
            )
        self.db.add(record)
        self.db.flush()
        return _loan_from_record(record)

    def get(self, loan_id: str) -> Optional[Loan]:
        record = self.db.get(LoanRecord, loan_id)
        return _loan_from_record(record) if record else None

    def list(self, client_id: Optional[str] = None) -> List[Loan]:
        query = self.db.query(LoanRecord)
        if client_id is not None:
            query = query.filter(LoanRecord.client_id == client_id)
        records = query.order_by(LoanRecord.created_at, LoanRecord.id).all()
        return [_loan_from_record(r) for r in records]

    def update_status(self, loan_id: str, status: LoanStatus) -> Optional[Loan]:
        record = self.db.get(LoanRecord, loan_id)
        if record is None:
            return None
        record.status = status.value
        self.db.flush()
        return _loan_from_record(record)

    def mark_installment_paid(self, loan_id: str, installment_no: int, paid_at: datetime) -> None:
        """Only status and paid_at ever change on a stored installment"""
        record = (
            self.db.query(InstallmentRecord)
            .filter(
                InstallmentRecord.loan_id == loan_id,
                InstallmentRecord.installment_no == installment_no,
            )
            .one()
        )
        record.status = InstallmentStatus.PAID.value
        record.paid_at = paid_at
        self.db.flush()


class CollectionRepository:
    """Repository for recorded collections"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, collection: Collection) -> Collection:
        record = CollectionRecord(
            id=collection.id,
            loan_id=collection.loan_id,
            client_name=collection.client_name,
            installment_no=collection.installment_no,
            amount_collected=collection.amount_collected,
            collected_by=collection.collected_by,
            collected_at=collection.collected_at,
            remarks=collection.remarks,
        )
        self.db.add(record)
        self.db.flush()
        return _collection_from_record(record)

    def list(self, loan_id: Optional[str] = None) -> List[Collection]:
        query = self.db.query(CollectionRecord)
        if loan_id is not None:
            query = query.filter(CollectionRecord.loan_id == loan_id)
        records = query.order_by(CollectionRecord.collected_at, CollectionRecord.id).all()
        return [_collection_from_record(r) for r in records]

    def total_collected(self) -> float:
        return self.db.query(func.coalesce(func.sum(CollectionRecord.amount_collected), 0.0)).scalar()


class LoanProductRepository:
    """Repository for the loan product catalog"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, product: LoanProduct) -> LoanProduct:
        record = LoanProductRecord(
            id=product.id,
            title=product.title,
            description=product.description,
            min_principal=product.min_principal,
            max_principal=product.max_principal,
            duration_value=product.duration_value,
            duration_period=product.duration_period.value,
            duration_type=product.duration_type.value,
            interest_method=product.interest_method.value,
            interest_rate=product.interest_rate,
            interest_cycle=product.interest_cycle.value,
            repayment_cycle=product.repayment_cycle.value,
            created_at=product.created_at,
        )
        self.db.add(record)
        self.db.flush()
        return _product_from_record(record)

    def get(self, product_id: str) -> Optional[LoanProduct]:
        record = self.db.get(LoanProductRecord, product_id)
        return _product_from_record(record) if record else None

    def list(self) -> List[LoanProduct]:
        records = self.db.query(LoanProductRecord).order_by(LoanProductRecord.created_at, LoanProductRecord.id).all()
        return [_product_from_record(r) for r in records]

    def delete(self, product_id: str) -> Optional[LoanProduct]:
        """Remove a product; returns what was deleted, or None when it does not exist"""
        record = self.db.get(LoanProductRecord, product_id)
        if record is None:
            return None
        product = _product_from_record(record)
        self.db.delete(record)
        self.db.flush()
        return product


class ActivityLogRepository:
    """Append-only activity log"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, item: ActivityLogItem) -> ActivityLogItem:
        last_seq = self.db.query(func.max(ActivityLogRecord.seq)).scalar() or 0
        record = ActivityLogRecord(
            id=item.id,
            seq=last_seq + 1,
            message=item.message,
            kind=item.kind.value,
            timestamp=item.timestamp,
        )
        self.db.add(record)
        self.db.flush()
        return item

    def list(self, limit: int = 50) -> List[ActivityLogItem]:
        """Most recent entries first"""
        records = (
            self.db.query(ActivityLogRecord)
            .order_by(ActivityLogRecord.seq.desc())
            .limit(limit)
            .all()
        )
        return [
            ActivityLogItem(
                id=r.id,
                message=r.message,
                timestamp=r.timestamp,
                kind=ActivityKind(r.kind),
            )
            for r in records
        ]
