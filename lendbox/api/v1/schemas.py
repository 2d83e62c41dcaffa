"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional

from lendbox.config import settings
from lendbox.domain.models import (
    ActivityLogItem,
    Client,
    ClientData,
    Collection,
    CreditProfile,
    DurationPeriod,
    DurationType,
    Installment,
    InstallmentStatus,
    InterestCycle,
    InterestMethod,
    Loan,
    LoanDefaults,
    LoanProduct,
    LoanProductData,
    LoanStatus,
    LoanTerms,
    MAX_ANNUAL_INTEREST_RATE,
    MAX_DURATION_MONTHS,
    RepaymentCycle,
    RiskTier,
    UpcomingRepayment,
)


class CreditProfileSchema(BaseModel):
    """Credit attributes used by the risk scorer"""

    previous_loan_count: int = Field(0, ge=0)
    missed_payment_count: int = Field(0, ge=0)
    identity_verified: bool = False

    def to_domain(self) -> CreditProfile:
        return CreditProfile(
            previous_loan_count=self.previous_loan_count,
            missed_payment_count=self.missed_payment_count,
            identity_verified=self.identity_verified,
        )


class RiskResponse(BaseModel):
    """Response for POST /v1/calculator/risk"""

    score: float
    tier: RiskTier


class EligibilityRequest(BaseModel):
    """Request body for POST /v1/calculator/eligibility"""

    monthly_income: float = Field(..., ge=0)
    tier: RiskTier


class EligibilityResponse(BaseModel):
    max_eligible_principal: float


class LoanTermsSchema(BaseModel):
    """Loan terms accepted by the schedule generator"""

    principal: float = Field(..., gt=0, description="Amount lent")
    duration_months: int = Field(..., ge=1, le=MAX_DURATION_MONTHS)
    annual_interest_rate: float = Field(
        ..., ge=0, le=MAX_ANNUAL_INTEREST_RATE, description="Percentage points, 12 means 12%"
    )
    start_date: date
    interest_method: InterestMethod = InterestMethod.REDUCING
    repayment_cycle: RepaymentCycle = RepaymentCycle.MONTHLY

    def to_terms(self) -> LoanTerms:
        return LoanTerms(
            principal=self.principal,
            duration_months=self.duration_months,
            annual_interest_rate=self.annual_interest_rate,
            start_date=self.start_date,
            interest_method=self.interest_method,
            repayment_cycle=self.repayment_cycle,
        )


class InstallmentSchema(BaseModel):
    """Single installment in a repayment schedule"""

    installment_no: int
    due_date: date
    amount: float
    principal: float
    interest: float
    remaining_balance: float
    status: InstallmentStatus
    paid_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, inst: Installment) -> "InstallmentSchema":
        return cls(
            installment_no=inst.installment_no,
            due_date=inst.due_date,
            amount=inst.amount,
            principal=inst.principal,
            interest=inst.interest,
            remaining_balance=inst.remaining_balance,
            status=inst.status,
            paid_at=inst.paid_at,
        )


class ScheduleResponse(BaseModel):
    """Response for POST /v1/calculator/schedule"""

    installments: List[InstallmentSchema]
    total_payable: float
    total_interest: float

    @classmethod
    def from_schedule(cls, schedule: List[Installment]) -> "ScheduleResponse":
        return cls(
            installments=[InstallmentSchema.from_domain(inst) for inst in schedule],
            total_payable=sum(inst.amount for inst in schedule),
            total_interest=sum(inst.interest for inst in schedule),
        )


class ClientRequest(CreditProfileSchema):
    """Request body for POST/PUT /v1/clients"""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    cnic: str = Field(..., min_length=1, description="National identity number")
    phone: str = Field(..., min_length=1)
    monthly_income: float = Field(..., ge=0)
    address: str = ""
    city: str = ""
    occupation: str = ""

    def to_domain(self) -> ClientData:
        return ClientData(
            name=self.name,
            email=self.email,
            cnic=self.cnic,
            phone=self.phone,
            monthly_income=self.monthly_income,
            previous_loan_count=self.previous_loan_count,
            missed_payment_count=self.missed_payment_count,
            identity_verified=self.identity_verified,
            address=self.address,
            city=self.city,
            occupation=self.occupation,
        )


class VerificationRequest(BaseModel):
    identity_verified: bool


class ClientResponse(BaseModel):
    """Stored client with risk and eligibility"""

    id: str
    name: str
    email: str
    cnic: str
    phone: str
    address: str
    city: str
    occupation: str
    monthly_income: float
    previous_loan_count: int
    missed_payment_count: int
    identity_verified: bool
    risk_score: float
    risk_tier: RiskTier
    max_eligible_principal: float
    created_at: datetime

    @classmethod
    def from_domain(cls, client: Client, max_eligible_principal: float) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            email=client.email,
            cnic=client.cnic,
            phone=client.phone,
            address=client.address,
            city=client.city,
            occupation=client.occupation,
            monthly_income=client.monthly_income,
            previous_loan_count=client.previous_loan_count,
            missed_payment_count=client.missed_payment_count,
            identity_verified=client.identity_verified,
            risk_score=client.risk_score,
            risk_tier=client.risk_tier,
            max_eligible_principal=max_eligible_principal,
            created_at=client.created_at,
        )


class LoanCreateRequest(LoanTermsSchema):
    """Request body for POST /v1/loans"""

    client_id: str = Field(..., min_length=1)
    loan_type: str = Field(..., min_length=1, description="e.g. Business, Personal, Education")
    annual_interest_rate: float = Field(
        default_factory=lambda: settings.default_interest_rate,
        ge=0,
        le=MAX_ANNUAL_INTEREST_RATE,
        description="Percentage points; the configured default rate when omitted",
    )


class LoanStatusRequest(BaseModel):
    status: LoanStatus


class LoanResponse(BaseModel):
    """Loan with its repayment schedule"""

    id: str
    client_id: str
    client_name: str
    loan_type: str
    principal: float
    duration_months: int
    annual_interest_rate: float
    start_date: date
    interest_method: InterestMethod
    repayment_cycle: RepaymentCycle
    status: LoanStatus
    total_payable: float
    repayment_schedule: List[InstallmentSchema]

    @classmethod
    def from_domain(cls, loan: Loan) -> "LoanResponse":
        terms = loan.terms
        return cls(
            id=loan.id,
            client_id=loan.client_id,
            client_name=loan.client_name,
            loan_type=loan.loan_type,
            principal=terms.principal,
            duration_months=terms.duration_months,
            annual_interest_rate=terms.annual_interest_rate,
            start_date=terms.start_date,
            interest_method=terms.interest_method,
            repayment_cycle=terms.repayment_cycle,
            status=loan.status,
            total_payable=loan.total_payable,
            repayment_schedule=[InstallmentSchema.from_domain(inst) for inst in loan.repayment_schedule],
        )


class CollectionRequest(BaseModel):
    """Request body for POST /v1/collections"""

    loan_id: str = Field(..., min_length=1)
    installment_no: int = Field(..., ge=1)
    amount_collected: float = Field(..., gt=0)
    collected_by: str = Field(..., min_length=1)
    remarks: str = ""


class CollectionResponse(BaseModel):
    id: str
    loan_id: str
    client_name: str
    installment_no: int
    amount_collected: float
    collected_by: str
    collected_at: datetime
    remarks: str

    @classmethod
    def from_domain(cls, collection: Collection) -> "CollectionResponse":
        return cls(
            id=collection.id,
            loan_id=collection.loan_id,
            client_name=collection.client_name,
            installment_no=collection.installment_no,
            amount_collected=collection.amount_collected,
            collected_by=collection.collected_by,
            collected_at=collection.collected_at,
            remarks=collection.remarks,
        )


class SummaryResponse(BaseModel):
    """Response for GET /v1/dashboard/summary"""

    client_count: int
    loan_count: int
    total_principal: float
    active_loans: int
    defaulted_loans: int
    status_counts: Dict[str, int]
    total_collected: float
    overdue_installments: int


class UpcomingRepaymentSchema(BaseModel):
    loan_id: str
    installment_no: int
    client_name: str
    due_date: date
    amount: float

    @classmethod
    def from_domain(cls, reminder: UpcomingRepayment) -> "UpcomingRepaymentSchema":
        return cls(
            loan_id=reminder.loan_id,
            installment_no=reminder.installment_no,
            client_name=reminder.client_name,
            due_date=reminder.due_date,
            amount=reminder.amount,
        )


class ActivityItemSchema(BaseModel):
    id: str
    message: str
    timestamp: datetime
    kind: str

    @classmethod
    def from_domain(cls, item: ActivityLogItem) -> "ActivityItemSchema":
        return cls(id=item.id, message=item.message, timestamp=item.timestamp, kind=item.kind.value)


class LoanProductRequest(BaseModel):
    """Request body for POST /v1/loan-products"""

    title: str = Field(..., min_length=1)
    description: str = ""
    min_principal: float = Field(..., gt=0)
    max_principal: float = Field(..., gt=0)
    duration_value: int = Field(..., ge=1)
    duration_period: DurationPeriod = DurationPeriod.MONTHS
    duration_type: DurationType = DurationType.FIXED
    interest_method: InterestMethod = InterestMethod.REDUCING
    interest_rate: float = Field(..., ge=0, description="Percentage points per interest cycle")
    interest_cycle: InterestCycle = InterestCycle.YEARLY
    repayment_cycle: RepaymentCycle = RepaymentCycle.MONTHLY

    def to_domain(self) -> LoanProductData:
        return LoanProductData(
            title=self.title,
            description=self.description,
            min_principal=self.min_principal,
            max_principal=self.max_principal,
            duration_value=self.duration_value,
            duration_period=self.duration_period,
            duration_type=self.duration_type,
            interest_method=self.interest_method,
            interest_rate=self.interest_rate,
            interest_cycle=self.interest_cycle,
            repayment_cycle=self.repayment_cycle,
        )


class LoanProductResponse(LoanProductRequest):
    id: str
    created_at: datetime

    @classmethod
    def from_domain(cls, product: LoanProduct) -> "LoanProductResponse":
        return cls(
            id=product.id,
            title=product.title,
            description=product.description,
            min_principal=product.min_principal,
            max_principal=product.max_principal,
            duration_value=product.duration_value,
            duration_period=product.duration_period,
            duration_type=product.duration_type,
            interest_method=product.interest_method,
            interest_rate=product.interest_rate,
            interest_cycle=product.interest_cycle,
            repayment_cycle=product.repayment_cycle,
            created_at=product.created_at,
        )


class LoanDefaultsResponse(BaseModel):
    """Response for GET /v1/settings/loan-defaults"""

    min_loan_amount: float
    max_loan_amount: float
    default_interest_rate: float
    default_grace_period_days: int
    default_penalty_rate: float

    @classmethod
    def from_domain(cls, defaults: LoanDefaults) -> "LoanDefaultsResponse":
        return cls(
            min_loan_amount=defaults.min_loan_amount,
            max_loan_amount=defaults.max_loan_amount,
            default_interest_rate=defaults.default_interest_rate,
            default_grace_period_days=defaults.default_grace_period_days,
            default_penalty_rate=defaults.default_penalty_rate,
        )
