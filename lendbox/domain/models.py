"""Domain models - pure Python dataclasses representing business entities"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from lendbox.domain.exceptions import InvalidLoanProductError, InvalidLoanTermsError
from lendbox.utils.date_utils import add_months

# Upper bounds accepted for loan terms (100 years, 1000% a year)
MAX_DURATION_MONTHS = 1200
MAX_ANNUAL_INTEREST_RATE = 1000.0


class RiskTier(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class InterestMethod(str, Enum):
    FLAT = "Flat Interest"
    REDUCING = "Reducing Balance"


class RepaymentCycle(str, Enum):
    ONCE = "Once"
    MONTHLY = "Monthly"
    WEEKLY = "Weekly"
    DAILY = "Daily"


class InstallmentStatus(str, Enum):
    DUE = "Due"
    OVERDUE = "Overdue"
    PAID = "Paid"


class LoanStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    ACTIVE = "Active"
    PAID = "Paid"
    DEFAULT = "Default"
    PROCESSING = "Processing"


class DurationPeriod(str, Enum):
    MONTHS = "Months"
    WEEKS = "Weeks"
    DAYS = "Days"


class DurationType(str, Enum):
    FIXED = "Fixed Duration"
    DYNAMIC = "Dynamic"


class InterestCycle(str, Enum):
    ONCE = "Once"
    MONTHLY = "Monthly"
    YEARLY = "Yearly"


class ActivityKind(str, Enum):
    CREATE = "create"
    DELETE = "delete"
    UPDATE = "update"
    PAYMENT = "payment"
    SECURITY = "security"
    SYSTEM = "system"


@dataclass(frozen=True)
class CreditProfile:
    """Borrower credit attributes read by the risk scorer"""

    previous_loan_count: int
    missed_payment_count: int
    identity_verified: bool


@dataclass(frozen=True)
class RiskAssessment:
    """Default probability together with the tier it maps to"""

    score: float
    tier: RiskTier


@dataclass(frozen=True)
class LoanTerms:
    """
    Validated inputs for schedule generation.

    Rejects terms outside the generator's domain instead of letting
    zero durations or negative principals leak NaN/inf into a schedule.
    """

    principal: float
    duration_months: int
    annual_interest_rate: float
    start_date: date
    interest_method: InterestMethod = InterestMethod.REDUCING
    repayment_cycle: RepaymentCycle = RepaymentCycle.MONTHLY

    def __post_init__(self) -> None:
        if not math.isfinite(self.principal) or self.principal <= 0:
            raise InvalidLoanTermsError(f"Principal must be positive, got {self.principal}")
        if not isinstance(self.duration_months, int) or isinstance(self.duration_months, bool):
            raise InvalidLoanTermsError(f"Duration must be a whole number of months, got {self.duration_months!r}")
        if not 1 <= self.duration_months <= MAX_DURATION_MONTHS:
            raise InvalidLoanTermsError(
                f"Duration must be between 1 and {MAX_DURATION_MONTHS} months, got {self.duration_months}"
            )
        if not math.isfinite(self.annual_interest_rate) or self.annual_interest_rate < 0:
            raise InvalidLoanTermsError(
                f"Annual interest rate must be non-negative, got {self.annual_interest_rate}"
            )
        if self.annual_interest_rate > MAX_ANNUAL_INTEREST_RATE:
            raise InvalidLoanTermsError(
                f"Annual interest rate must not exceed {MAX_ANNUAL_INTEREST_RATE}%, got {self.annual_interest_rate}"
            )
        try:
            add_months(self.start_date, self.duration_months)
        except (ValueError, OverflowError) as e:
            raise InvalidLoanTermsError(f"Last due date falls outside the calendar range: {e}") from e


@dataclass
class Installment:
    """Single payment in a repayment schedule"""

    installment_no: int
    due_date: date
    amount: float
    principal: float
    interest: float
    remaining_balance: float
    status: InstallmentStatus = InstallmentStatus.DUE
    paid_at: Optional[datetime] = None


@dataclass
class ClientData:
    """Borrower details as submitted, before scoring"""

    name: str
    email: str
    cnic: str
    phone: str
    monthly_income: float
    previous_loan_count: int = 0
    missed_payment_count: int = 0
    identity_verified: bool = False
    address: str = ""
    city: str = ""
    occupation: str = ""

    @property
    def credit_profile(self) -> CreditProfile:
        return CreditProfile(
            previous_loan_count=self.previous_loan_count,
            missed_payment_count=self.missed_payment_count,
            identity_verified=self.identity_verified,
        )


@dataclass
class Client(ClientData):
    """Stored borrower with derived risk fields"""

    id: str = ""
    risk_score: float = 0.0
    risk_tier: RiskTier = RiskTier.LOW
    created_at: Optional[datetime] = None


@dataclass
class LoanData:
    """Loan application as submitted"""

    client_id: str
    loan_type: str
    terms: LoanTerms


@dataclass
class Loan:
    """Stored loan with its generated repayment schedule"""

    id: str
    client_id: str
    client_name: str
    loan_type: str
    terms: LoanTerms
    status: LoanStatus
    repayment_schedule: List[Installment] = field(default_factory=list)

    def installment(self, installment_no: int) -> Optional[Installment]:
        for inst in self.repayment_schedule:
            if inst.installment_no == installment_no:
                return inst
        return None

    @property
    def total_payable(self) -> float:
        return sum(inst.amount for inst in self.repayment_schedule)


@dataclass
class LoanProductData:
    """
    Catalog template a loan officer picks terms from.

    Principal bounds and duration are advisory ranges for applications;
    they are checked for consistency here, not enforced on loans.
    """

    title: str
    min_principal: float
    max_principal: float
    duration_value: int
    interest_rate: float
    description: str = ""
    duration_period: DurationPeriod = DurationPeriod.MONTHS
    duration_type: DurationType = DurationType.FIXED
    interest_method: InterestMethod = InterestMethod.REDUCING
    interest_cycle: InterestCycle = InterestCycle.YEARLY
    repayment_cycle: RepaymentCycle = RepaymentCycle.MONTHLY

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise InvalidLoanProductError("Product title is required")
        if self.min_principal <= 0 or self.max_principal <= 0:
            raise InvalidLoanProductError("Principal bounds must be greater than 0")
        if self.min_principal > self.max_principal:
            raise InvalidLoanProductError(
                f"Minimum principal {self.min_principal} exceeds maximum {self.max_principal}"
            )
        if self.duration_value <= 0:
            raise InvalidLoanProductError(f"Duration must be greater than 0, got {self.duration_value}")
        if self.interest_rate < 0:
            raise InvalidLoanProductError(f"Interest rate cannot be negative, got {self.interest_rate}")


@dataclass
class LoanProduct(LoanProductData):
    id: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class LoanDefaults:
    """Portfolio-wide defaults for new loan applications"""

    min_loan_amount: float
    max_loan_amount: float
    default_interest_rate: float
    default_grace_period_days: int
    default_penalty_rate: float


@dataclass
class Collection:
    """Payment collected against a loan installment"""

    id: str
    loan_id: str
    client_name: str
    installment_no: int
    amount_collected: float
    collected_by: str
    collected_at: datetime
    remarks: str = ""


@dataclass
class ActivityLogItem:
    id: str
    message: str
    timestamp: datetime
    kind: ActivityKind


@dataclass
class UpcomingRepayment:
    loan_id: str
    installment_no: int
    client_name: str
    due_date: date
    amount: float


@dataclass
class PortfolioSummary:
    """Dashboard-level aggregates over the whole loan book"""

    client_count: int
    loan_count: int
    total_principal: float
    active_loans: int
    defaulted_loans: int
    status_counts: Dict[str, int]
    total_collected: float
    overdue_installments: int
