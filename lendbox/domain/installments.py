"""Installment schedule generation for loan repayment"""

import logging
import math
from datetime import date, datetime
from typing import List, Optional
from lendbox.domain.models import (
    Installment,
    InstallmentStatus,
    InterestMethod,
    LoanTerms,
    RepaymentCycle,
)
from lendbox.utils.date_utils import add_months, today_from

logger = logging.getLogger(__name__)


def flat_interest(principal: float, annual_interest_rate: float) -> float:
    """Interest charged once on the original principal"""
    return principal * (annual_interest_rate / 100)


def annuity_payment(principal: float, monthly_rate: float, num_payments: int) -> float:
    """
    Constant payment that fully amortizes principal over num_payments.

    Returns inf when the formula degenerates (zero monthly rate, or a
    growth factor beyond float range), matching the non-finite result
    callers check for.
    """
    try:
        growth = (1 + monthly_rate) ** num_payments
    except OverflowError:
        return math.inf
    denominator = growth - 1
    if denominator == 0:
        return math.inf
    return principal * monthly_rate * growth / denominator


def generate_schedule(terms: LoanTerms, now: Optional[datetime] = None) -> List[Installment]:
    """
    Generate the full repayment schedule for a loan.

    Branches (evaluated in order):
    - Once cycle: a single bullet installment at start + duration months
    - Zero monthly rate: straight-line split, every installment Due
    - Otherwise: monthly annuity, Overdue when the due date is before today

    Weekly and Daily cycles are amortized monthly.

    Args:
        terms: Validated loan terms
        now: Instant used to classify past due dates (default: wall clock)

    Returns:
        Installments in calendar order, numbered from 1

    Example:
        10000 over 6 months at 10% Flat, Once, from 2024-01-01
        → [#1 due 2024-07-01: 10000 principal + 1000 interest = 11000]
    """
    if terms.repayment_cycle == RepaymentCycle.ONCE:
        return [_single_installment(terms)]

    if terms.repayment_cycle != RepaymentCycle.MONTHLY:
        logger.debug(
            "Amortizing %s cycle monthly",
            terms.repayment_cycle.value,
            extra={"repayment_cycle": terms.repayment_cycle.value},
        )

    if now is None:
        now = datetime.now()

    monthly_rate = terms.annual_interest_rate / 100 / 12
    monthly_payment = annuity_payment(terms.principal, monthly_rate, terms.duration_months)

    if not math.isfinite(monthly_payment):
        return _straight_line_schedule(terms)

    return _annuity_schedule(terms, monthly_rate, monthly_payment, today_from(now))


def _single_installment(terms: LoanTerms) -> Installment:
    if terms.interest_method == InterestMethod.FLAT:
        interest = flat_interest(terms.principal, terms.annual_interest_rate)
    else:
        # One payment only, so reducing balance is approximated pro rata
        interest = terms.principal * (terms.annual_interest_rate / 100) * (terms.duration_months / 12)

    return Installment(
        installment_no=1,
        due_date=add_months(terms.start_date, terms.duration_months),
        amount=terms.principal + interest,
        principal=terms.principal,
        interest=interest,
        remaining_balance=0.0,
        status=InstallmentStatus.DUE,
    )


def _straight_line_schedule(terms: LoanTerms) -> List[Installment]:
    n = terms.duration_months
    if terms.interest_method == InterestMethod.FLAT:
        total_interest = flat_interest(terms.principal, terms.annual_interest_rate)
    else:
        total_interest = 0.0

    payment = (terms.principal + total_interest) / n
    principal_portion = terms.principal / n
    interest_portion = total_interest / n

    installments = []
    balance = terms.principal
    for i in range(1, n + 1):
        balance -= principal_portion
        installments.append(
            Installment(
                installment_no=i,
                due_date=add_months(terms.start_date, i),
                amount=payment,
                principal=principal_portion,
                interest=interest_portion,
                remaining_balance=_closing_balance(balance, i == n),
                # Never classified Overdue on this path, unlike the annuity path
                status=InstallmentStatus.DUE,
            )
        )

    return installments


def _annuity_schedule(
    terms: LoanTerms,
    monthly_rate: float,
    monthly_payment: float,
    today: date,
) -> List[Installment]:
    installments = []
    balance = terms.principal
    n = terms.duration_months
    for i in range(1, n + 1):
        interest_portion = balance * monthly_rate
        principal_portion = monthly_payment - interest_portion
        balance -= principal_portion

        due_date = add_months(terms.start_date, i)
        status = InstallmentStatus.OVERDUE if due_date < today else InstallmentStatus.DUE

        installments.append(
            Installment(
                installment_no=i,
                due_date=due_date,
                amount=monthly_payment,
                principal=principal_portion,
                interest=interest_portion,
                remaining_balance=_closing_balance(balance, i == n),
                status=status,
            )
        )

    return installments


def _closing_balance(balance: float, is_last: bool) -> float:
    # Final installment settles the loan; float drift must not leave a residue
    if is_last:
        return 0.0
    return max(0.0, balance)
