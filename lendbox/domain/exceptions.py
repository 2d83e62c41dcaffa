"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidLoanTermsError(DomainException):
    """Loan terms fall outside the domain the schedule generator accepts"""

    pass


class ClientNotFoundError(DomainException):
    """No client exists with the given id"""

    pass


class LoanNotFoundError(DomainException):
    """No loan exists with the given id"""

    pass


class InstallmentNotFoundError(DomainException):
    """Loan has no installment with the given number"""

    pass


class InstallmentAlreadyPaidError(DomainException):
    """Installment was already settled"""

    pass


class EventDeliveryError(DomainException):
    """Portfolio event webhook could not be delivered"""

    pass


class InvalidLoanProductError(DomainException):
    """Loan product definition is inconsistent (e.g. min principal above max)"""

    pass


class LoanProductNotFoundError(DomainException):
    """No loan product exists with the given id"""

    pass
