"""SQLAlchemy ORM models for the loan portfolio"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Date, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class ClientRecord(Base):
    """Borrower with derived risk fields"""

    __tablename__ = "client"

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    cnic = Column(String(32), nullable=False, index=True)
    phone = Column(String(32), nullable=False)
    address = Column(Text, nullable=False, default="")
    city = Column(Text, nullable=False, default="")
    occupation = Column(Text, nullable=False, default="")
    monthly_income = Column(Float, nullable=False)
    previous_loan_count = Column(Integer, nullable=False, default=0)
    missed_payment_count = Column(Integer, nullable=False, default=0)
    identity_verified = Column(Boolean, nullable=False, default=False)
    risk_score = Column(Float, nullable=False)
    risk_tier = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False)

    loans = relationship("LoanRecord", back_populates="client")


class LoanRecord(Base):
    """Loan application and its terms"""

    __tablename__ = "loan"

    id = Column(String(64), primary_key=True)
    client_id = Column(String(64), ForeignKey("client.id"), nullable=False, index=True)
    client_name = Column(Text, nullable=False)
    loan_type = Column(Text, nullable=False)
    principal = Column(Float, nullable=False)
    duration_months = Column(Integer, nullable=False)
    annual_interest_rate = Column(Float, nullable=False)
    start_date = Column(Date, nullable=False)
    interest_method = Column(String(32), nullable=False)
    repayment_cycle = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False)

    client = relationship("ClientRecord", back_populates="loans")
    installments = relationship(
        "InstallmentRecord",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="InstallmentRecord.installment_no",
    )


class InstallmentRecord(Base):
    """Scheduled payment; amounts are fixed once written"""

    __tablename__ = "installment"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(String(64), ForeignKey("loan.id", ondelete="CASCADE"), nullable=False, index=True)
    installment_no = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    principal = Column(Float, nullable=False)
    interest = Column(Float, nullable=False)
    remaining_balance = Column(Float, nullable=False)
    status = Column(String(16), nullable=False)
    paid_at = Column(DateTime, nullable=True)

    loan = relationship("LoanRecord", back_populates="installments")


class CollectionRecord(Base):
    """Payment collected against an installment"""

    __tablename__ = "collection"

    id = Column(String(64), primary_key=True)
    loan_id = Column(String(64), ForeignKey("loan.id"), nullable=False, index=True)
    client_name = Column(Text, nullable=False)
    installment_no = Column(Integer, nullable=False)
    amount_collected = Column(Float, nullable=False)
    collected_by = Column(Text, nullable=False)
    collected_at = Column(DateTime, nullable=False)
    remarks = Column(Text, nullable=False, default="")


class ActivityLogRecord(Base):
    """Audit trail of portfolio changes"""

    __tablename__ = "activity_log"

    id = Column(String(64), primary_key=True)
    seq = Column(Integer, nullable=False, index=True)
    message = Column(Text, nullable=False)
    kind = Column(String(16), nullable=False)
    timestamp = Column(DateTime, nullable=False)


class LoanProductRecord(Base):
    """Loan product catalog entry"""

    __tablename__ = "loan_product"

    id = Column(String(64), primary_key=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    min_principal = Column(Float, nullable=False)
    max_principal = Column(Float, nullable=False)
    duration_value = Column(Integer, nullable=False)
    duration_period = Column(String(16), nullable=False)
    duration_type = Column(String(32), nullable=False)
    interest_method = Column(String(32), nullable=False)
    interest_rate = Column(Float, nullable=False)
    interest_cycle = Column(String(16), nullable=False)
    repayment_cycle = Column(String(16), nullable=False)
    created_at = Column(DateTime, nullable=False)
