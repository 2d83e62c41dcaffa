"""Prometheus metrics for monitoring risk distribution, originations and collections"""

from prometheus_client import Counter, Histogram

# Scoring metrics
client_scored_counter = Counter(
    "lendbox_client_scored_total",
    "Clients scored by resulting risk tier",
    ["tier"],  # Low | Medium | High
)

# Origination metrics
loan_created_counter = Counter(
    "lendbox_loan_created_total",
    "Loan applications created",
    ["interest_method", "repayment_cycle"],
)

loan_principal_histogram = Histogram(
    "lendbox_loan_principal",
    "Principal of created loans",
    buckets=[1_000, 5_000, 10_000, 25_000, 50_000, 100_000, 250_000, 500_000],
)

# Collection metrics
installment_paid_counter = Counter(
    "lendbox_installment_paid_total",
    "Installments marked as paid",
)

collected_amount_counter = Counter(
    "lendbox_collected_amount_total",
    "Sum of amounts collected",
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Event webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_client_scored(tier: str) -> None:
    client_scored_counter.labels(tier=tier).inc()


def record_loan_created(interest_method: str, repayment_cycle: str, principal: float) -> None:
    """Record origination metrics for product mix and ticket size"""
    loan_created_counter.labels(interest_method=interest_method, repayment_cycle=repayment_cycle).inc()
    loan_principal_histogram.observe(principal)


def record_collection(amount: float) -> None:
    installment_paid_counter.inc()
    if amount > 0:
        collected_amount_counter.inc(amount)
