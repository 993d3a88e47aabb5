"""Prometheus metrics for schedules, balance discrepancies and payments"""

from prometheus_client import Counter, Histogram

# Schedule metrics
schedule_counter = Counter(
    "rjr_schedule_total",
    "Installment schedules computed",
    ["outcome"],  # ok | invalid
)

validation_failure_counter = Counter(
    "rjr_validation_failures_total",
    "Input validation failures by field",
    ["field"],
)

discrepancy_counter = Counter(
    "rjr_balance_discrepancy_total",
    "Installment lists that did not add up to the balance",
    ["kind"],  # short | excess
)

# Ledger metrics
document_counter = Counter(
    "rjr_documents_created_total",
    "Financial documents created",
    ["type"],  # credito | debito
)

payment_counter = Counter(
    "rjr_payments_total",
    "Payments registered against ledger entries",
    ["status"],  # partial | paid
)

payment_amount_histogram = Histogram(
    "rjr_payment_amount_brl",
    "Registered payment amounts",
    buckets=[50, 100, 250, 500, 1000, 2500, 5000, 10000],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_schedule(errors, discrepancy) -> None:
    """Record schedule outcome, failing fields and discrepancy kind"""
    schedule_counter.labels(outcome="invalid" if errors else "ok").inc()
    for error in errors:
        validation_failure_counter.labels(field=error.field).inc()
    if discrepancy is not None:
        discrepancy_counter.labels(kind=discrepancy.kind).inc()


def record_payment(status: str, amount: float) -> None:
    payment_counter.labels(status=status).inc()
    payment_amount_histogram.observe(amount)
