"""Prometheus metrics for monitoring transfers, loan flow, and notification delivery"""

from decimal import Decimal

from prometheus_client import Counter, Histogram

# Transfer metrics
transfer_counter = Counter(
    "banking_transfer_total",
    "Transfers attempted",
    ["outcome"],  # completed | insufficient_funds | concurrent_update | ...
)

transfer_amount_histogram = Histogram(
    "banking_transfer_amount",
    "Amount moved by completed transfers",
    buckets=[10, 50, 100, 500, 1_000, 5_000, 10_000, 50_000],
)

# Loan metrics
loan_request_counter = Counter(
    "banking_loan_request_total",
    "Loan requests created",
)

loan_status_counter = Counter(
    "banking_loan_status_change_total",
    "Administrative loan status changes",
    ["status"],
)

# Notifications
notification_failure_counter = Counter(
    "banking_notification_failures_total",
    "Notifications that could not be stored",
)

# Storage
storage_failure_counter = Counter(
    "banking_storage_failures_total",
    "Failed storage operations",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transfer(outcome: str, amount: Decimal | None = None) -> None:
    """Count a transfer attempt; completed transfers also feed the amount histogram"""
    transfer_counter.labels(outcome=outcome).inc()

    if outcome == "completed" and amount is not None:
        transfer_amount_histogram.observe(float(amount))
