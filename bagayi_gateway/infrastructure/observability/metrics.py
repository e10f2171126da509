"""Prometheus metrics for monitoring transfer routing, rejections, and webhook performance"""

from prometheus_client import Counter, Histogram

# Transfer metrics
transfer_counter = Counter(
    "bagayi_transfer_total",
    "Total transfers created",
    ["mode", "status"],  # direct | inter_switch | mpesa_channel, draft | submitted
)

transfer_rejection_counter = Counter(
    "bagayi_transfer_rejections_total",
    "Transfers rejected by routing or request validation",
    ["reason"],
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "payment_event_latency_seconds",
    "Payment events webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "payment_event_failures_total",
    "Failed payment event deliveries",
)

# Directory API metrics
directory_fetch_failures_counter = Counter(
    "directory_fetch_failures_total",
    "Failed directory API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transfer(mode: str, status: str) -> None:
    transfer_counter.labels(mode=mode, status=status).inc()


def record_rejection(reason: str) -> None:
    transfer_rejection_counter.labels(reason=reason).inc()
