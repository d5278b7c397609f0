"""Prometheus metrics for the Merchant service.

Metrics are organized into two categories:

Business Metrics (for Product/Operations):
- merchant_registrations_total: New merchant sign-ups
- merchant_email_verifications_total: Completed email verifications
- merchant_kyc_decisions_total: KYC decisions by outcome
- merchant_status_transitions_total: Account status changes by from/to
- merchant_quota_rejections_total: Requests refused for exhausted quota
- merchant_admin_logins_total: Admin login attempts by outcome

Technical Metrics (for Engineering/SRE):
- merchant_bank_verification_total: Bank verification calls by outcome
- merchant_bank_verification_latency_seconds: Bank verification latency
- merchant_email_failures_total: Undelivered notification emails by kind
- merchant_maintenance_runs_total: Scheduled maintenance job runs
- merchant_http_requests_total: HTTP requests by endpoint/status
"""

import time
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram, REGISTRY, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST


# =============================================================================
# Business Metrics (Product/Operations dashboards)
# =============================================================================

registrations_total = Counter(
    "merchant_registrations_total",
    "Total number of merchants registered",
)

email_verifications_total = Counter(
    "merchant_email_verifications_total",
    "Total number of merchant email addresses verified",
)

kyc_decisions_total = Counter(
    "merchant_kyc_decisions_total",
    "Total number of KYC decisions recorded",
    ["outcome"],  # approved, rejected
)

status_transitions_total = Counter(
    "merchant_status_transitions_total",
    "Total number of merchant account status changes",
    ["from_status", "to_status"],
)

quota_rejections_total = Counter(
    "merchant_quota_rejections_total",
    "Total number of API requests refused for exhausted quota",
)

admin_logins_total = Counter(
    "merchant_admin_logins_total",
    "Total number of admin login attempts",
    ["outcome"],  # success, failure, locked
)


# =============================================================================
# Technical Metrics (Engineering/SRE dashboards)
# =============================================================================

bank_verification_total = Counter(
    "merchant_bank_verification_total",
    "Total number of bank account verification calls",
    ["status"],  # success, failure, error
)

bank_verification_latency = Histogram(
    "merchant_bank_verification_latency_seconds",
    "Bank verification provider latency in seconds",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

email_failures_total = Counter(
    "merchant_email_failures_total",
    "Total number of notification emails that could not be delivered",
    ["kind"],
)

maintenance_runs_total = Counter(
    "merchant_maintenance_runs_total",
    "Total number of scheduled maintenance job runs",
    ["job", "status"],
)

http_requests_total = Counter(
    "merchant_http_requests_total",
    "Total HTTP requests by endpoint and status",
    ["method", "endpoint", "status"],
)

http_request_latency = Histogram(
    "merchant_http_request_latency_seconds",
    "HTTP request latency by endpoint",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_registration() -> None:
    registrations_total.inc()


def record_email_verification() -> None:
    email_verifications_total.inc()


def record_kyc_decision(approved: bool) -> None:
    """Record an admin KYC decision."""
    outcome = "approved" if approved else "rejected"
    kyc_decisions_total.labels(outcome=outcome).inc()


def record_status_transition(from_status: str, to_status: str) -> None:
    status_transitions_total.labels(from_status=from_status, to_status=to_status).inc()


def record_quota_rejection() -> None:
    quota_rejections_total.inc()


def record_admin_login(outcome: str) -> None:
    """Record an admin login attempt (success, failure or locked)."""
    admin_logins_total.labels(outcome=outcome).inc()


@contextmanager
def track_bank_verification_latency() -> Generator[None, None, None]:
    """Context manager to track bank verification latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        bank_verification_latency.observe(duration)


def record_bank_verification(status: str) -> None:
    """Record a bank verification outcome (success, failure or error)."""
    bank_verification_total.labels(status=status).inc()


def record_email_failure(kind: str) -> None:
    """Record a notification email that was not delivered."""
    email_failures_total.labels(kind=kind).inc()


def record_maintenance_run(job: str, success: bool) -> None:
    status = "success" if success else "failure"
    maintenance_runs_total.labels(job=job, status=status).inc()


def record_http_request(method: str, endpoint: str, status: int, duration: float) -> None:
    """Record an HTTP request."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
    http_request_latency.labels(method=method, endpoint=endpoint).observe(duration)


def get_metrics() -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(REGISTRY)


def get_metrics_content_type() -> str:
    """Get the content type for metrics response."""
    return CONTENT_TYPE_LATEST
