"""Prometheus metrics for the relay."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


# ── HTTP metrics ─────────────────────────────────────────────
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ── Credential rotation metrics ──────────────────────────────
CREDENTIAL_ATTEMPTS = Counter(
    "credential_attempts_total",
    "Provider calls per credential position",
    ["credential", "outcome"],  # outcome: success / failure
)

DISPATCH_EXHAUSTED = Counter(
    "dispatch_exhausted_total",
    "Dispatches that ended without any credential succeeding",
)

DISPATCH_LATENCY = Histogram(
    "dispatch_latency_seconds",
    "End-to-end dispatch latency across all attempts",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)
