"""Prometheus metrics for monitoring provider traffic, cache efficiency and aggregations"""

from prometheus_client import Counter, Histogram

# Provider metrics
provider_request_counter = Counter(
    "taxcalc_provider_requests_total",
    "Calls made to bank provider APIs",
    ["endpoint", "outcome"],  # outcome: ok | error
)

bank_fetch_failures_counter = Counter(
    "taxcalc_bank_fetch_failures_total",
    "Bank clients that failed during aggregation",
    ["bank_id", "kind"],
)

throttle_wait_counter = Counter(
    "taxcalc_throttle_waits_total",
    "Rate-limit pauses taken between full statement pages",
)

# Cache metrics
cache_lookup_counter = Counter(
    "taxcalc_cache_lookups_total",
    "Cache-aside lookups",
    ["outcome"],  # hit | miss | undecodable
)

# Aggregation metrics
aggregation_counter = Counter(
    "taxcalc_aggregation_total",
    "Income and tax aggregations",
    ["outcome"],  # complete | partial | failed
)

aggregation_duration_histogram = Histogram(
    "taxcalc_aggregation_duration_seconds",
    "Time spent aggregating income across banks",
    buckets=[0.1, 0.5, 1.0, 5.0, 30.0, 60.0, 300.0, 900.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_provider_request(endpoint: str, ok: bool) -> None:
    provider_request_counter.labels(endpoint=endpoint, outcome="ok" if ok else "error").inc()


def record_aggregation(complete: bool, failed: bool = False) -> None:
    """Record aggregation outcome for monitoring partial and failed runs"""
    if failed:
        outcome = "failed"
    elif complete:
        outcome = "complete"
    else:
        outcome = "partial"
    aggregation_counter.labels(outcome=outcome).inc()
