"""Prometheus metrics for record quality, cache effectiveness and refresh health"""

from prometheus_client import Counter, Histogram

# Ingestion metrics
records_rejected_counter = Counter(
    "route_ledger_records_rejected_total",
    "Client records rejected as malformed",
)

# Cache metrics
cache_lookup_counter = Counter(
    "route_ledger_cache_lookups_total",
    "Dashboard cache reads by outcome",
    ["outcome"],  # hit | miss | expired | foreign_user | read_error
)

cache_write_failures_counter = Counter(
    "route_ledger_cache_write_failures_total",
    "Failed writes to the persistent cache store",
)

# Refresh metrics
refresh_counter = Counter(
    "route_ledger_refresh_total",
    "Dashboard refresh attempts by outcome",
    ["outcome"],  # applied | failed | discarded | suppressed
)

refresh_duration_histogram = Histogram(
    "route_ledger_refresh_duration_seconds",
    "Time spent fetching a fresh dashboard snapshot",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Remote data source metrics
portfolio_fetch_failures_counter = Counter(
    "portfolio_fetch_failures_total",
    "Failed remote data source calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_rejections(count: int) -> None:
    """Count rejected records from one parsed batch"""
    if count > 0:
        records_rejected_counter.inc(count)
