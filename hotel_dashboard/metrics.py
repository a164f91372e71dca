"""
Prometheus metrics for upstream API calls, property aggregation and report builds.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from hotel_dashboard.metrics import upstream_requests
    >>> upstream_requests.labels(
    ...     source="cloudbeds", endpoint="getDashboard", status_code="200"
    ... ).inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Upstream API Metrics
# =============================================================================

upstream_requests = Counter(
    "dashboard_upstream_requests_total",
    "Total requests made to upstream APIs",
    ["source", "endpoint", "status_code"],
)
"""
Counter for upstream API requests.

Labels:
    source: Upstream system ("cloudbeds" or "analytics")
    endpoint: API operation (e.g., "getReservationsWithRateDetails", "runReport")
    status_code: HTTP status code, or "error" when no response was received
"""

upstream_latency = Histogram(
    "dashboard_upstream_latency_seconds",
    "Upstream API request latency in seconds",
    ["source", "endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)

# =============================================================================
# Aggregation Metrics
# =============================================================================

property_fetches = Counter(
    "dashboard_property_fetches_total",
    "Per-property aggregation passes (success and failure)",
    ["property_id", "status"],
)
"""
Counter for per-property aggregation passes.

Labels:
    property_id: Cloudbeds property ID
    status: success or failure (failure means the zero-valued fallback was used)
"""

report_duration = Histogram(
    "dashboard_report_duration_seconds",
    "Time taken to build one dashboard report",
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, float("inf")),
)

# =============================================================================
# Analytics Token Cache Metrics
# =============================================================================

token_cache_hits = Counter(
    "dashboard_analytics_token_cache_hits_total",
    "Total number of analytics token cache hits",
)

token_cache_misses = Counter(
    "dashboard_analytics_token_cache_misses_total",
    "Total number of analytics token cache misses",
)

token_refreshes = Counter(
    "dashboard_analytics_token_refreshes_total",
    "Total number of analytics token exchanges",
)
