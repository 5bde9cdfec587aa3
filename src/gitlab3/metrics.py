"""
Prometheus metrics definitions for gitlab3.

Counts API round trips by verb and status, times them, and tracks how many
pages paginators pull from the server.

Naming follows the prometheus_client conventions: snake_case, gitlab3_ prefix.
"""

from prometheus_client import Counter, Histogram

# ==============================================================================
# COUNTERS - Monotonically increasing values
# ==============================================================================

requests_total = Counter(
    "gitlab3_requests_total",
    "Total GitLab API requests that received a response",
    ["verb", "status"],
    # verb: GET, POST, PUT, DELETE
    # status: HTTP status code as string
)

pages_fetched_total = Counter(
    "gitlab3_pages_fetched_total",
    "Total pages fetched by paginators",
    ["mode"],
    # mode: records, pages
)

# ==============================================================================
# HISTOGRAMS - Latency distributions
# ==============================================================================

request_duration_seconds = Histogram(
    "gitlab3_request_duration_seconds",
    "Time from dispatch to response for GitLab API requests",
    ["verb"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
