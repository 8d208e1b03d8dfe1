"""Prometheus metrics for classification quality, storage writes and analytics load"""

from prometheus_client import Counter, Histogram

# Classification metrics
classification_counter = Counter(
    "finance_classification_total",
    "Merchants classified during analytics",
    ["outcome"],  # matched | uncategorized
)

invalid_rule_counter = Counter(
    "finance_invalid_rule_patterns_total",
    "Stored category rules skipped because their pattern does not compile",
)

# Storage metrics
collection_write_counter = Counter(
    "finance_collection_writes_total",
    "Full-collection overwrites",
    ["kind"],
)

# Analytics metrics
analytics_request_counter = Counter(
    "finance_analytics_requests_total",
    "Analytics views computed",
    ["view"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_classification(matched: int, uncategorized: int) -> None:
    """Record how many classified expenses hit a rule versus fell through"""
    if matched:
        classification_counter.labels(outcome="matched").inc(matched)
    if uncategorized:
        classification_counter.labels(outcome="uncategorized").inc(uncategorized)
