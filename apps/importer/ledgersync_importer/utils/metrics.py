"""Prometheus metrics."""

from prometheus_client import Counter, Gauge, Histogram

# Write metrics
transactions_written = Counter(
    "ledgersync_transactions_written_total",
    "Transactions handled by the writer",
    ["outcome"],
)

write_failures = Counter(
    "ledgersync_write_failures_total",
    "Pages abandoned because a transaction failed to commit",
)

page_write_duration = Histogram(
    "ledgersync_page_write_duration_seconds",
    "Time spent writing one page of transactions",
)

unmatched_spent_outputs = Counter(
    "ledgersync_unmatched_spent_outputs_total",
    "Spent-output references that matched no imported output",
)

# Feed metrics
fetch_errors = Counter(
    "ledgersync_fetch_errors_total",
    "Failed feed queries",
    ["kind"],
)

pages_acknowledged = Counter(
    "ledgersync_pages_acknowledged_total",
    "Pages whose cursor was acknowledged",
)

acknowledge_failures = Counter(
    "ledgersync_acknowledge_failures_total",
    "Rejected or failed cursor acknowledgments",
)

last_block_height = Gauge(
    "ledgersync_last_block_height",
    "Block height of the last transaction in the last acknowledged page",
)
