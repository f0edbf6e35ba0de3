"""
smoke_test.py

Quick sanity check for the parse + aggregate path.

This script parses the bundled sample access log and performs a few basic
assertions so obvious breakage shows up early, such as:
- parsing failures that produce empty outputs
- missing columns required for aggregation
- incorrect data types for key fields
- result tables that break the ordering rules

It is not a test suite; see tests/ for that.
"""


from logtally.ingest.access_parser import RECORD_COLUMNS, parse_access_logs
from logtally.tools.aggregate import compute_aggregations

df, stats = parse_access_logs("examples/sample_access.log")
results = compute_aggregations(df)

assert len(df) > 0
assert list(df.columns) == RECORD_COLUMNS
assert df["statusCode"].dtype.kind in ("i", "u")
assert stats.parsed == len(df)
assert int(results["status_counts"]["count"].sum()) == len(df)
assert len(results["top_urls"]) <= 10
assert results["top_ips"]["count"].is_monotonic_decreasing
