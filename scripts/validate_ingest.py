"""
validate_ingest.py

Simple script to check that access log parsing is working correctly.

This script loads the sample access log, runs it through the parser, and
prints basic information about the results (row count, skipped lines,
dtypes, status code spread).

It is meant to be run by a developer to quickly confirm that the ingested
data looks reasonable before looking at the aggregated results.

This is not a test suite and does not use assertions.
"""

from logtally.ingest.access_parser import parse_access_logs

df, stats = parse_access_logs("examples/sample_access.log")

print("=== Parse Stats ===")
print(stats)

print("\n=== Head ===")
print(df.head())

print("\n=== Dtypes ===")
print(df.dtypes)

print("\n=== Basic Sanity ===")
print("rows:", len(df))
print("unique IPs:", df["ipAddress"].nunique())
print("unique URLs:", df["url"].nunique())
print("status counts:\n", df["statusCode"].value_counts().sort_index())
print("bytes sent:", int(df["responseSize"].sum()))
