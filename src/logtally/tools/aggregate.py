"""
aggregate.py

Computes the three frequency tables from parsed access log records.

This module takes the record table produced by the ingestion step (one row per
request) and groups it three ways:
- status_counts: every distinct status code with its request count
- top_urls: the 10 most requested URLs
- top_ips: the 10 most active client addresses

Ordering is deterministic: count descending, then key ascending. The top-N
tables are a strict prefix of that ordering, so a key tied with the Nth row
but ranked after it is left out.

Counting can also run over chunks of records. Each chunk produces partial
counts, partial counts are summed per key, and ranking happens only on the
merged totals. Truncating per chunk first could drop a key that is only
top-ranked overall.
"""

from __future__ import annotations

import logging
from itertools import islice
from typing import Dict, Iterable, Iterator, List, Optional

import pandas as pd

from logtally.categories import CATEGORY_KEYS, STATUS_COUNTS, TOP_IPS, TOP_URLS
from logtally.ingest.access_parser import LogRecord, records_to_frame


logger = logging.getLogger(__name__)

# category -> row limit (None keeps every group)
CATEGORY_LIMITS: Dict[str, Optional[int]] = {
    STATUS_COUNTS: None,
    TOP_URLS: 10,
    TOP_IPS: 10,
}


def count_by(df: pd.DataFrame, col: str) -> pd.Series:
    """Return request counts per distinct value of `col` (unordered)."""
    return df.groupby(col).size()


def merge_counts(parts: Iterable[pd.Series]) -> pd.Series:
    """Sum partial counts per key."""
    parts = [p for p in parts if not p.empty]
    if not parts:
        return pd.Series(dtype="int64")
    if len(parts) == 1:
        return parts[0]
    return pd.concat(parts).groupby(level=0).sum()


def rank_counts(counts: pd.Series, key: str, limit: Optional[int] = None) -> pd.DataFrame:
    """
    Turn per-key counts into an ordered [key, count] table.
    Sorted by count descending, ties by key ascending, then cut to `limit`.
    """
    if limit is not None and limit < 1:
        raise ValueError(f"top-N limit must be at least 1, got {limit}")
    table = counts.rename("count").rename_axis(key).reset_index()
    table["count"] = table["count"].astype("int64")
    table = table.sort_values(
        ["count", key], ascending=[False, True], kind="mergesort"
    ).reset_index(drop=True)
    if limit is not None:
        table = table.head(limit)
    return table


def _limits(top_n: int) -> Dict[str, Optional[int]]:
    return {c: (None if lim is None else top_n) for c, lim in CATEGORY_LIMITS.items()}


def status_counts(df: pd.DataFrame) -> pd.DataFrame:
    return rank_counts(count_by(df, "statusCode"), "statusCode")


def top_urls(df: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    return rank_counts(count_by(df, "url"), "url", limit=n)


def top_ips(df: pd.DataFrame, n: int = 10) -> pd.DataFrame:
    return rank_counts(count_by(df, "ipAddress"), "ipAddress", limit=n)


def compute_aggregations(df: pd.DataFrame, top_n: int = 10) -> Dict[str, pd.DataFrame]:
    """Compute all three result tables from a full record table."""
    return {
        STATUS_COUNTS: status_counts(df),
        TOP_URLS: top_urls(df, n=top_n),
        TOP_IPS: top_ips(df, n=top_n),
    }


def _chunks(records: Iterable[LogRecord], size: int) -> Iterator[List[LogRecord]]:
    it = iter(records)
    while True:
        chunk = list(islice(it, size))
        if not chunk:
            return
        yield chunk


def aggregate_chunks(
    records: Iterable[LogRecord],
    *,
    chunk_size: int = 50_000,
    top_n: int = 10,
) -> Dict[str, pd.DataFrame]:
    """
    Compute all three result tables without holding every record at once.
    Partial counts are merged per key before ranking and truncation.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if top_n < 1:
        raise ValueError(f"top_n must be at least 1, got {top_n}")

    totals: Dict[str, pd.Series] = {c: pd.Series(dtype="int64") for c in CATEGORY_KEYS}
    n_chunks = 0
    for chunk in _chunks(records, chunk_size):
        n_chunks += 1
        frame = records_to_frame(chunk)
        for category, key in CATEGORY_KEYS.items():
            totals[category] = merge_counts([totals[category], count_by(frame, key)])

    logger.debug("Merged partial counts from %d chunk(s)", n_chunks)

    limits = _limits(top_n)
    return {
        category: rank_counts(totals[category], CATEGORY_KEYS[category], limits[category])
        for category in CATEGORY_KEYS
    }
