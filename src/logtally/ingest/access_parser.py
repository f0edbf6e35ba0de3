"""
access_parser.py

Parses web-server access logs (combined log format) into structured records.

This module does the low-level work of matching raw access log lines against
a single fixed pattern and pulling out the fields needed for aggregation:
client address, timestamp, request method, URL, status code and response size.

The parser is designed to be:
- Deterministic: the same input always produces the same records
- Forgiving: lines that don't match are skipped, never raised
- Literal: the timestamp is kept verbatim, nothing is date-parsed

Returned DataFrame columns (see records_to_frame):
- ipAddress: client address
- timestamp: bracketed timestamp text, e.g. 10/Oct/2023:13:55:36 -0700
- method: HTTP method (GET, POST, etc.)
- url: requested URL
- statusCode: HTTP response status code
- responseSize: response size in bytes ('-' becomes 0)
"""

from __future__ import annotations

import glob
import logging
import os
import re
from dataclasses import asdict, dataclass
from typing import Iterable, Iterator, List, Optional

import pandas as pd


logger = logging.getLogger(__name__)

# Groups, in order:
#  1 address, 2 identity (unused), 3 userid (unused), 4 timestamp,
#  5 method, 6 url, 7 protocol (unused), 8 status, 9 size (digits or '-')
LOG_RE = re.compile(
    r'^(\S+) (\S+) (\S+) \[([\w:/]+\s[+\-]\d{4})\] "(\S+) (\S+) (\S+)" (\d{3}) (\d+|-)'
)

RECORD_COLUMNS = ["ipAddress", "timestamp", "method", "url", "statusCode", "responseSize"]


@dataclass(frozen=True)
class LogRecord:
    ipAddress: str
    timestamp: str
    method: str
    url: str
    statusCode: int
    responseSize: int


@dataclass
class ParseStats:
    """Running counters for one parse pass. Diagnostic only."""
    lines: int = 0
    parsed: int = 0
    skipped: int = 0
    malformed: int = 0


def parse_line(line: str, stats: Optional[ParseStats] = None) -> Optional[LogRecord]:
    """
    Match one line against LOG_RE.
    Returns a LogRecord, or None when the line is not a combined-log entry.
    """
    if stats is not None:
        stats.lines += 1

    m = LOG_RE.match(line)
    if not m:
        if stats is not None:
            stats.skipped += 1
        return None

    size_raw = m.group(9)
    try:
        status = int(m.group(8))
        size = 0 if size_raw == "-" else int(size_raw)
    except ValueError:
        # the character classes should make this unreachable
        if stats is not None:
            stats.malformed += 1
        return None

    if stats is not None:
        stats.parsed += 1
    return LogRecord(
        ipAddress=m.group(1),
        timestamp=m.group(4),
        method=m.group(5),
        url=m.group(6),
        statusCode=status,
        responseSize=size,
    )


def resolve_input_paths(path: str) -> List[str]:
    """
    Expand an input path into the list of files to read.

    Accepts a single file, a directory (every visible regular file inside,
    sorted) or a glob. A file:// prefix is stripped; other schemes are not
    readable from here.
    """
    if "://" in path:
        scheme, rest = path.split("://", 1)
        if scheme.lower() != "file":
            raise ValueError(f"Unsupported input scheme '{scheme}://' in {path}")
        path = rest

    if any(c in path for c in ("*", "?", "[")):
        files = sorted(p for p in glob.glob(path) if os.path.isfile(p))
    elif os.path.isdir(path):
        files = sorted(
            os.path.join(path, name)
            for name in os.listdir(path)
            if not name.startswith((".", "_")) and os.path.isfile(os.path.join(path, name))
        )
    elif os.path.isfile(path):
        files = [path]
    else:
        raise FileNotFoundError(f"Input not found: {path}")

    if not files:
        raise FileNotFoundError(f"No input files found under {path}")
    return files


def iter_records(
    paths: Iterable[str],
    stats: Optional[ParseStats] = None,
    *,
    encoding: str = "utf-8",
) -> Iterator[LogRecord]:
    """Yield a LogRecord for every matching line across the given files."""
    for path in paths:
        logger.debug("Reading %s", path)
        with open(path, "r", encoding=encoding, errors="replace") as f:
            for line in f:
                record = parse_line(line.rstrip("\r\n"), stats)
                if record is not None:
                    yield record


def records_to_frame(records: Iterable[LogRecord]) -> pd.DataFrame:
    """Build a typed DataFrame (one row per record) from LogRecords."""
    df = pd.DataFrame([asdict(r) for r in records], columns=RECORD_COLUMNS)
    df["statusCode"] = df["statusCode"].astype("int64")
    df["responseSize"] = df["responseSize"].astype("int64")
    return df


def parse_access_logs(path: str, *, encoding: str = "utf-8") -> tuple[pd.DataFrame, ParseStats]:
    """
    Parse every file under `path` into a single record table.

    Returns (records_df, stats). An input with no matching lines gives an
    empty table with the usual columns, not an error.
    """
    stats = ParseStats()
    df = records_to_frame(iter_records(resolve_input_paths(path), stats, encoding=encoding))
    logger.info(
        "Parsed %d of %d lines (%d skipped, %d malformed)",
        stats.parsed, stats.lines, stats.skipped, stats.malformed,
    )
    return df, stats
