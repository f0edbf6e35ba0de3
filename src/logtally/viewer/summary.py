"""
summary.py

Headline numbers for a loaded result set.

  - total requests (sum of the status code counts)
  - 4xx / 5xx counts, and the error rate as a percentage of all requests
  - number of URLs and client addresses listed in the top tables
  - per-row share of its category, as a percentage

Everything here works on the loaded rows only, so the URL and address
numbers describe the (truncated) top lists, not the whole log.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from logtally.categories import STATUS_COUNTS, TOP_IPS, TOP_URLS
from logtally.viewer.loader import LoadResult
from logtally.viewer.normalize import CanonicalRow


STATUS_DESCRIPTIONS: Dict[str, str] = {
    "200": "OK - Success",
    "301": "Moved Permanently",
    "302": "Found (Temporary Redirect)",
    "400": "Bad Request",
    "401": "Unauthorized",
    "403": "Forbidden",
    "404": "Not Found",
    "500": "Internal Server Error",
    "502": "Bad Gateway",
    "503": "Service Unavailable",
}


def status_description(code: str) -> str:
    return STATUS_DESCRIPTIONS.get(str(code).strip(), "Unknown Status")


def _safe_div(n: int, d: int) -> float:
    """n / d, or 0.0 when d is 0."""
    return float(n) / float(d) if d else 0.0


def percent(n: int, d: int) -> float:
    return round(_safe_div(n, d) * 100, 2)


def with_shares(rows: Sequence[CanonicalRow]) -> List[Tuple[CanonicalRow, float]]:
    """Pair each row with its percentage of the category's total count."""
    total = sum(row.count for row in rows)
    return [(row, percent(row.count, total)) for row in rows]


def summary_stats(result: LoadResult) -> Dict[str, Any]:
    """
    Request totals and error rates from status_counts, plus the sizes of the
    top lists. Values that depend on a missing category are None.
    """
    status = result.rows(STATUS_COUNTS)
    urls = result.rows(TOP_URLS)
    ips = result.rows(TOP_IPS)

    stats: Dict[str, Any] = {
        "total_requests": None,
        "4xx_count": None,
        "5xx_count": None,
        "error_rate": None,
        "urls_listed": len(urls) if urls is not None else None,
        "ips_listed": len(ips) if ips is not None else None,
    }
    if status is None:
        return stats

    total = sum(row.count for row in status)
    c4 = sum(row.count for row in status if row.dimension.startswith("4"))
    c5 = sum(row.count for row in status if row.dimension.startswith("5"))
    stats["total_requests"] = total
    stats["4xx_count"] = c4
    stats["5xx_count"] = c5
    stats["error_rate"] = percent(c4 + c5, total)
    return stats


def _or_na(value: Optional[Any]) -> str:
    return "n/a" if value is None else str(value)


def format_stats(stats: Dict[str, Any]) -> List[str]:
    rate = stats["error_rate"]
    return [
        f"Total requests: {_or_na(stats['total_requests'])}",
        f"Error rate (4xx/5xx): {'n/a' if rate is None else f'{rate:.2f}%'}",
        f"URLs listed: {_or_na(stats['urls_listed'])}",
        f"Client addresses listed: {_or_na(stats['ips_listed'])}",
    ]
