"""
normalize.py

Reconciles loaded result rows into one canonical shape per category.

Different versions of the batch job wrote the same facts under different
field names: named fields ({"statusCode": 200, "count": 5}), tuple-style
fields ({"_1": 200, "_2": 5}) or plain positional arrays ([200, 5]). For each
category we keep an ordered list of candidate names for the dimension value
and for the count, and take the first candidate present in the row.

Canonical row: CanonicalRow(dimension=<str>, count=<int>).

Rules:
- a missing or unparsable count becomes 0, the row is still kept
- a row with no dimension value at all is dropped (and counted)
- malformed JSON lines are skipped one by one
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from logtally.categories import STATUS_COUNTS, TOP_IPS, TOP_URLS


logger = logging.getLogger(__name__)

Candidate = Union[str, int]


@dataclass(frozen=True)
class FieldCandidates:
    dimension: Tuple[Candidate, ...]
    count: Tuple[Candidate, ...]


# Priority order matters: named fields first, then tuple-style, then position.
FIELD_CANDIDATES: Dict[str, FieldCandidates] = {
    STATUS_COUNTS: FieldCandidates(
        dimension=("statusCode", "status", "_1", 0),
        count=("count", "_2", 1),
    ),
    TOP_URLS: FieldCandidates(
        dimension=("url", "_1", 0),
        count=("count", "_2", 1),
    ),
    TOP_IPS: FieldCandidates(
        dimension=("ipAddress", "ip", "_1", 0),
        count=("count", "_2", 1),
    ),
}


@dataclass(frozen=True)
class CanonicalRow:
    dimension: str
    count: int


def parse_json_lines(text: str) -> Tuple[List[Any], int]:
    """
    Parse JSON-lines text. Returns (rows, malformed_line_count).
    Blank lines are ignored, malformed lines are skipped.
    """
    rows: List[Any] = []
    malformed = 0
    for line_no, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            rows.append(json.loads(line))
        except (ValueError, RecursionError) as e:
            # ValueError also covers integers past the int string-conversion limit
            malformed += 1
            logger.warning("Skipping malformed JSON line %d: %s", line_no, e)
    return rows, malformed


def _lookup(row: Any, candidates: Sequence[Candidate]) -> Optional[Any]:
    """First candidate present in `row` (None values count as absent)."""
    for candidate in candidates:
        if isinstance(row, dict):
            value = row.get(str(candidate))
        elif isinstance(row, (list, tuple)) and isinstance(candidate, int):
            value = row[candidate] if candidate < len(row) else None
        else:
            continue
        if value is not None:
            return value
    return None


def coerce_count(value: Any) -> int:
    """Best-effort integer conversion; anything unusable becomes 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return 0
        return int(number) if math.isfinite(number) else 0
    return 0


def _dimension_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_row(category: str, row: Any) -> Optional[CanonicalRow]:
    """Map one raw row to a CanonicalRow, or None if it has no dimension value."""
    fields = FIELD_CANDIDATES[category]
    dimension = _lookup(row, fields.dimension)
    if dimension is None or (isinstance(dimension, (dict, list))):
        return None
    text = _dimension_text(dimension)
    if not text:
        return None
    return CanonicalRow(dimension=text, count=coerce_count(_lookup(row, fields.count)))


def normalize_rows(category: str, rows: Sequence[Any]) -> List[CanonicalRow]:
    """
    Normalize all rows of a category, sorted by count descending (ties by
    dimension ascending).
    """
    if category not in FIELD_CANDIDATES:
        raise ValueError(f"Unknown result category: {category}")

    out: List[CanonicalRow] = []
    dropped = 0
    for row in rows:
        canonical = normalize_row(category, row)
        if canonical is None:
            dropped += 1
            continue
        out.append(canonical)

    if dropped:
        logger.warning("Dropped %d %s row(s) with no dimension value", dropped, category)
    return sorted(out, key=lambda r: (-r.count, r.dimension))
