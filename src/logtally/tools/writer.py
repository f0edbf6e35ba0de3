"""
writer.py

Persists result tables as directories of line-delimited JSON shards.

Layout under the output root:
  <root>/status_counts/part-00000-<uuid>-c000.json   {"statusCode": 200, "count": 5}
  <root>/top_urls/part-00000-<uuid>-c000.json        {"url": "/index.html", "count": 5}
  <root>/top_ips/part-00000-<uuid>-c000.json         {"ipAddress": "10.0.0.5", "count": 5}

Shard names are generated per run, so readers must discover them (see
logtally.viewer). Each category directory also gets a _SUCCESS marker whose
content is the shard names, one per line; readers that cannot list the
directory (a static HTTP server) read the marker instead.

Writing a category replaces the whole directory: the new contents are staged
in a sibling directory and swapped in with two renames (old out, new in).
Between the renames the category directory does not exist, so a reader in
that window finds the category unavailable. Categories are written
independently, there is no transaction across the three.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from logtally.categories import CATEGORY_KEYS, SUCCESS_MARKER


logger = logging.getLogger(__name__)

SHARD_PREFIX = "part-"


def _shard_name() -> str:
    return f"{SHARD_PREFIX}00000-{uuid.uuid4()}-c000.json"


def _json_rows(category: str, table: pd.DataFrame) -> List[Dict[str, Any]]:
    """Rows as plain Python dicts in the category's field names."""
    key = CATEGORY_KEYS[category]
    rows: List[Dict[str, Any]] = []
    for value, count in zip(table[key], table["count"]):
        # numpy scalars are not JSON serializable
        value = int(value) if key == "statusCode" else str(value)
        rows.append({key: value, "count": int(count)})
    return rows


def write_category(output_root: str | Path, category: str, table: pd.DataFrame) -> Path:
    """
    Write one category's rows to <output_root>/<category>/, replacing any
    previous contents. Returns the path of the shard written.
    """
    if category not in CATEGORY_KEYS:
        raise ValueError(f"Unknown result category: {category}")

    root = Path(output_root)
    root.mkdir(parents=True, exist_ok=True)
    target = root / category
    staging = root / f".{category}.{uuid.uuid4().hex}.tmp"

    staging.mkdir()
    try:
        shard = staging / _shard_name()
        lines = [json.dumps(row, ensure_ascii=False) for row in _json_rows(category, table)]
        shard.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        (staging / SUCCESS_MARKER).write_text(shard.name + "\n", encoding="utf-8")

        if target.exists():
            old = root / f".{category}.{uuid.uuid4().hex}.old"
            os.replace(target, old)
            # no category directory until the next rename lands
            os.replace(staging, target)
            shutil.rmtree(old)
        else:
            os.replace(staging, target)
    finally:
        if staging.exists():
            shutil.rmtree(staging)

    logger.info("Wrote %d row(s) to %s", len(table), target)
    return target / shard.name


def write_results(output_root: str | Path, results: Dict[str, pd.DataFrame]) -> Dict[str, Path]:
    """Write every category in `results`. Returns category -> shard path."""
    return {category: write_category(output_root, category, table) for category, table in results.items()}
