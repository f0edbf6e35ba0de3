"""
loader.py

Loads all three result categories for display.

For each category the loader discovers the shard names, fetches and parses the
JSON lines, and normalizes the rows. Categories are independent: they are
loaded concurrently and each one may fail on its own. A missing category is
reported, not raised. Only when every category is missing does the loader
raise NoUsableDataError.

Discovered shard names are cached on the loader instance so a reload does
not repeat discovery. Separate loaders never share that cache.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import httpx

from logtally.categories import CATEGORIES
from logtally.config import ViewerConfig
from logtally.viewer.discovery import (
    CategoryUnavailable,
    ListingStrategy,
    ProbingStrategy,
    ResultDiscovery,
    open_source,
)
from logtally.viewer.normalize import CanonicalRow, normalize_rows, parse_json_lines


logger = logging.getLogger(__name__)

REMEDIATION = (
    "No analysis results could be loaded. Check that:\n"
    "  1. the batch analysis job ran and finished successfully\n"
    "  2. the output path points at the job's output root "
    "(the directory holding status_counts/, top_urls/ and top_ips/)\n"
    "  3. the results are reachable from here (local path readable, or the "
    "static file server is running and serving that directory)"
)


class NoUsableDataError(RuntimeError):
    """Every result category was unavailable."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        details = "\n".join(f"  - {c}: {msg}" for c, msg in errors.items())
        super().__init__(f"{REMEDIATION}\n\nDetails:\n{details}")


@dataclass
class CategoryResult:
    category: str
    rows: List[CanonicalRow]
    shards: List[str]
    malformed_lines: int = 0


@dataclass
class LoadResult:
    categories: Dict[str, CategoryResult] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def missing(self) -> List[str]:
        return [c for c in CATEGORIES if c not in self.categories]

    @property
    def is_partial(self) -> bool:
        return bool(self.missing)

    def rows(self, category: str) -> Optional[List[CanonicalRow]]:
        result = self.categories.get(category)
        return result.rows if result is not None else None


class ResultLoader:
    def __init__(self, source, discovery: Optional[ResultDiscovery] = None, *, max_workers: int = 3):
        self.source = source
        self.discovery = discovery or ResultDiscovery(source)
        self.max_workers = max_workers
        self._discovered: Dict[str, List[str]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ViewerConfig, *, client: Optional[httpx.Client] = None) -> "ResultLoader":
        source = open_source(config.base_path, timeout=config.timeout, client=client)
        discovery = ResultDiscovery(
            source,
            [
                ListingStrategy(),
                ProbingStrategy(config.probe_names, per_category=config.category_probe_names),
            ],
        )
        return cls(source, discovery, max_workers=config.max_workers)

    def __enter__(self) -> "ResultLoader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.source.close()

    # --- per category ----------------------------------------------------

    def _cached(self, category: str) -> Optional[List[str]]:
        with self._lock:
            return self._discovered.get(category)

    def _remember(self, category: str, names: Optional[List[str]]) -> None:
        with self._lock:
            if names:
                self._discovered[category] = list(names)
            else:
                self._discovered.pop(category, None)

    def _fetch(self, category: str, names: List[str]) -> Tuple[List[object], int]:
        rows: List[object] = []
        malformed = 0
        for name in names:
            text = self.source.read_text(category, name)
            shard_rows, shard_bad = parse_json_lines(text)
            rows.extend(shard_rows)
            malformed += shard_bad
        if malformed and not rows:
            logger.warning("Every line of %s was malformed; treating it as empty", category)
        return rows, malformed

    def load_category(self, category: str) -> CategoryResult:
        """
        Discover, fetch and normalize one category.
        Raises CategoryUnavailable when no shard can be found or read.
        """
        names = self._cached(category)
        raw: Optional[Tuple[List[object], int]] = None

        if names:
            try:
                raw = self._fetch(category, names)
            except (OSError, UnicodeDecodeError, httpx.HTTPError) as e:
                # shard was replaced by a newer run
                logger.info("Cached shard for %s is gone (%s); rediscovering", category, e)
                self._remember(category, None)
                names = None

        if raw is None:
            names = self.discovery.discover(category)
            try:
                raw = self._fetch(category, names)
            except (OSError, UnicodeDecodeError, httpx.HTTPError) as e:
                raise CategoryUnavailable(f"Could not read {category}: {e}") from e
            self._remember(category, names)

        rows, malformed = raw
        return CategoryResult(
            category=category,
            rows=normalize_rows(category, rows),
            shards=list(names),
            malformed_lines=malformed,
        )

    # --- all categories --------------------------------------------------

    def _try_load(self, category: str) -> Tuple[str, Optional[CategoryResult], Optional[str]]:
        try:
            return category, self.load_category(category), None
        except CategoryUnavailable as e:
            logger.warning("Could not load %s: %s", category, e)
            return category, None, str(e)
        except Exception as e:
            # one bad category must not take the others down with it
            logger.exception("Unexpected error loading %s", category)
            return category, None, f"Could not load {category}: {e!r}"

    def load_all(self) -> LoadResult:
        """
        Load every category concurrently.
        Returns a LoadResult (possibly partial); raises NoUsableDataError
        when no category could be loaded.
        """
        result = LoadResult()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            for category, loaded, error in pool.map(self._try_load, CATEGORIES):
                if loaded is not None:
                    result.categories[category] = loaded
                else:
                    result.errors[category] = error or "unavailable"

        if not result.categories:
            raise NoUsableDataError(result.errors)

        logger.info(
            "Loaded %s",
            ", ".join(f"{c}={len(r.rows)}" for c, r in result.categories.items()),
        )
        if result.missing:
            logger.warning("Missing categories: %s", ", ".join(result.missing))
        return result

    def loading_info(self) -> Dict[str, object]:
        with self._lock:
            discovered = {c: list(n) for c, n in self._discovered.items()}
        return {"discovered_files": discovered, "base_path": self.source.base}
