"""
discovery.py

Finds the shard files of a result category without knowing their names.

The batch job names its shards per run (part-00000-<uuid>-c000.json), so a
reader has to find them. Two things vary between environments:

- the source: a local directory can be listed, a static HTTP server usually
  cannot;
- the strategy: list and filter when listing works, otherwise probe a short
  ordered list of likely names.

ResultDiscovery tries its strategies in order and stops at the first one that
finds something. When none does, the category is unavailable.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import httpx

from logtally.categories import SUCCESS_MARKER
from logtally.config import FALLBACK_SHARD_NAME


logger = logging.getLogger(__name__)

SHARD_PREFIX = "part-"
SHARD_SUFFIX = ".json"


class CategoryUnavailable(LookupError):
    """No readable shard could be found for a category."""


# --- Sources -------------------------------------------------------------

class LocalResultSource:
    """Output root on the local filesystem. Supports listing."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.base = str(self.root)

    def location(self, category: str, name: str = "") -> str:
        return str(self.root / category / name) if name else str(self.root / category)

    def list_names(self, category: str) -> Optional[List[str]]:
        directory = self.root / category
        if not directory.is_dir():
            return []
        return sorted(entry.name for entry in directory.iterdir() if entry.is_file())

    def exists(self, category: str, name: str) -> bool:
        return (self.root / category / name).is_file()

    def read_text(self, category: str, name: str) -> str:
        # undecodable bytes become U+FFFD, same as over HTTP
        with open(self.root / category / name, "r", encoding="utf-8", errors="replace") as f:
            return f.read()

    def close(self) -> None:
        pass


class HttpResultSource:
    """
    Output root served over HTTP(S). Listing is not available, so discovery
    falls back to probing names with HEAD requests.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.base = self.base_url
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def location(self, category: str, name: str = "") -> str:
        return f"{self.base_url}{category}/{name}"

    def list_names(self, category: str) -> Optional[List[str]]:
        return None

    def exists(self, category: str, name: str) -> bool:
        url = self.location(category, name)
        try:
            response = self.client.head(url)
        except httpx.HTTPError as e:
            logger.debug("Probe of %s failed: %s", url, e)
            return False
        return response.is_success

    def read_text(self, category: str, name: str) -> str:
        response = self.client.get(self.location(category, name))
        response.raise_for_status()
        return response.text

    def close(self) -> None:
        if self._owns_client:
            self.client.close()


def open_source(base_path: str, *, timeout: float = 10.0, client: Optional[httpx.Client] = None):
    """Pick a source for `base_path`: http(s) URLs go over HTTP, the rest is local."""
    if base_path.startswith(("http://", "https://")):
        return HttpResultSource(base_path, timeout=timeout, client=client)
    if base_path.startswith("file://"):
        base_path = base_path[len("file://"):]
    return LocalResultSource(os.path.expanduser(base_path))


# --- Strategies ----------------------------------------------------------

class ListingStrategy:
    """Enumerate the category directory and keep part-*.json entries."""

    name = "listing"

    def __init__(self, prefix: str = SHARD_PREFIX, suffix: str = SHARD_SUFFIX):
        self.prefix = prefix
        self.suffix = suffix

    def find(self, source, category: str) -> List[str]:
        names = source.list_names(category)
        if names is None:
            return []
        return [n for n in names if n.startswith(self.prefix) and n.endswith(self.suffix)]


class ProbingStrategy:
    """
    Try likely shard names one by one and return the first that exists.
    Order: names recorded in the category's _SUCCESS marker by the writer,
    names known for this category (seen in earlier deployments), shared
    candidates, then the generic fallback.
    """

    name = "probing"

    def __init__(
        self,
        candidates: Iterable[str] = (),
        *,
        per_category: Optional[Dict[str, Sequence[str]]] = None,
        fallback: str = FALLBACK_SHARD_NAME,
        marker: Optional[str] = SUCCESS_MARKER,
    ):
        self.candidates = tuple(candidates)
        self.per_category = dict(per_category or {})
        self.fallback = fallback
        self.marker = marker

    def probe_order(self, category: str) -> List[str]:
        ordered: List[str] = []
        for name in (*self.per_category.get(category, ()), *self.candidates, self.fallback):
            if name not in ordered:
                ordered.append(name)
        return ordered

    def marker_names(self, source, category: str) -> List[str]:
        """Shard names listed in the marker file; empty when there is none."""
        if not self.marker:
            return []
        try:
            text = source.read_text(category, self.marker)
        except (OSError, httpx.HTTPError) as e:
            logger.debug("No readable %s for %s: %s", self.marker, category, e)
            return []
        names = []
        for line in text.splitlines():
            name = line.strip()
            # plain shard file names only
            if name.startswith(SHARD_PREFIX) and name.endswith(SHARD_SUFFIX) and "/" not in name:
                names.append(name)
        return names

    def find(self, source, category: str) -> List[str]:
        ordered = self.marker_names(source, category)
        ordered += [n for n in self.probe_order(category) if n not in ordered]
        for name in ordered:
            if source.exists(category, name):
                return [name]
        return []


class ResultDiscovery:
    """Runs discovery strategies in order; the first non-empty answer wins."""

    def __init__(self, source, strategies: Optional[Sequence] = None):
        self.source = source
        self.strategies = list(strategies) if strategies is not None else [
            ListingStrategy(),
            ProbingStrategy(),
        ]

    def discover(self, category: str) -> List[str]:
        for strategy in self.strategies:
            try:
                names = strategy.find(self.source, category)
            except OSError as e:
                logger.warning("%s discovery failed for %s: %s", strategy.name, category, e)
                continue
            if names:
                logger.debug("%s discovery found %s for %s", strategy.name, names, category)
                return names
        raise CategoryUnavailable(
            f"No shard file found for {category} at {self.source.location(category)}"
        )
