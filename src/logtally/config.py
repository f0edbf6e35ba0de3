"""
config.py

Runtime settings for the batch analyzer and the result viewer.

Both configs are plain frozen dataclasses with sensible defaults. `from_env()`
lets a deployment override the defaults with LOGTALLY_* environment variables;
command-line flags override both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from logtally.categories import CATEGORIES


DEFAULT_BASE_PATH = "../data/log_analysis_output/"

# generic shard name tried when nothing better is known
FALLBACK_SHARD_NAME = "part-00000.json"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def split_probe_names(entries: Iterable[str]) -> Tuple[Tuple[str, ...], Dict[str, Tuple[str, ...]]]:
    """
    Split shard-name entries into shared names and per-category names.

    An entry is either a bare file name (tried for every category) or
    `<category>=<file name>` (tried for that category only, before the shared
    names).
    """
    shared = []
    per_category: Dict[str, list] = {}
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        if "=" in entry:
            category, name = (part.strip() for part in entry.split("=", 1))
            if category not in CATEGORIES:
                raise ValueError(f"Unknown result category in shard name {entry!r}")
            if not name:
                raise ValueError(f"Missing file name in shard name {entry!r}")
            per_category.setdefault(category, []).append(name)
        else:
            shared.append(entry)
    return tuple(shared), {c: tuple(names) for c, names in per_category.items()}


@dataclass(frozen=True)
class PipelineConfig:
    """
    Settings for the extraction + aggregation run.

    top_n:
      Row limit for the top_urls and top_ips categories.
    chunk_size:
      Records per partial count. Partial counts are merged before ranking.
    encoding:
      Encoding used to read input files (undecodable bytes are replaced).
    """
    top_n: int = 10
    chunk_size: int = 50_000
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        if self.top_n < 1:
            raise ValueError(f"top_n must be at least 1, got {self.top_n}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {self.chunk_size}")

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        return cls(
            top_n=_env_int("LOGTALLY_TOP_N", cls.top_n),
            chunk_size=_env_int("LOGTALLY_CHUNK_SIZE", cls.chunk_size),
        )


@dataclass(frozen=True)
class ViewerConfig:
    """
    Settings for locating and loading results.

    base_path:
      Output root, either a local directory or an http(s) URL.
    timeout:
      Seconds allowed for each HTTP request. A timeout makes the category
      unavailable.
    probe_names:
      Extra shard names to try when the source cannot list directories.
    category_probe_names:
      Shard names to try first for one category (category -> names).
    """
    base_path: str = DEFAULT_BASE_PATH
    timeout: float = 10.0
    probe_names: Tuple[str, ...] = field(default_factory=tuple)
    category_probe_names: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    max_workers: int = 3

    @classmethod
    def from_env(cls, base_path: Optional[str] = None) -> "ViewerConfig":
        raw_names = os.getenv("LOGTALLY_PROBE_NAMES", "")
        names, per_category = split_probe_names(raw_names.split(","))
        return cls(
            base_path=base_path or os.getenv("LOGTALLY_BASE_PATH", DEFAULT_BASE_PATH),
            timeout=_env_float("LOGTALLY_TIMEOUT", cls.timeout),
            probe_names=names,
            category_probe_names=per_category,
        )
