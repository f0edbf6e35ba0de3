"""
cli.py

Command-line entry points.

  logtally-analyze <input-path> <output-path>
      Parse access logs, compute status_counts / top_urls / top_ips and write
      them as JSON-lines shards under <output-path>.

  logtally-view <output-path-or-url>
      Load the three result categories back and print a short summary: total
      requests, error rate, and each category's rows with their share.

Both commands take their defaults from PipelineConfig / ViewerConfig (and so
from LOGTALLY_* environment variables); flags override them.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from logtally.categories import CATEGORIES, STATUS_COUNTS
from logtally.config import PipelineConfig, ViewerConfig, split_probe_names
from logtally.ingest.access_parser import ParseStats, iter_records, resolve_input_paths
from logtally.tools.aggregate import aggregate_chunks
from logtally.tools.writer import write_results
from logtally.viewer.loader import LoadResult, NoUsableDataError, ResultLoader
from logtally.viewer.summary import format_stats, status_description, summary_stats, with_shares


logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _add_log_level(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOGTALLY_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO).",
    )


def _local_output(path: str) -> str:
    if "://" in path:
        scheme, rest = path.split("://", 1)
        if scheme.lower() != "file":
            raise ValueError(f"Unsupported output scheme '{scheme}://' in {path}")
        return rest
    return path


def run_analysis(input_path: str, output_path: str, config: PipelineConfig) -> ParseStats:
    """Parse, aggregate and write. Returns the parse counters."""
    paths = resolve_input_paths(input_path)
    output_root = _local_output(output_path)

    stats = ParseStats()
    records = iter_records(paths, stats, encoding=config.encoding)
    results = aggregate_chunks(records, chunk_size=config.chunk_size, top_n=config.top_n)

    logger.info(
        "Read %d line(s) from %d file(s): %d parsed, %d skipped, %d malformed",
        stats.lines, len(paths), stats.parsed, stats.skipped, stats.malformed,
    )
    write_results(output_root, results)
    return stats


def analyze_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="logtally-analyze",
        description="Compute status code counts, top URLs and top client addresses from access logs.",
    )
    parser.add_argument("input_path", help="Access log file, directory or glob.")
    parser.add_argument("output_path", help="Output root for the result directories.")
    parser.add_argument(
        "--top-n",
        type=int,
        default=None,
        help="Rows kept in top_urls/top_ips (default: LOGTALLY_TOP_N or 10).",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Records counted per partial aggregate (default: LOGTALLY_CHUNK_SIZE or 50000).",
    )
    _add_log_level(parser)
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    try:
        env = PipelineConfig.from_env()
        config = PipelineConfig(
            top_n=args.top_n if args.top_n is not None else env.top_n,
            chunk_size=args.chunk_size if args.chunk_size is not None else env.chunk_size,
            encoding=env.encoding,
        )
        run_analysis(args.input_path, args.output_path, config)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return 1
    return 0


def format_summary(result: LoadResult, limit: int = 10) -> str:
    lines: List[str] = format_stats(summary_stats(result))
    for category in CATEGORIES:
        lines.append("")
        lines.append(f"== {category} ==")
        rows = result.rows(category)
        if rows is None:
            lines.append("  (unavailable)")
            continue
        if not rows:
            lines.append("  (empty)")
            continue
        for row, share in with_shares(rows)[:limit]:
            line = f"  {row.dimension:<40} {row.count:>8} {share:>7.2f}%"
            if category == STATUS_COUNTS:
                line += f"  {status_description(row.dimension)}"
            lines.append(line)
    if result.missing:
        lines.append("")
        lines.append(f"Missing: {', '.join(result.missing)}")
    return "\n".join(lines)


def view_main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="logtally-view",
        description="Load analysis results and print a summary.",
    )
    parser.add_argument("output_path", nargs="?", help="Output root directory or http(s) URL.")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds.")
    parser.add_argument(
        "--probe-name",
        action="append",
        default=[],
        metavar="[CATEGORY=]NAME",
        help=(
            "Shard file name to try when listing is not possible (repeatable). "
            "Prefix with a category, e.g. top_urls=part-00000-<id>-c000.json, "
            "to try it for that category only."
        ),
    )
    parser.add_argument("--limit", type=int, default=10, help="Rows printed per category.")
    _add_log_level(parser)
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    try:
        env = ViewerConfig.from_env(args.output_path)
        shared, per_category = split_probe_names(args.probe_name)
    except ValueError as e:
        logger.error("%s", e)
        return 1

    for category, names in env.category_probe_names.items():
        per_category[category] = per_category.get(category, ()) + names
    config = ViewerConfig(
        base_path=env.base_path,
        timeout=args.timeout if args.timeout is not None else env.timeout,
        probe_names=shared + env.probe_names,
        category_probe_names=per_category,
        max_workers=len(CATEGORIES),
    )

    with ResultLoader.from_config(config) as loader:
        try:
            result = loader.load_all()
        except NoUsableDataError as e:
            print(str(e), file=sys.stderr)
            return 1

    print(format_summary(result, limit=args.limit))
    return 0
