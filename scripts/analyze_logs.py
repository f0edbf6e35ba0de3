"""
analyze_logs.py

Command-line entry point for the batch analysis.

Usage:
  python scripts/analyze_logs.py <input-path> <output-path>

Same as the installed `logtally-analyze` command.
"""

from logtally.cli import analyze_main


if __name__ == "__main__":
    raise SystemExit(analyze_main())
