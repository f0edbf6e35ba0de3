"""
show_results.py

Loads the three result categories from an output root (local directory or
http(s) URL) and prints them.

Usage:
  python scripts/show_results.py artifacts/log_analysis_output
  python scripts/show_results.py http://127.0.0.1:8000/data/log_analysis_output/

Same as the installed `logtally-view` command.
"""

from logtally.cli import view_main


if __name__ == "__main__":
    raise SystemExit(view_main())
