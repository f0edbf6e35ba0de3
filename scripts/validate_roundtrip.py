"""
validate_roundtrip.py

Runs the full producer + consumer round trip on the sample log.

Steps:
1) analyze examples/sample_access.log into artifacts/log_analysis_output
2) load the three categories back through the viewer loader
3) check the totals line up and print the loaded rows

Exits non-zero if the round trip does not hold together.
"""

import sys

from logtally.categories import CATEGORIES
from logtally.cli import format_summary, run_analysis
from logtally.config import PipelineConfig
from logtally.viewer.discovery import LocalResultSource
from logtally.viewer.loader import ResultLoader

LOG_PATH = "examples/sample_access.log"
OUT_PATH = "artifacts/log_analysis_output"

stats = run_analysis(LOG_PATH, OUT_PATH, PipelineConfig())
print("Wrote", OUT_PATH)
print("parsed:", stats.parsed, "skipped:", stats.skipped, "malformed:", stats.malformed)

with ResultLoader(LocalResultSource(OUT_PATH)) as loader:
    result = loader.load_all()
    print("discovered:", loader.loading_info()["discovered_files"])

print(format_summary(result))

status_total = sum(r.count for r in result.rows("status_counts"))
if status_total != stats.parsed:
    print(f"status_counts total {status_total} != parsed records {stats.parsed}", file=sys.stderr)
    sys.exit(1)
if result.missing:
    print("missing categories:", result.missing, file=sys.stderr)
    sys.exit(1)
print("OK:", ", ".join(f"{c}={len(result.rows(c))}" for c in CATEGORIES))
