"""
validate_all.py

One-command end-to-end validation runner for the logtally pipeline.

This script executes the full workflow in a fixed order:
1) Smoke test (parse + aggregate assertions)
2) Ingest validation (parse stats and dtypes)
3) Round trip (write shards, load them back, compare totals)
4) Unit tests (pytest), unless skipped

It is designed to be:
- easy to run locally
- CI-friendly (exits non-zero on failure)
- readable (prints clear step-by-step output)

Usage:
  python scripts/validate_all.py
  python scripts/validate_all.py --skip-tests
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from dataclasses import dataclass
from typing import List


@dataclass
class Step:
    name: str
    cmd: List[str]


def run_step(step: Step) -> None:
    print(f"\n=== {step.name} ===")
    print("$ " + " ".join(step.cmd))
    res = subprocess.run(step.cmd)
    if res.returncode != 0:
        raise RuntimeError(f"Step failed: {step.name} (exit code {res.returncode})")


def main() -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--skip-tests",
        action="store_true",
        help="Skip the pytest run (faster local runs).",
    )
    args = parser.parse_args()

    steps: List[Step] = [
        Step("Smoke test", [sys.executable, "scripts/smoke_test.py"]),
        Step("Ingest validation", [sys.executable, "scripts/validate_ingest.py"]),
        Step("Round trip", [sys.executable, "scripts/validate_roundtrip.py"]),
    ]

    if not args.skip_tests:
        steps.append(Step("Unit tests", [sys.executable, "-m", "pytest", "-q"]))

    failures: List[str] = []

    for step in steps:
        try:
            run_step(step)
            print("PASS")
        except RuntimeError as e:
            print("FAIL")
            print(str(e), file=sys.stderr)
            failures.append(step.name)
            break  # fail fast

    print("\n=== Summary ===")
    if not failures:
        print("All validations passed")
        return 0

    print("Failed step(s):")
    for name in failures:
        print(f"- {name}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
