"""
make_sample_log.py

Generates a synthetic access log in combined log format for demos and load
checks.

Traffic is skewed on purpose: a few URLs and clients get most of the
requests, so the top-10 tables have a clear head and a long tail. A small
fraction of lines can be made unparseable to exercise the skip path.

Example:
  python scripts/make_sample_log.py --out examples/generated_access.log \
    --lines 100000 --bad-rate 0.01 --seed 42
"""

from __future__ import annotations

import argparse
import random
from datetime import datetime, timedelta, timezone
from typing import List

METHODS = ["GET"] * 8 + ["POST", "PUT", "DELETE"]
STATUSES = [200] * 40 + [304] * 6 + [302] * 3 + [404] * 5 + [403, 500, 502, 201, 204]
PROTOCOLS = ["HTTP/1.1"] * 5 + ["HTTP/2.0", "HTTP/1.0"]


def _zipf_pool(prefix: str, size: int) -> List[str]:
    # item i appears roughly size / (i + 1) times
    pool: List[str] = []
    for i in range(size):
        pool.extend([f"{prefix}{i}"] * max(1, size // (i + 1)))
    return pool


def format_line(ip: str, ts: datetime, method: str, url: str, proto: str, status: int, size: int) -> str:
    size_field = "-" if size == 0 else str(size)
    return (
        f'{ip} - - [{ts.strftime("%d/%b/%Y:%H:%M:%S %z")}] '
        f'"{method} {url} {proto}" {status} {size_field}'
    )


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--out", dest="out_path", required=True, help="Output log file")
    ap.add_argument("--lines", type=int, default=10_000, help="Number of lines (default: 10000)")
    ap.add_argument("--urls", type=int, default=60, help="Distinct URLs (default: 60)")
    ap.add_argument("--clients", type=int, default=200, help="Distinct client addresses (default: 200)")
    ap.add_argument(
        "--bad-rate",
        type=float,
        default=0.0,
        help="Fraction of lines written in a non-matching format (default: 0)",
    )
    ap.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = ap.parse_args()

    if not (0.0 <= args.bad_rate <= 1.0):
        raise ValueError("--bad-rate must be between 0 and 1")

    random.seed(args.seed)
    urls = _zipf_pool("/page/", args.urls)
    clients = [f"10.{i // 65536 % 256}.{i // 256 % 256}.{i % 256}" for i in range(args.clients)]
    client_pool = [c for i, c in enumerate(clients) for _ in range(max(1, args.clients // (i + 1)))]

    ts = datetime(2023, 10, 10, 13, 0, 0, tzinfo=timezone(timedelta(hours=-7)))
    bad = 0
    with open(args.out_path, "w", encoding="utf-8") as fout:
        for _ in range(args.lines):
            ts += timedelta(seconds=random.randint(0, 3))
            if random.random() < args.bad_rate:
                fout.write(f"{ts.isoformat()} upstream timed out\n")
                bad += 1
                continue
            status = random.choice(STATUSES)
            size = 0 if status in (204, 304) else random.randint(100, 50_000)
            fout.write(
                format_line(
                    random.choice(client_pool),
                    ts,
                    random.choice(METHODS),
                    random.choice(urls),
                    random.choice(PROTOCOLS),
                    status,
                    size,
                )
                + "\n"
            )

    print("=== Sample Log Summary ===")
    print("Lines:", args.lines)
    print("Unparseable lines:", bad)
    print("Output file:", args.out_path)


if __name__ == "__main__":
    main()
