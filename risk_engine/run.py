#!/usr/bin/env python3
"""
CLI entry point for batch risk scoring.

Usage:
    # Score a snapshot CSV
    python -m risk_engine.run snapshots.csv --now 2025-03-01T12:00:00Z

    # Score generated sample clients with a tuned config
    python -m risk_engine.run --sample 200 --config configs/strict.yaml

    # Write ranked output and a JSON run log
    python -m risk_engine.run snapshots.csv --output ranked.csv --log-dir logs
"""

import argparse
import logging
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
from pandera.errors import SchemaError, SchemaErrors

from .config import ScoringConfig
from .logger import RunLogger
from .logging_config import setup_logging
from .orchestrator import BatchOrchestrator
from .snapshot import DataFrameSnapshotProvider, generate_sample_snapshots


def parse_now(value: str | None) -> datetime:
    """Parse --now as an aware UTC datetime (default: current time)."""
    if value is None:
        return datetime.now(timezone.utc)
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert("UTC").to_pydatetime()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Client engagement risk and churn forecasting",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m risk_engine.run snapshots.csv
  python -m risk_engine.run --sample 100 --top 10
  python -m risk_engine.run snapshots.csv --config tuned.yaml --output ranked.csv
        """,
    )

    parser.add_argument(
        "snapshots",
        nargs="?",
        help="Path to snapshot CSV (one row per client)",
    )
    parser.add_argument(
        "--sample",
        type=int,
        help="Score N generated sample clients instead of a CSV",
    )
    parser.add_argument(
        "--config",
        help="Path to YAML scoring config",
    )
    parser.add_argument(
        "--now",
        help="Reference time, ISO 8601 (default: current UTC time)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Maximum concurrent snapshot fetches",
    )
    parser.add_argument(
        "--output",
        help="Write ranked results to this CSV",
    )
    parser.add_argument(
        "--log-dir",
        help="Write a JSON run log to this directory",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=20,
        help="Rows to print (default: 20)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )

    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.snapshots is None and args.sample is None:
        parser.print_help()
        return 1

    try:
        config = ScoringConfig.from_yaml(args.config) if args.config else ScoringConfig()
        now = parse_now(args.now)

        if args.sample is not None:
            df = generate_sample_snapshots(n_clients=args.sample, now=now)
        else:
            path = Path(args.snapshots)
            if not path.exists():
                print(f"Snapshot file not found: {path}")
                return 1
            df = pd.read_csv(path)

        provider = DataFrameSnapshotProvider(df)
    except (OSError, TypeError, ValueError, SchemaError, SchemaErrors) as e:
        print(f"ERROR: {e}")
        return 1

    orchestrator = BatchOrchestrator(config, max_workers=args.workers)

    start = time.time()
    result = orchestrator.run(provider.client_ids, provider, now)
    elapsed = time.time() - start

    frame = result.to_frame()
    print(f"\n{'=' * 60}")
    print(f"Scored {len(result.results)} clients at {now.isoformat()} ({elapsed:.2f}s)")
    print("=" * 60)
    columns = ["CLIENT_ID", "URGENCY", "RISK_SCORE", "RISK_LEVEL", "TRAJECTORY", "DAYS_UNTIL_CHURN"]
    print(frame[columns].head(args.top).to_string(index=False))

    print("\nSummary:")
    print(result.summary().to_string())

    if result.failures:
        print(f"\nExcluded {len(result.failures)} clients:")
        for client_id, error in result.failures.items():
            print(f"  {client_id}: {error}")

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output, index=False)
        print(f"\nRanked results saved to: {output}")

    if args.log_dir:
        log_path = RunLogger(Path(args.log_dir)).log_run(result, config, now, elapsed)
        print(f"Run log saved to: {log_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
