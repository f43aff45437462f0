"""
Validate Locust CSV output against threshold configuration.

After a headless Locust run with ``--csv <prefix>``, CI invokes this
script to decide whether the build passes or fails.  It reads the
``<prefix>_stats.csv`` file, picks out the two rows the business
abilities scenario writes, and compares them against the limits in
:file:`thresholds.yml`:

- ``POST BusinessAbilitiesQuery`` — the GraphQL request itself
  (P95 latency, HTTP error rate)
- ``ITERATION BusinessAbilitiesQuery`` — one row per iteration
  (iteration P95, check error rate)

Exit codes follow a three-state convention so that CI can distinguish
"thresholds breached" from "script crashed":

- ``0`` — all thresholds passed
- ``1`` — at least one threshold was breached
- ``2`` — the script itself failed (missing file, bad YAML, etc.)

Usage::

    python -m load_tests.check_thresholds --stats results_stats.csv
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path

import yaml

from config import Config
from load_tests.metrics import HTTP_REQUEST_TYPE, ITERATION_REQUEST_TYPE
from load_tests.thresholds import (
    CHECK_ERROR_RATE_PERCENT,
    HTTP_ERROR_RATE_PERCENT,
    HTTP_P95_MS,
    ITERATION_P95_MS,
    all_passed,
    evaluate,
    load_thresholds,
    summary_lines,
)

# Three-state exit codes so CI can tell "test failed" from "script crashed".
EXIT_PASS = 0
EXIT_THRESHOLD_BREACH = 1
EXIT_SCRIPT_ERROR = 2

# Locust 2.x writes "95%"; older releases wrote "95%ile".
P95_COLUMNS = ("95%", "95%ile")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for the threshold checker."""
    parser = argparse.ArgumentParser(
        description="Check Locust stats CSV against performance thresholds."
    )
    parser.add_argument(
        "--stats",
        required=True,
        type=Path,
        help="Path to Locust *_stats.csv file",
    )
    parser.add_argument(
        "--thresholds",
        type=Path,
        default=Config.THRESHOLDS_PATH,
        help="Path to thresholds YAML file",
    )
    parser.add_argument(
        "--name",
        default=Config.REQUEST_NAME,
        help="Stats entry name used by the scenario",
    )
    return parser.parse_args(argv)


def _load_rows(stats_path: Path) -> list[dict[str, str]]:
    with stats_path.open("r", encoding="utf-8", newline="") as handle:
        return list(csv.DictReader(handle))


def _find_row(rows: list[dict[str, str]], request_type: str, name: str) -> dict[str, str]:
    """
    Return the stats row for one ``(Type, Name)`` entry.

    Raises:
        ValueError: If no such row exists.
    """
    for row in rows:
        if row.get("Type") == request_type and row.get("Name") == name:
            return row
    raise ValueError(f"Could not find '{request_type} {name}' row in stats CSV")


def _number(row: dict[str, str], column: str) -> float:
    """Read *column* from a stats row as a float (``ValueError`` when unusable)."""
    raw = (row.get(column) or "").strip()
    try:
        return float(raw)
    except ValueError:
        entry = f"{row.get('Type')} {row.get('Name')}"
        raise ValueError(f"{entry}: bad {column!r} value {raw!r}") from None


def _p95_ms(row: dict[str, str]) -> float:
    column = next((column for column in P95_COLUMNS if row.get(column)), None)
    if column is None:
        raise ValueError("Stats CSV has no 95th percentile column")
    return _number(row, column)


def _failure_percent(row: dict[str, str]) -> float:
    """Failures as a percentage of requests; an entry with no requests is an error."""
    total = _number(row, "Request Count")
    if not total:
        raise ValueError(f"{row.get('Type')} {row.get('Name')} recorded no requests")
    return _number(row, "Failure Count") / total * 100.0


def observe_csv(stats_path: Path, name: str) -> dict[str, float | None]:
    """Read the four threshold metrics from a Locust stats CSV."""
    rows = _load_rows(stats_path)
    http = _find_row(rows, HTTP_REQUEST_TYPE, name)
    iteration = _find_row(rows, ITERATION_REQUEST_TYPE, name)

    return {
        HTTP_P95_MS: _p95_ms(http),
        HTTP_ERROR_RATE_PERCENT: _failure_percent(http),
        ITERATION_P95_MS: _p95_ms(iteration),
        CHECK_ERROR_RATE_PERCENT: _failure_percent(iteration),
    }


def main(argv: list[str] | None = None) -> int:
    """
    Entry point: load thresholds, parse CSV, compare, and print results.

    Returns:
        ``EXIT_PASS`` (0) if all thresholds are met,
        ``EXIT_THRESHOLD_BREACH`` (1) if any are exceeded, or
        ``EXIT_SCRIPT_ERROR`` (2) on unexpected failures.
    """
    args = parse_args(argv)

    try:
        thresholds = load_thresholds(args.thresholds)
        results = evaluate(thresholds, observe_csv(args.stats, args.name))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Threshold check failed: {exc}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    for line in summary_lines(results):
        print(line)
    return EXIT_PASS if all_passed(results) else EXIT_THRESHOLD_BREACH


if __name__ == "__main__":
    raise SystemExit(main())
