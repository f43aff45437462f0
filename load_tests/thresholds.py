"""
Threshold definitions and evaluation.

Thresholds are read from :file:`thresholds.yml` and compared against
four observed metrics:

- **P95 latency (ms)** of the GraphQL POST
- **Error rate (%)** — HTTP-level failures of the GraphQL POST
- **Check error rate (%)** — iterations with at least one failed check
- **Iteration P95 (ms)** — duration of a whole iteration

Observations come either from a live Locust environment (see
:func:`observe_environment`) or from the stats CSV (see
:mod:`load_tests.check_thresholds`).  A metric with no observation is
left out of the verdict.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from load_tests.metrics import HTTP_REQUEST_TYPE, ITERATION_REQUEST_TYPE

logger = logging.getLogger(__name__)

HTTP_P95_MS = "http_p95_ms"
HTTP_ERROR_RATE_PERCENT = "http_error_rate_percent"
CHECK_ERROR_RATE_PERCENT = "check_error_rate_percent"
ITERATION_P95_MS = "iteration_p95_ms"

METRIC_LABELS = {
    HTTP_P95_MS: "P95 latency (ms)",
    HTTP_ERROR_RATE_PERCENT: "Error rate (%)",
    CHECK_ERROR_RATE_PERCENT: "Check error rate (%)",
    ITERATION_P95_MS: "Iteration P95 (ms)",
}

# YAML key for each metric's limit.
_LIMIT_KEYS = {
    HTTP_P95_MS: "max_p95_ms",
    HTTP_ERROR_RATE_PERCENT: "max_error_rate_percent",
    CHECK_ERROR_RATE_PERCENT: "max_check_error_rate_percent",
    ITERATION_P95_MS: "max_iteration_p95_ms",
}


@dataclass(frozen=True)
class Thresholds:
    max_p95_ms: float
    max_error_rate_percent: float
    max_check_error_rate_percent: float
    max_iteration_p95_ms: float

    def limit_for(self, metric: str) -> float:
        return getattr(self, _LIMIT_KEYS[metric])


@dataclass(frozen=True)
class ThresholdResult:
    metric: str
    actual: float
    limit: float
    passed: bool


def load_thresholds(path: Path) -> Thresholds:
    """
    Read threshold limits from a YAML file.

    Args:
        path: Path to a YAML file defining every ``max_*`` key.

    Returns:
        A ``Thresholds`` instance with float limits.

    Raises:
        ValueError: If any key is missing or non-numeric.
    """
    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    try:
        limits = {key: float(data[key]) for key in _LIMIT_KEYS.values()}
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(
            "Thresholds file must define numeric " + ", ".join(_LIMIT_KEYS.values())
        ) from exc

    return Thresholds(**limits)


def evaluate(thresholds: Thresholds, observed: dict[str, float | None]) -> list[ThresholdResult]:
    """
    Compare observed metrics against their limits.

    Args:
        thresholds: Loaded limits.
        observed: Metric name to observed value; ``None`` means no data.

    Returns:
        One result per observed metric, in ``METRIC_LABELS`` order.
    """
    results = []
    for metric in METRIC_LABELS:
        actual = observed.get(metric)
        if actual is None:
            continue
        limit = thresholds.limit_for(metric)
        results.append(
            ThresholdResult(metric=metric, actual=actual, limit=limit, passed=actual < limit)
        )
    return results


def observe_environment(environment: Any, name: str) -> dict[str, float | None]:
    """
    Read the threshold metrics from a Locust environment's stats.

    Args:
        environment: A Locust ``Environment``.
        name: Stats entry name shared by the HTTP and iteration entries.

    Returns:
        Observed values keyed by metric name; ``None`` for an entry that
        saw no requests.
    """
    http = environment.stats.get(name, HTTP_REQUEST_TYPE)
    iteration = environment.stats.get(name, ITERATION_REQUEST_TYPE)

    observed: dict[str, float | None] = dict.fromkeys(METRIC_LABELS)
    if http.num_requests:
        observed[HTTP_P95_MS] = float(http.get_response_time_percentile(0.95))
        observed[HTTP_ERROR_RATE_PERCENT] = http.fail_ratio * 100.0
    if iteration.num_requests:
        observed[ITERATION_P95_MS] = float(iteration.get_response_time_percentile(0.95))
        observed[CHECK_ERROR_RATE_PERCENT] = iteration.fail_ratio * 100.0
    return observed


def summary_lines(results: list[ThresholdResult]) -> list[str]:
    """Render results as a fixed-width table for logs and CI output."""
    lines = [
        "Performance Threshold Check",
        "-" * 60,
        f"{'Metric':<22}{'Actual':>12}{'Limit':>14}{'Status':>12}",
        "-" * 60,
    ]
    for result in results:
        status = "PASS" if result.passed else "FAIL"
        lines.append(
            f"{METRIC_LABELS[result.metric]:<22}{result.actual:>12.2f}"
            f"{result.limit:>14.2f}{status:>12}"
        )
    lines.append("-" * 60)
    lines.append(f"Overall: {'PASS' if all_passed(results) else 'FAIL'}")
    return lines


def all_passed(results: list[ThresholdResult]) -> bool:
    return all(result.passed for result in results)


def enforce(environment: Any, thresholds: Thresholds, name: str) -> bool:
    """
    Evaluate thresholds at the end of a run and set the process exit code.

    Called from the ``quitting`` event on the master (or local) runner.
    A breach sets ``environment.process_exit_code`` to ``1`` so the
    ``locust`` command fails the CI step.

    Returns:
        ``True`` if every observed metric is within its limit.
    """
    results = evaluate(thresholds, observe_environment(environment, name))
    passed = all_passed(results)

    for line in summary_lines(results):
        if passed:
            logger.info(line)
        else:
            logger.error(line)

    if not passed:
        environment.process_exit_code = 1
    return passed
