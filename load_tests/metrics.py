"""
Custom metrics recorded through Locust's request event.

Locust aggregates anything fired on ``events.request`` into its stats
tables, CSV output and worker-to-master reports.  Each iteration fires
one extra event of type ``ITERATION`` alongside the real HTTP request:

- ``response_time`` is the wall-clock duration of the whole iteration,
  which gives an iteration-duration trend (p95 in the stats table);
- ``exception`` is set when any check failed, so the entry's failure
  ratio is the cumulative check error rate.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from load_tests.checks import ChecksFailed, failed_checks

HTTP_REQUEST_TYPE = "POST"
ITERATION_REQUEST_TYPE = "ITERATION"


def record_iteration(
    environment: Any,
    name: str,
    started_at: float,
    results: Mapping[str, bool],
) -> bool:
    """
    Record one iteration's verdict and duration.

    Args:
        environment: The Locust ``Environment`` of the running user.
        name: Stats entry name, shared with the HTTP request entry.
        started_at: ``time.perf_counter()`` value taken before the request.
        results: Check outcomes from :func:`load_tests.checks.run_checks`.

    Returns:
        The overall iteration verdict.
    """
    failed = failed_checks(results)
    environment.events.request.fire(
        request_type=ITERATION_REQUEST_TYPE,
        name=name,
        response_time=(time.perf_counter() - started_at) * 1000,
        response_length=0,
        exception=ChecksFailed(failed) if failed else None,
        context={},
    )
    return not failed
