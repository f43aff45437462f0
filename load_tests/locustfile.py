# ruff: noqa: E402
"""
Locust entrypoint for the business abilities load test.

This is the file that the ``locust`` CLI discovers and loads.  It binds
exactly one user class and one load shape for the profile selected by
``LOAD_PROFILE`` (Locust spawns every user and shape class it finds in
this module's namespace), and wires up the run-level event listeners:

- ``test_start`` — log configuration and capture the start time
- ``test_stop`` — log completion against that start time
- ``quitting`` — evaluate thresholds and set the process exit code

Usage examples::

    # Constant arrival rate (default), 10 minutes at 40 requests/second:
    BASE_URL=https://api.example.com AUTH_TOKEN=... STAFF_ID=... \\
        locust -f load_tests/locustfile.py --headless --csv results

    # Ramping concurrency:
    LOAD_PROFILE=ramp locust -f load_tests/locustfile.py --headless

    # Gate a finished run from its CSV output:
    python -m load_tests.check_thresholds --stats results_stats.csv
"""

from __future__ import annotations

import sys
from pathlib import Path

from locust import events
from locust.runners import WorkerRunner

# Locust may be invoked from any directory.  Inserting the project root
# onto ``sys.path`` guarantees that project imports always resolve.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config import get_config
from load_tests import hooks
from load_tests.scenarios.base import REQUEST_CONTEXT
from load_tests.scenarios.business_abilities import SCENARIOS
from load_tests.thresholds import enforce, load_thresholds

PROFILE = get_config()
BusinessAbilitiesUser, BusinessAbilitiesShape = SCENARIOS[PROFILE.PROFILE]

__all__ = ["BusinessAbilitiesUser", "BusinessAbilitiesShape"]


@events.test_start.add_listener
def _on_test_start(environment, **_kwargs):
    """Run the setup hook once per test, on the master or local runner."""
    if isinstance(environment.runner, WorkerRunner):
        return
    environment.run_metadata = hooks.setup(REQUEST_CONTEXT, PROFILE)


@events.test_stop.add_listener
def _on_test_stop(environment, **_kwargs):
    """Run the teardown hook with the metadata captured at start."""
    metadata = getattr(environment, "run_metadata", None)
    if metadata is None:
        return
    hooks.teardown(metadata)


@events.quitting.add_listener
def _enforce_thresholds(environment, **_kwargs):
    """Fail the ``locust`` process when a threshold is breached."""
    if isinstance(environment.runner, WorkerRunner):
        return
    enforce(environment, load_thresholds(PROFILE.THRESHOLDS_PATH), PROFILE.REQUEST_NAME)
