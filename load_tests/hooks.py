"""
Setup and teardown hooks for a load test run.

Both hooks run once per test execution: :func:`setup` logs the active
configuration and returns the run metadata, :func:`teardown` consumes
that metadata to log when the run started and ended.  Neither hook
owns any state beyond the returned metadata.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from config import RequestContext
from load_tests.shapes import peak_users, total_duration_seconds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunMetadata:
    """Start timestamp captured at setup for correlation at teardown."""

    start_time: datetime


def _format_duration(seconds: int) -> str:
    minutes, remainder = divmod(seconds, 60)
    if remainder:
        return f"{minutes}m{remainder}s"
    return f"{minutes} minutes"


def setup(context: RequestContext, profile: Any) -> RunMetadata:
    """
    Log the run configuration and capture the start time.

    A missing ``AUTH_TOKEN`` is reported as a warning only; the run
    continues and the resulting failures show up in the error rate.

    Args:
        context: The run's request context.
        profile: The active configuration class from :func:`config.get_config`.

    Returns:
        ``RunMetadata`` holding the UTC start time.
    """
    duration = total_duration_seconds(profile)

    logger.info("Starting load test...")
    logger.info("Base URL: %s", context.base_url)
    logger.info("Profile: %s", profile.PROFILE)

    if profile.STAGES:
        logger.info("Ramp stages: %d", len(profile.STAGES))
        logger.info("Peak concurrency: %d users", peak_users(profile))
        logger.info("Pause between iterations: %ss", profile.ITERATION_PAUSE_SECONDS)
    else:
        rate = profile.TARGET_REQUESTS_PER_SECOND
        limit = profile.RATE_LIMIT_PER_SECOND
        logger.info("API Rate Limit: %d requests/second", limit)
        logger.info(
            "Target Rate: %d requests/second (%g%% of limit)", rate, rate / limit * 100
        )
        logger.info(
            "Users: %d pre-allocated, %d max",
            profile.PRE_ALLOCATED_USERS,
            profile.MAX_USERS,
        )
        logger.info("Total Expected Requests: %d requests", rate * duration)

    logger.info("Duration: %s", _format_duration(duration))

    if not context.auth_token:
        logger.warning(
            "WARNING: AUTH_TOKEN not set. Requests will likely fail authentication."
        )

    return RunMetadata(start_time=datetime.now(timezone.utc))


def teardown(metadata: RunMetadata) -> float:
    """
    Log completion and the run's wall-clock boundaries.

    Returns:
        Elapsed seconds between setup and teardown.
    """
    ended_at = datetime.now(timezone.utc)
    elapsed = (ended_at - metadata.start_time).total_seconds()

    logger.info("Load test completed.")
    logger.info("Started at: %s", metadata.start_time.isoformat())
    logger.info("Ended at: %s", ended_at.isoformat())
    logger.info("Elapsed: %.1fs", elapsed)
    return elapsed
