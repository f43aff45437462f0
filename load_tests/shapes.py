"""
Load shapes for the business abilities scenarios.

Locust drives user counts from a ``LoadTestShape`` when one is present
in the locustfile.  Two shapes are provided:

1. :class:`ConstantArrivalRateShape` — keeps a pool of users running for
   a fixed duration and grows the pool (up to a cap) when the observed
   iteration time means the pre-allocated users cannot keep up.  Paired
   with :func:`arrival_rate_pacing`, which spaces iterations so the
   aggregate start rate stays at the target.
2. :class:`RampingStagesShape` — linear ramps between per-stage user
   targets, stopping after the last stage.

Key Concepts Demonstrated:
- ``tick()`` returning ``(user_count, spawn_rate)`` or ``None`` to stop
- Little's law (users = rate x time in system) for pool sizing
- Custom ``wait_time`` function bound as a user method
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from typing import Any

from locust import LoadTestShape

from config import ConstantRateConfig, RampConfig
from load_tests.metrics import ITERATION_REQUEST_TYPE


def arrival_rate_pacing(rate: float) -> Callable[[Any], float]:
    """
    Return a ``wait_time`` function that holds the total start rate at *rate*/s.

    Each user spaces its iterations ``user_count / rate`` seconds apart,
    measured from the previous *scheduled* start, so slow responses eat
    into the wait rather than lowering throughput.  A user that falls
    behind starts immediately but does not burst to catch up.

    The user count is the runner's target (falling back to the live
    count), so users spawned at *rate*/s keep evenly spaced start phases
    while the pool is still filling.  Pacing is exact for a single Locust
    process.
    """

    def wait_time_func(user: Any) -> float:
        runner = user.environment.runner
        users = getattr(runner, "target_user_count", 0) or getattr(runner, "user_count", 0)
        user_count = max(users, 1)
        interval = user_count / rate

        now = time.monotonic()
        next_start = getattr(user, "_next_arrival", now) + interval
        if next_start < now:
            next_start = now
        user._next_arrival = next_start
        return next_start - now

    return wait_time_func


class ConstantArrivalRateShape(LoadTestShape):
    """
    Run a constant arrival rate for a fixed duration.

    Starts with ``PRE_ALLOCATED_USERS`` and, once iterations have been
    observed, sizes the pool to ``ceil(rate x average iteration time)``
    capped at ``MAX_USERS``.
    """

    profile = ConstantRateConfig

    def required_users(self) -> int:
        profile = self.profile
        users = profile.PRE_ALLOCATED_USERS

        stats = getattr(self.runner, "stats", None)
        if stats is not None:
            entry = stats.get(profile.REQUEST_NAME, ITERATION_REQUEST_TYPE)
            if entry.num_requests:
                in_flight = math.ceil(
                    profile.TARGET_REQUESTS_PER_SECOND * entry.avg_response_time / 1000.0
                )
                users = max(users, in_flight)

        return min(users, profile.MAX_USERS)

    def tick(self) -> tuple[int, float] | None:
        if self.get_run_time() >= self.profile.DURATION_SECONDS:
            return None
        # Spawning at the arrival rate puts user start phases 1/rate apart.
        return self.required_users(), float(self.profile.TARGET_REQUESTS_PER_SECOND)


class RampingStagesShape(LoadTestShape):
    """
    Ramp the user count linearly through a sequence of stages.

    Each stage moves from the previous stage's target (0 before the first
    stage) to its own target over its duration.
    """

    profile = RampConfig

    def tick(self) -> tuple[int, float] | None:
        run_time = self.get_run_time()

        stage_start = 0.0
        previous_target = 0
        for stage in self.profile.STAGES:
            stage_end = stage_start + stage.duration_seconds
            if run_time < stage_end:
                progress = (run_time - stage_start) / stage.duration_seconds
                users = round(previous_target + (stage.target - previous_target) * progress)
                spawn_rate = max(
                    math.ceil(abs(stage.target - previous_target) / stage.duration_seconds), 1
                )
                return users, float(spawn_rate)
            stage_start = stage_end
            previous_target = stage.target

        return None


def total_duration_seconds(profile: Any) -> int:
    """Wall-clock length of a profile's run."""
    if profile.STAGES:
        return sum(stage.duration_seconds for stage in profile.STAGES)
    return profile.DURATION_SECONDS


def peak_users(profile: Any) -> int:
    """Highest user count a profile can reach."""
    if profile.STAGES:
        return max(stage.target for stage in profile.STAGES)
    return profile.MAX_USERS
