"""
Unit tests for the load shapes and arrival-rate pacing.

Shapes are driven by ``get_run_time()`` and the runner's stats, so each
test pins the run time on the instance and supplies a minimal stats
stand-in instead of starting Locust.

Key SDET Concepts Demonstrated:
- Monkeypatching time sources for deterministic scheduling tests
- Lightweight stub objects that satisfy the interface contract
- Boundary testing at stage edges and the run-duration limit
"""

from __future__ import annotations

import heapq
from collections import Counter
from types import SimpleNamespace

import pytest

from config import ConstantRateConfig, RampConfig, Stage
from load_tests import shapes
from load_tests.shapes import (
    ConstantArrivalRateShape,
    RampingStagesShape,
    arrival_rate_pacing,
    peak_users,
    total_duration_seconds,
)

pytestmark = pytest.mark.unit


class _FakeStats:
    """Minimal stand-in for ``locust.stats.RequestStats``."""

    def __init__(self, num_requests: int = 0, avg_response_time: float = 0.0):
        self.entry = SimpleNamespace(
            num_requests=num_requests, avg_response_time=avg_response_time
        )
        self.requested: list[tuple[str, str]] = []

    def get(self, name: str, method: str):
        self.requested.append((name, method))
        return self.entry


def _at(shape, seconds: float):
    shape.get_run_time = lambda: seconds
    return shape


# ---------------------------------------------------------------------------
# Constant arrival rate
# ---------------------------------------------------------------------------


def test_constant_shape_starts_with_pre_allocated_users():
    shape = _at(ConstantArrivalRateShape(), 0)

    assert shape.tick() == (
        ConstantRateConfig.PRE_ALLOCATED_USERS,
        float(ConstantRateConfig.TARGET_REQUESTS_PER_SECOND),
    )


def test_constant_shape_stops_when_duration_expires():
    shape = _at(ConstantArrivalRateShape(), ConstantRateConfig.DURATION_SECONDS)

    assert shape.tick() is None


def test_constant_shape_keeps_pool_when_iterations_are_fast():
    """Test that 40/s x 0.5s = 20 in flight stays at the pre-allocated 50."""
    shape = _at(ConstantArrivalRateShape(), 30)
    shape.runner = SimpleNamespace(stats=_FakeStats(num_requests=100, avg_response_time=500))

    assert shape.required_users() == 50


def test_constant_shape_scales_users_for_slow_iterations():
    """Test that 40/s x 1.8s = 72 users are requested."""
    stats = _FakeStats(num_requests=100, avg_response_time=1800)
    shape = _at(ConstantArrivalRateShape(), 30)
    shape.runner = SimpleNamespace(stats=stats)

    users, _ = shape.tick()

    assert users == 72
    assert stats.requested == [("BusinessAbilitiesQuery", "ITERATION")]


def test_constant_shape_caps_users_at_max():
    shape = _at(ConstantArrivalRateShape(), 30)
    shape.runner = SimpleNamespace(stats=_FakeStats(num_requests=100, avg_response_time=10_000))

    assert shape.required_users() == ConstantRateConfig.MAX_USERS


def test_constant_shape_ignores_stats_before_first_iteration():
    shape = _at(ConstantArrivalRateShape(), 1)
    shape.runner = SimpleNamespace(stats=_FakeStats(num_requests=0, avg_response_time=10_000))

    assert shape.required_users() == ConstantRateConfig.PRE_ALLOCATED_USERS


# ---------------------------------------------------------------------------
# Ramping stages
# ---------------------------------------------------------------------------


class _ShortRamp(RampConfig):
    STAGES = (
        Stage(duration_seconds=10, target=10),
        Stage(duration_seconds=20, target=10),
        Stage(duration_seconds=10, target=0),
    )


class _ShortRampShape(RampingStagesShape):
    profile = _ShortRamp


@pytest.mark.parametrize(
    ("run_time", "expected_users"),
    [
        (0, 0),
        (5, 5),
        (9.9, 10),
        (10, 10),
        (25, 10),
        (30, 10),
        (35, 5),
        (39, 1),
    ],
)
def test_ramp_shape_interpolates_between_stage_targets(run_time, expected_users):
    users, spawn_rate = _at(_ShortRampShape(), run_time).tick()

    assert users == expected_users
    assert spawn_rate >= 1


def test_ramp_shape_stops_after_last_stage():
    assert _at(_ShortRampShape(), 40).tick() is None


def test_ramp_shape_spawn_rate_covers_steepest_stage():
    class _Steep(RampConfig):
        STAGES = (Stage(duration_seconds=2, target=100),)

    class _SteepShape(RampingStagesShape):
        profile = _Steep

    _, spawn_rate = _at(_SteepShape(), 1).tick()

    assert spawn_rate == 50


def test_default_ramp_profile_peaks_at_twenty_users():
    assert peak_users(RampConfig) == 20
    assert total_duration_seconds(RampConfig) == 9 * 60
    assert _at(RampingStagesShape(), 6 * 60).tick()[0] == 20


def test_constant_profile_summary_values():
    assert peak_users(ConstantRateConfig) == 100
    assert total_duration_seconds(ConstantRateConfig) == 600


# ---------------------------------------------------------------------------
# Arrival-rate pacing
# ---------------------------------------------------------------------------


def _paced_user(user_count: int):
    return SimpleNamespace(environment=SimpleNamespace(runner=SimpleNamespace(user_count=user_count)))


def test_pacing_spaces_iterations_by_user_count_over_rate(monkeypatch):
    """Test that 50 users at 40/s each wait 1.25s between starts."""
    # First slot at 101.25; that iteration takes 0.2s.
    clock = iter([100.0, 101.45])
    monkeypatch.setattr(shapes.time, "monotonic", lambda: next(clock))
    wait_time = arrival_rate_pacing(40)
    user = _paced_user(50)

    first = wait_time(user)
    second = wait_time(user)

    assert first == pytest.approx(1.25)
    assert second == pytest.approx(1.05)


def test_pacing_does_not_burst_after_falling_behind(monkeypatch):
    """Test that a late user starts immediately and re-anchors its schedule."""
    clock = iter([0.0, 10.0, 10.0])
    monkeypatch.setattr(shapes.time, "monotonic", lambda: next(clock))
    wait_time = arrival_rate_pacing(10)
    user = _paced_user(10)

    assert wait_time(user) == pytest.approx(1.0)
    assert wait_time(user) == 0
    assert wait_time(user) == pytest.approx(1.0)


def test_pacing_tolerates_missing_runner():
    user = SimpleNamespace(environment=SimpleNamespace(runner=None))

    assert arrival_rate_pacing(4)(user) == pytest.approx(0.25)


def test_pacing_prefers_runner_target_over_live_user_count(monkeypatch):
    """Test that a half-spawned pool is paced for its final size."""
    monkeypatch.setattr(shapes.time, "monotonic", lambda: 0.0)
    runner = SimpleNamespace(user_count=5, target_user_count=50)
    user = SimpleNamespace(environment=SimpleNamespace(runner=runner))

    assert arrival_rate_pacing(40)(user) == pytest.approx(1.25)


def test_constant_profile_spreads_iteration_starts_evenly(monkeypatch):
    """
    Test that spawning plus pacing never bunches iterations together.

    Users spawn at the rate ``tick()`` returns and run their first
    iteration immediately; every iteration takes 0.1s.  Over ten seconds
    no 250ms window may hold more than the target rate allows (10%
    tolerance).
    """
    # Arrange
    rate = ConstantRateConfig.TARGET_REQUESTS_PER_SECOND
    user_count, spawn_rate = _at(ConstantArrivalRateShape(), 0).tick()

    now = [0.0]
    monkeypatch.setattr(shapes.time, "monotonic", lambda: now[0])
    wait_time = arrival_rate_pacing(rate)
    runner = SimpleNamespace(user_count=user_count, target_user_count=user_count)
    users = [
        SimpleNamespace(environment=SimpleNamespace(runner=runner)) for _ in range(user_count)
    ]
    pending = [(index / spawn_rate, index) for index in range(user_count)]
    heapq.heapify(pending)

    # Act
    starts = []
    while pending:
        start, index = heapq.heappop(pending)
        if start >= 10:
            continue
        starts.append(start)
        now[0] = start + 0.1
        heapq.heappush(pending, (now[0] + wait_time(users[index]), index))

    # Assert
    per_window = Counter(int(start // 0.25) for start in starts)
    assert max(per_window.values()) <= rate * 0.25 * 1.1
    assert len(starts) == pytest.approx(rate * 10, rel=0.1)
