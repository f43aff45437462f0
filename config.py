"""
Load test configuration module.

This module defines one configuration class per load profile
(constant arrival rate, ramping stages) plus the request context that
every virtual user shares.  Profile classes hold immutable scenario
settings; the request context is read from environment variables once
at process start.

Key Concepts Demonstrated:
- Class-based configuration with inheritance for shared defaults
- Environment-variable overrides for 12-factor deployability
- Named profile lookup with a safe default
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class RequestContext:
    """Per-run values every iteration sends along with its request."""

    base_url: str
    auth_token: str
    staff_id: str


@dataclass(frozen=True)
class Stage:
    """A time-boxed target concurrency level within a ramping profile."""

    duration_seconds: int
    target: int


def load_request_context(environ: Mapping[str, str] | None = None) -> RequestContext:
    """
    Build the request context from environment variables.

    Args:
        environ: Mapping to read from.  Defaults to ``os.environ``.

    Returns:
        A frozen ``RequestContext``.  ``BASE_URL`` loses any trailing
        slash so paths can be appended directly.
    """
    if environ is None:
        environ = os.environ
    return RequestContext(
        base_url=environ.get("BASE_URL", "http://localhost:4000").rstrip("/"),
        auth_token=environ.get("AUTH_TOKEN", ""),
        staff_id=environ.get("STAFF_ID", ""),
    )


class Config:
    """Base configuration shared by every load profile."""

    PROFILE: str = "base"

    GRAPH_PATH: str = "/api/v1.0/graph"
    REQUEST_NAME: str = "BusinessAbilitiesQuery"

    # Server-side limit is 10,000 points refilled at 50 points/second.
    RATE_LIMIT_PER_SECOND: int = 50
    RATE_LIMIT_WARN_BELOW: int = 100

    THRESHOLDS_PATH: Path = Path(
        os.environ.get("THRESHOLDS_PATH", BASE_DIR / "load_tests" / "thresholds.yml")
    )

    STAGES: tuple[Stage, ...] = ()
    ITERATION_PAUSE_SECONDS: float = 0


class ConstantRateConfig(Config):
    """
    Constant arrival rate profile.

    Iterations start at a fixed rate regardless of how long each one
    takes.  The target sits at 80% of the API rate limit.
    """

    PROFILE: str = "constant"

    TARGET_REQUESTS_PER_SECOND: int = 40
    DURATION_SECONDS: int = 10 * 60
    PRE_ALLOCATED_USERS: int = 50
    MAX_USERS: int = 100


class RampConfig(Config):
    """
    Ramping concurrency profile.

    Users ramp linearly between stage targets and pause one second
    between iterations.
    """

    PROFILE: str = "ramp"

    STAGES: tuple[Stage, ...] = (
        Stage(duration_seconds=60, target=10),
        Stage(duration_seconds=3 * 60, target=10),
        Stage(duration_seconds=60, target=20),
        Stage(duration_seconds=3 * 60, target=20),
        Stage(duration_seconds=60, target=0),
    )
    ITERATION_PAUSE_SECONDS: float = 1


# Profile mapping for easy access
config = {
    "constant": ConstantRateConfig,
    "ramp": RampConfig,
    "default": ConstantRateConfig,
}


def get_config(profile: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified load profile.

    Args:
        profile: Profile name (constant, ramp).
                 If None, uses the LOAD_PROFILE environment variable.

    Returns:
        Configuration class for the specified profile.
    """
    if profile is None:
        profile = os.environ.get("LOAD_PROFILE", "constant")
    return config.get(profile, config["default"])
