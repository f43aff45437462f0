"""
Business abilities query scenarios.

Both user classes issue the same fixed query and differ only in how
iterations are paced:

- :class:`ConstantRateAbilitiesUser` — spaced by
  :func:`~load_tests.shapes.arrival_rate_pacing` so the total request
  rate stays at the target (40/s, 80% of the API limit) regardless of
  response times.  No pause of its own.
- :class:`RampingAbilitiesUser` — one-second pause between iterations;
  concurrency follows the ramp stages.

``SCENARIOS`` maps each profile name to its user class and load shape.
"""

from __future__ import annotations

from locust import constant, tag, task

from config import ConstantRateConfig, RampConfig
from load_tests.scenarios.base import GraphQLApiUser
from load_tests.shapes import (
    ConstantArrivalRateShape,
    RampingStagesShape,
    arrival_rate_pacing,
)

BUSINESS_ABILITIES_QUERY = """
  query TestBusinessAbilities {
    business {
      abilities {
        manage
      }
    }
  }
"""


class BusinessAbilitiesUser(GraphQLApiUser):
    """Issue the business abilities query once per iteration."""

    abstract = True

    @task
    def query_business_abilities(self) -> None:
        self._run_query(BUSINESS_ABILITIES_QUERY)


@tag("constant")
class ConstantRateAbilitiesUser(BusinessAbilitiesUser):
    """Constant arrival rate; the pacing function does all the waiting."""

    profile = ConstantRateConfig
    wait_time = arrival_rate_pacing(ConstantRateConfig.TARGET_REQUESTS_PER_SECOND)


@tag("ramp")
class RampingAbilitiesUser(BusinessAbilitiesUser):
    """Ramping concurrency with a fixed pause between iterations."""

    profile = RampConfig
    wait_time = constant(RampConfig.ITERATION_PAUSE_SECONDS)


SCENARIOS = {
    ConstantRateConfig.PROFILE: (ConstantRateAbilitiesUser, ConstantArrivalRateShape),
    RampConfig.PROFILE: (RampingAbilitiesUser, RampingStagesShape),
}
