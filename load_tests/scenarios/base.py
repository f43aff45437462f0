"""
Shared abstract Locust user class for GraphQL scenarios.

:class:`GraphQLApiUser` owns the per-iteration pipeline that concrete
scenarios build on:

1. build the GraphQL body (no variables) and POST it to the graph
   endpoint with the bearer token and staff headers;
2. run the named response checks;
3. record the iteration verdict in the custom error-rate metric;
4. warn when the ``Ratelimit`` header shows the quota running low.

Failures are recorded, never retried and never raised past the
iteration.

Key Concepts Demonstrated:
- Abstract Locust base classes for DRY scenario authoring
- ``catch_response=True`` so only transport errors and statuses outside
  200-399 count as failed requests, while check failures feed the
  error-rate metric
- A request context read once per process and shared read-only
"""

from __future__ import annotations

import time
from collections.abc import Mapping

from locust import HttpUser

from config import Config, load_request_context
from load_tests.checks import BUSINESS_ABILITIES_CHECKS, Check, run_checks, warn_if_rate_limited
from load_tests.helpers import graphql_payload, request_headers
from load_tests.metrics import record_iteration

# Read once at start; every user shares it for the lifetime of the run.
REQUEST_CONTEXT = load_request_context()


class GraphQLApiUser(HttpUser):
    """
    Base user that POSTs GraphQL queries to the graph endpoint.

    ``abstract = True`` tells Locust not to spawn this class directly —
    only its concrete subclasses.

    Attributes:
        profile: Configuration class of the load profile the user runs in.
        headers: Pre-built header dict reused for every request.
    """

    abstract = True
    host = REQUEST_CONTEXT.base_url

    profile: type[Config] = Config
    headers: dict[str, str]

    def on_start(self) -> None:
        """Build the request headers from the shared context."""
        self.headers = request_headers(REQUEST_CONTEXT)

    def _run_query(
        self,
        query: str,
        checks: Mapping[str, Check] = BUSINESS_ABILITIES_CHECKS,
    ) -> bool:
        """
        Execute one iteration: POST *query*, check the response, record the verdict.

        The request itself counts as failed in Locust's stats only for a
        transport error or a status outside 200-399.  Anything else the checks
        catch, a 204 included, goes to the error-rate metric instead.

        Returns:
            ``True`` if every check passed.
        """
        name = self.profile.REQUEST_NAME
        started_at = time.perf_counter()

        with self.client.post(
            self.profile.GRAPH_PATH,
            json=graphql_payload(query),
            headers=self.headers,
            name=name,
            catch_response=True,
        ) as response:
            results = run_checks(response, checks)

            if 200 <= response.status_code < 400:
                response.success()
            else:
                response.failure(f"HTTP {response.status_code}")

            success = record_iteration(self.environment, name, started_at, results)
            warn_if_rate_limited(response.headers, self.profile.RATE_LIMIT_WARN_BELOW)

        return success
