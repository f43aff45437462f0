"""
Response checks for the business abilities query.

Each check is a named boolean predicate evaluated independently
against the HTTP response.  A predicate that cannot parse the body, or
cannot reach the field it inspects, evaluates to ``False`` instead of
raising, so one malformed response only ever costs a failed check.

The module also inspects the ``Ratelimit`` response header, which the
API formats as ``"default";r=<remaining>;t=<reset_seconds>``, and logs a
warning when the remaining quota gets low.

Key Concepts Demonstrated:
- Named predicates combined into a single per-iteration verdict
- Distinguishing "absent" from "null" when walking JSON objects
- Header parsing that ignores any shape it does not recognise
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from load_tests.helpers import MISSING, safe_json

logger = logging.getLogger(__name__)

Check = Callable[[Any], bool]

RATE_LIMIT_HEADER = "Ratelimit"
RATE_LIMIT_REMAINING_PATTERN = re.compile(r"r=(\d+)")


class ChecksFailed(Exception):
    """Iteration verdict was false; carries the names of the failed checks."""

    def __init__(self, failed: list[str]):
        self.failed = failed
        super().__init__(f"Failed checks: {', '.join(failed)}")


def _lookup(body: Any, *path: str) -> Any:
    """
    Walk *path* through nested JSON objects.

    Returns ``MISSING`` when a key is absent or an intermediate value is
    not an object (``null`` included).  A ``null`` leaf is returned as
    ``None`` because the field is present.
    """
    current = body
    for key in path:
        if not isinstance(current, dict) or key not in current:
            return MISSING
        current = current[key]
    return current


def status_is_200(response: Any) -> bool:
    return response.status_code == 200


def response_has_data(response: Any) -> bool:
    return _lookup(safe_json(response), "data") is not MISSING


def business_abilities_exists(response: Any) -> bool:
    return _lookup(safe_json(response), "data", "business", "abilities") is not MISSING


def manage_is_boolean(response: Any) -> bool:
    manage = _lookup(safe_json(response), "data", "business", "abilities", "manage")
    return isinstance(manage, bool)


def no_errors_in_response(response: Any) -> bool:
    """
    Pass unless the body carries a non-empty ``errors`` value.

    Only an unparseable or ``null`` body fails outright.  Other JSON
    values without an ``errors`` key (arrays, strings, numbers) pass, as
    do falsy scalars (``""``, ``false``, ``0``) and an empty list.
    """
    body = safe_json(response)
    if body is MISSING or body is None:
        return False
    if not isinstance(body, dict):
        return True

    errors = body.get("errors")
    if isinstance(errors, list):
        return len(errors) == 0
    # An empty object still counts as errors being reported.
    return not isinstance(errors, dict) and not errors


BUSINESS_ABILITIES_CHECKS: dict[str, Check] = {
    "status is 200": status_is_200,
    "response has data": response_has_data,
    "business.abilities exists": business_abilities_exists,
    "manage is boolean": manage_is_boolean,
    "no errors in response": no_errors_in_response,
}


def run_checks(
    response: Any, checks: Mapping[str, Check] = BUSINESS_ABILITIES_CHECKS
) -> dict[str, bool]:
    """
    Evaluate every check against *response*.

    Args:
        response: A Locust/requests ``Response`` object.
        checks: Ordered mapping of check name to predicate.

    Returns:
        Mapping of check name to outcome, in the order of *checks*.
    """
    return {name: bool(check(response)) for name, check in checks.items()}


def failed_checks(results: Mapping[str, bool]) -> list[str]:
    """Names of the checks that did not pass."""
    return [name for name, passed in results.items() if not passed]


def parse_rate_limit_remaining(value: str | None) -> int | None:
    """
    Extract the remaining quota from a ``Ratelimit`` header value.

    Args:
        value: Raw header value, e.g. ``'"default";r=42;t=30'``.

    Returns:
        The ``r=`` count as an int, or ``None`` when the header is
        absent or has no ``r=<digits>`` component.
    """
    if not value:
        return None

    match = RATE_LIMIT_REMAINING_PATTERN.search(value)
    if match is None:
        return None
    return int(match.group(1))


def warn_if_rate_limited(headers: Mapping[str, str], warn_below: int = 100) -> int | None:
    """
    Log a warning when the rate-limit quota is nearly exhausted.

    Args:
        headers: Response headers (case-insensitive mapping from requests).
        warn_below: Remaining-count threshold that triggers the warning.

    Returns:
        The parsed remaining count, or ``None`` if unavailable.
    """
    remaining = parse_rate_limit_remaining(headers.get(RATE_LIMIT_HEADER))
    if remaining is not None and remaining < warn_below:
        logger.warning("Rate limit warning: Only %d requests remaining in quota", remaining)
    return remaining
