"""
Helper utilities for the GraphQL load scenarios.

Provides the request building blocks every Locust user relies on:
GraphQL body construction, the authenticated header set, and a JSON
parser that never raises.  Keeping these in a shared module avoids
duplication between scenario files and the checks.

Key Concepts Demonstrated:
- Reusable header builder driven by a read-only request context
- Sentinel-based JSON parsing so a bad body cannot abort a user
"""

from __future__ import annotations

from typing import Any

from config import RequestContext


class _Missing:
    """Sentinel type for a value that is absent (not merely ``null``)."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def safe_json(response: Any) -> Any:
    """
    Return the parsed response body, or ``MISSING`` if parsing fails.

    Locust responses may carry non-JSON bodies (5xx pages, gateway
    timeouts) or no body at all when the connection failed.  Returning a
    sentinel instead of raising keeps ``ValueError`` out of task methods.

    Args:
        response: A Locust/requests ``Response`` object.

    Returns:
        The decoded JSON value (any type, including ``None`` for a
        literal ``null``) or ``MISSING``.
    """
    try:
        return response.json()
    except ValueError:
        return MISSING


def graphql_payload(query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the JSON body for a GraphQL POST."""
    return {
        "query": query,
        "variables": variables or {},
    }


def request_headers(context: RequestContext) -> dict[str, str]:
    """
    Build the header set the graph endpoint expects.

    The graph pipeline authenticates with a bearer token and scopes the
    request to a staff member.  Both are sent even when empty so that a
    missing configuration fails loudly on the server rather than here.

    Args:
        context: The run's request context.

    Returns:
        A dictionary suitable for passing as ``headers`` to Locust
        request methods.
    """
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {context.auth_token}",
        "X-Staff-Id": context.staff_id,
    }
