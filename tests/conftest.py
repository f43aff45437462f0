"""
Shared pytest fixtures for the load test suite.

Provides factories for real ``requests.Response`` objects (the same
type Locust's ``HttpSession`` hands to scenario code) and a request
context with deterministic values.

Key SDET Concepts Demonstrated:
- Factory fixtures for building test inputs with sensible defaults
- Real library objects instead of mocks where they are cheap to build
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

# Locust monkey-patches ssl via gevent on import; it must run before
# requests/urllib3 import ssl, or collection hits a RecursionError.
import locust  # noqa: F401
import pytest
import requests

from config import RequestContext

NOT_GIVEN: Any = object()


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """
    Factory fixture for ``requests.Response`` instances.

    Example:
        def test_something(make_response):
            response = make_response(body={"data": {}})
            assert response.json() == {"data": {}}
    """

    def _make_response(
        status: int = 200,
        body: Any = NOT_GIVEN,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """
        Build a response with the given status, body and headers.

        Args:
            status: HTTP status code.
            body: Value serialised as the JSON body.
            text: Raw body text; takes precedence over *body*.
            headers: Response headers.
        """
        response = requests.Response()
        response.status_code = status
        response.encoding = "utf-8"
        if text is None:
            text = "" if body is NOT_GIVEN else json.dumps(body)
        response._content = text.encode("utf-8")
        response.headers.update(headers or {})
        return response

    return _make_response


@pytest.fixture
def valid_body() -> dict[str, Any]:
    """Body of a fully successful business abilities response."""
    return {"data": {"business": {"abilities": {"manage": True}}}}


@pytest.fixture
def request_context() -> RequestContext:
    return RequestContext(
        base_url="http://graph.test",
        auth_token="token-123",
        staff_id="staff-42",
    )
