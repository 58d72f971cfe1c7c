"""Request header construction shared by the sync and async executors."""

from __future__ import annotations

import httpx

from jinja_connected.auth.basic import basic_auth_header
from jinja_connected.models import HTTPMethod, ResolvedRequest

USER_AGENT = "jinja-connected-client"
"""Client identifier sent with every request."""

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

TRANSPORT_ERRORS = (httpx.TimeoutException, httpx.NetworkError)
"""httpx failures that are retried and then surfaced as ``TransportError``."""

_BODY_METHODS = (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)


def build_headers(request: ResolvedRequest) -> dict[str, str]:
    """Return the headers to send for *request*.

    ``User-Agent`` is always the fixed client identifier. Requests with a
    body default to a form-encoded ``Content-Type``. Headers already on the
    request (``Accept`` from ``:content_type``) are kept, and basic-auth
    credentials become an ``Authorization`` header.
    """
    headers: dict[str, str] = {}
    if request.body is not None and request.method in _BODY_METHODS:
        headers["Content-Type"] = FORM_CONTENT_TYPE
    headers.update(request.headers)
    if request.auth is not None:
        headers.update(basic_auth_header(request.auth))
    headers["User-Agent"] = USER_AGENT
    return headers


def backoff_delay(attempt: int) -> int:
    """Seconds to wait before retry number *attempt* + 1: 1, 2, 4, ..."""
    return 2 ** attempt
