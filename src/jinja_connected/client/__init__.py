"""HTTP executors for connected_content requests.

Both executors wrap :mod:`httpx`, add the fixed client identifier and the
content headers, retry transport failures with exponential backoff, and
return a :class:`~jinja_connected.models.NormalizedResponse`.

Classes:
    :class:`HttpExecutor` -- blocking, backed by :class:`httpx.Client`.
    :class:`AsyncHttpExecutor` -- non-blocking, backed by
    :class:`httpx.AsyncClient`; used when the Jinja environment has
    ``enable_async=True``.

Example::

    from jinja_connected.client import HttpExecutor

    with HttpExecutor(RequestConfig()) as executor:
        response = executor.execute(ResolvedRequest(url="https://x.test/a"))
"""

from jinja_connected.client.async_client import AsyncHttpExecutor
from jinja_connected.client.base import USER_AGENT, build_headers
from jinja_connected.client.response import Raw, Structured, normalize_response, parse_body
from jinja_connected.client.sync_client import HttpExecutor

__all__ = [
    "USER_AGENT",
    "AsyncHttpExecutor",
    "HttpExecutor",
    "Raw",
    "Structured",
    "build_headers",
    "normalize_response",
    "parse_body",
]
