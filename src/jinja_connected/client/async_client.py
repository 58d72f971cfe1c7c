"""Asynchronous HTTP executor with retry and error mapping.

Provides :class:`AsyncHttpExecutor`, the non-blocking counterpart of
:class:`~jinja_connected.client.sync_client.HttpExecutor`, used when the
Jinja environment renders with ``enable_async=True``. Behaviour (headers,
retry, error mapping) is identical; only the I/O model differs.

A fresh :class:`httpx.AsyncClient` is opened per request because a render
may run on a different event loop each time (``Template.render`` on an
async environment starts its own loop). An injected transport belongs to
the caller and stays open across requests; only the per-request client is
closed.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

import httpx

from jinja_connected.client.base import TRANSPORT_ERRORS, backoff_delay, build_headers
from jinja_connected.client.response import normalize_response
from jinja_connected.exceptions import TransportError
from jinja_connected.models import NormalizedResponse, RequestConfig, ResolvedRequest
from jinja_connected.output import get_output


class AsyncHttpExecutor:
    """Non-blocking executor for connected_content requests.

    Args:
        config: Timeout, SSL verification, and retry settings.
        transport: Optional async httpx transport, e.g.
            :class:`httpx.MockTransport` in tests.
        sleep: Coroutine function used to wait between retries.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._sleep = sleep

    async def execute(self, request: ResolvedRequest) -> NormalizedResponse:
        """Send *request* and return the normalised response.

        Raises:
            TransportError: On network / timeout errors after all retries,
                or when the URL cannot be sent at all.
        """
        headers = build_headers(request)
        max_retries = self._config.max_retries
        output = get_output()
        output.debug(f"{request.method.value} {request.url} (async)")

        async with httpx.AsyncClient(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=_borrow(self._transport),
        ) as client:
            for attempt in range(max_retries + 1):
                try:
                    response = await client.request(
                        request.method.value,
                        request.url,
                        headers=headers,
                        content=request.body,
                    )
                except TRANSPORT_ERRORS as exc:
                    if attempt < max_retries:
                        delay = backoff_delay(attempt)
                        output.debug(
                            f"Connection error: {exc}, retrying in {delay}s "
                            f"(attempt {attempt + 1}/{max_retries})"
                        )
                        await self._sleep(delay)
                        continue
                    raise TransportError(
                        f"Request to {request.url} failed after {max_retries + 1} attempts: {exc}"
                    ) from exc
                except (httpx.HTTPError, httpx.InvalidURL) as exc:
                    raise TransportError(f"Request to {request.url} failed: {exc}") from exc

                output.debug(f"HTTP {response.status_code} from {request.url}")
                return normalize_response(response)

        raise TransportError(f"Request to {request.url} failed")  # pragma: no cover


class _BorrowedTransport(httpx.AsyncBaseTransport):
    """Delegates to a caller-owned transport without closing it."""

    def __init__(self, transport: httpx.AsyncBaseTransport) -> None:
        self._transport = transport

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self._transport.handle_async_request(request)

    async def aclose(self) -> None:
        return None


def _borrow(transport: Optional[httpx.AsyncBaseTransport]) -> Optional[httpx.AsyncBaseTransport]:
    if transport is None:
        return None
    return _BorrowedTransport(transport)
