"""Synchronous HTTP executor with retry and error mapping.

:class:`HttpExecutor` wraps :class:`httpx.Client` and layers on:

- **Fixed headers** -- the client identifier, form content type for
  requests with a body, ``Accept`` from ``:content_type``, and basic auth
  (see :func:`~jinja_connected.client.base.build_headers`).
- **Retry with backoff** -- retries connection errors and timeouts with
  exponential delay (1 s, 2 s, 4 s, ...) up to
  :attr:`~jinja_connected.models.RequestConfig.max_retries` times.
- **Error mapping** -- transport failures become
  :class:`~jinja_connected.exceptions.TransportError`. HTTP error statuses
  are returned normally; the tag exposes them through
  ``__http_status_code__``.

See Also:
    :class:`~jinja_connected.client.async_client.AsyncHttpExecutor` for the
    equivalent non-blocking implementation.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

import httpx

from jinja_connected.client.base import TRANSPORT_ERRORS, backoff_delay, build_headers
from jinja_connected.client.response import normalize_response
from jinja_connected.exceptions import TransportError
from jinja_connected.models import NormalizedResponse, RequestConfig, ResolvedRequest
from jinja_connected.output import get_output


class HttpExecutor:
    """Blocking executor for connected_content requests.

    The underlying :class:`httpx.Client` is created on first use and reused
    (connection pooling) until :meth:`close`. It can also be used as a
    context manager.

    Args:
        config: Timeout, SSL verification, and retry settings.
        transport: Optional httpx transport, e.g.
            :class:`httpx.MockTransport` in tests.
        sleep: Function used to wait between retries.

    Example::

        with HttpExecutor(RequestConfig(timeout=5)) as executor:
            response = executor.execute(request)
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.Client] = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> HttpExecutor:
        self._get_client()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            if self._client:
                self._client.close()
                self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def execute(self, request: ResolvedRequest) -> NormalizedResponse:
        """Send *request* and return the normalised response.

        Args:
            request: The fully resolved request.

        Returns:
            The :class:`~jinja_connected.models.NormalizedResponse`,
            whatever its status code.

        Raises:
            TransportError: On network / timeout errors after all retries,
                or when the URL cannot be sent at all.
        """
        client = self._get_client()
        headers = build_headers(request)
        max_retries = self._config.max_retries
        output = get_output()
        output.debug(f"{request.method.value} {request.url}")

        for attempt in range(max_retries + 1):
            try:
                response = client.request(
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
                    self._sleep(delay)
                    continue
                raise TransportError(
                    f"Request to {request.url} failed after {max_retries + 1} attempts: {exc}"
                ) from exc
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                raise TransportError(f"Request to {request.url} failed: {exc}") from exc

            output.debug(f"HTTP {response.status_code} from {request.url}")
            return normalize_response(response)

        raise TransportError(f"Request to {request.url} failed")  # pragma: no cover

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._client = httpx.Client(
                    timeout=self._config.timeout,
                    verify=self._config.verify_ssl,
                    follow_redirects=True,
                    transport=self._transport,
                )
            return self._client
