"""Execution engine behind the ``connected_content`` tag.

:class:`ConnectedContent` runs one tag occurrence end to end:

1. **Resolve** -- expand the URL and body templates against the render
   context and build a :class:`~jinja_connected.models.ResolvedRequest`.
2. **Authenticate** -- for ``:basic_auth``, look the secret bundle up in
   the context (:func:`~jinja_connected.auth.secrets.resolve_credentials`).
3. **Cache lookup** -- GET requests with a TTL above zero are served from
   the cache while the stored entry is live.
4. **Execute** -- on a miss, send the request through the HTTP executor.
5. **Cache store** -- successful (2xx) GET responses replace the entry for
   their key.

Binding the response into the template is left to
:mod:`jinja_connected.binder`.

One engine is created per process (or per environment) and shared by every
render, which is what makes the cache effective across renders.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional

from jinja_connected.auth.secrets import RenderContext, resolve_credentials
from jinja_connected.cache.cache import MemoryResponseCache, ResponseCache, make_key
from jinja_connected.client.async_client import AsyncHttpExecutor
from jinja_connected.client.sync_client import HttpExecutor
from jinja_connected.models import (
    CacheConfig,
    CacheEntry,
    DirectiveInvocation,
    HTTPMethod,
    NormalizedResponse,
    ResolvedRequest,
)
from jinja_connected.output import get_output

Expander = Callable[[str, Mapping[str, Any]], str]
"""Expands placeholder expressions in a string against a context mapping."""


class ConnectedContent:
    """Resolve, authenticate, cache, and execute connected_content requests.

    Args:
        cache: Response cache shared by all renders. Defaults to a fresh
            :class:`~jinja_connected.cache.cache.MemoryResponseCache`.
        executor: Blocking HTTP executor for synchronous renders.
        async_executor: Non-blocking executor for ``enable_async``
            environments.
        cache_config: Default TTL and the global on/off switch.

    Example::

        engine = ConnectedContent(cache=MemoryResponseCache(clock=ManualClock()))
        response = engine.fetch(parse_directive(raw), {"user_id": 1}, expander.expand)
    """

    def __init__(
        self,
        cache: Optional[ResponseCache] = None,
        executor: Optional[HttpExecutor] = None,
        async_executor: Optional[AsyncHttpExecutor] = None,
        cache_config: Optional[CacheConfig] = None,
    ) -> None:
        self._cache = cache if cache is not None else MemoryResponseCache()
        self._executor = executor or HttpExecutor()
        self._async_executor = async_executor or AsyncHttpExecutor()
        self._cache_config = cache_config or CacheConfig()

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def cache_config(self) -> CacheConfig:
        return self._cache_config

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def resolve(
        self,
        invocation: DirectiveInvocation,
        variables: Mapping[str, Any],
        expand: Expander,
    ) -> ResolvedRequest:
        """Build the request for one render of *invocation*.

        Raises:
            RenderError: If ``:basic_auth`` names secrets the context does
                not provide.
        """
        url = expand(invocation.url_template, variables)
        body = None
        if invocation.body_template is not None:
            body = expand(invocation.body_template, variables)

        headers: dict[str, str] = {}
        if invocation.content_type:
            headers["Accept"] = invocation.content_type

        auth = None
        if invocation.basic_auth:
            auth = resolve_credentials(RenderContext(variables), invocation.basic_auth)

        return ResolvedRequest(
            url=url,
            method=invocation.method,
            body=body,
            headers=headers,
            auth=auth,
        )

    def ttl_for(self, invocation: DirectiveInvocation) -> int:
        """Seconds a response to *invocation* may be reused."""
        if invocation.cache_ttl is not None:
            return invocation.cache_ttl
        return self._cache_config.ttl_seconds

    def cache_key(self, request: ResolvedRequest, ttl: int) -> Optional[str]:
        """Return the cache key for *request*, or ``None`` if it must not be cached.

        Only GET requests are eligible, and only while caching is enabled
        and *ttl* is above zero (``:cache 0`` bypasses the cache).
        """
        if request.method != HTTPMethod.GET:
            return None
        if not self._cache_config.enabled or ttl <= 0:
            return None
        return make_key(request.method.value, request.url, request.body)

    def fetch(
        self,
        invocation: DirectiveInvocation,
        variables: Mapping[str, Any],
        expand: Expander,
    ) -> NormalizedResponse:
        """Run *invocation* against *variables* and return the response.

        Raises:
            RenderError: On missing secrets.
            TransportError: If the request fails below the HTTP layer.
        """
        request = self.resolve(invocation, variables, expand)
        ttl = self.ttl_for(invocation)
        key = self.cache_key(request, ttl)

        cached = self._lookup(key, request)
        if cached is not None:
            return cached

        response = self._executor.execute(request)
        self._store(key, ttl, request, response)
        return response

    async def fetch_async(
        self,
        invocation: DirectiveInvocation,
        variables: Mapping[str, Any],
        expand: Expander,
    ) -> NormalizedResponse:
        """Async variant of :meth:`fetch`, sharing the same cache."""
        request = self.resolve(invocation, variables, expand)
        ttl = self.ttl_for(invocation)
        key = self.cache_key(request, ttl)

        cached = self._lookup(key, request)
        if cached is not None:
            return cached

        response = await self._async_executor.execute(request)
        self._store(key, ttl, request, response)
        return response

    def close(self) -> None:
        """Close the HTTP client and the cache."""
        self._executor.close()
        self._cache.close()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _lookup(self, key: Optional[str], request: ResolvedRequest) -> Optional[NormalizedResponse]:
        if key is None:
            return None
        entry = self._cache.get(key)
        if entry is None:
            get_output().debug(f"Cache miss: {request.method.value} {request.url}")
            return None
        get_output().debug(f"Cache hit: {request.method.value} {request.url}")
        return entry.to_response()

    def _store(
        self,
        key: Optional[str],
        ttl: int,
        request: ResolvedRequest,
        response: NormalizedResponse,
    ) -> None:
        if key is None or not (200 <= response.status_code < 300):
            return
        self._cache.put(
            key,
            CacheEntry(
                key=key,
                body=response.body_text,
                status_code=response.status_code,
                content_type=response.content_type,
                stored_at=self._cache.now(),
                ttl_seconds=ttl,
            ),
        )
        get_output().debug(f"Cached for {ttl}s: {request.method.value} {request.url}")
