"""Factories wiring configuration, cache, executors, and Jinja together.

* :func:`create_engine` builds a :class:`~jinja_connected.engine.ConnectedContent`
  from a :class:`~jinja_connected.models.GlobalConfig`.
* :func:`create_environment` returns a :class:`jinja2.Environment` with the
  ``connected_content`` tag installed and an engine attached.

Create the engine once per process and pass it to every environment that
should share cached responses.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from jinja2 import Environment

from jinja_connected.cache.cache import DiskResponseCache, MemoryResponseCache, ResponseCache
from jinja_connected.cache.clock import Clock
from jinja_connected.client.async_client import AsyncHttpExecutor
from jinja_connected.client.sync_client import HttpExecutor
from jinja_connected.config import get_cache_dir
from jinja_connected.engine import ConnectedContent
from jinja_connected.extension import ENGINE_ATTRIBUTE, ConnectedContentExtension
from jinja_connected.models import GlobalConfig


def create_engine(
    config: Optional[GlobalConfig] = None,
    cache: Optional[ResponseCache] = None,
    clock: Optional[Clock] = None,
    transport: Optional[httpx.BaseTransport] = None,
    async_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ConnectedContent:
    """Build an engine from *config*.

    Args:
        config: Effective configuration; defaults apply when ``None``.
        cache: Cache to use instead of the one ``config.cache.backend``
            selects.
        clock: Time source for the cache created here.
        transport: httpx transport for synchronous requests. An object that
            is also an async transport (like :class:`httpx.MockTransport`)
            is used for async requests too.
        async_transport: httpx transport for async requests.

    Returns:
        A ready-to-use :class:`~jinja_connected.engine.ConnectedContent`.
    """
    config = config or GlobalConfig()
    if cache is None:
        if config.cache.backend == "disk":
            cache = DiskResponseCache(get_cache_dir(), clock=clock)
        else:
            cache = MemoryResponseCache(clock=clock)

    if async_transport is None and isinstance(transport, httpx.AsyncBaseTransport):
        async_transport = transport

    return ConnectedContent(
        cache=cache,
        executor=HttpExecutor(config.request, transport=transport),
        async_executor=AsyncHttpExecutor(config.request, transport=async_transport),
        cache_config=config.cache,
    )


def create_environment(
    engine: Optional[ConnectedContent] = None,
    config: Optional[GlobalConfig] = None,
    **options: Any,
) -> Environment:
    """Return a Jinja2 environment with the ``connected_content`` tag.

    Args:
        engine: Engine to attach; built from *config* when ``None``.
        config: Used only when *engine* is ``None``.
        **options: Passed to :class:`jinja2.Environment` (``loader``,
            ``autoescape``, ``enable_async``, extra ``extensions``...).

    Example::

        env = create_environment(loader=FileSystemLoader("templates"))
        env.get_template("welcome.j2").render(user_id=42)
    """
    extensions = list(options.pop("extensions", ()))
    if ConnectedContentExtension not in extensions:
        extensions.append(ConnectedContentExtension)
    environment = Environment(extensions=extensions, **options)
    setattr(environment, ENGINE_ATTRIBUTE, engine or create_engine(config))
    return environment
