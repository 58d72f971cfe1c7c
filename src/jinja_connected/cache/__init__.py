"""Time-based response caching for connected_content requests.

This package provides the :class:`ResponseCache` contract and two
implementations, both keyed by ``METHOD|URL|BODY`` and both comparing TTLs
against an injected :class:`Clock`:

* :class:`MemoryResponseCache` -- a lock-guarded dict shared by every render
  that uses the same engine (the default).
* :class:`DiskResponseCache` -- entries persisted with :mod:`diskcache`, so
  separate ``jinja-connected render`` processes share responses.

The cache is consumed by :class:`~jinja_connected.engine.ConnectedContent`
and selected by the ``cache`` section of the configuration
(:class:`~jinja_connected.models.CacheConfig`).
"""

from jinja_connected.cache.cache import (
    DiskResponseCache,
    MemoryResponseCache,
    ResponseCache,
    make_key,
)
from jinja_connected.cache.clock import Clock, ManualClock, SystemClock

__all__ = [
    "Clock",
    "DiskResponseCache",
    "ManualClock",
    "MemoryResponseCache",
    "ResponseCache",
    "SystemClock",
    "make_key",
]
