"""Response caches for GET requests issued by connected_content tags.

Cache keys are SHA-256 hashes of ``METHOD|URL|BODY`` so that distinct
logical requests never share an entry. Entries carry their own
``stored_at`` and ``ttl_seconds``; a lookup only returns an entry while
``clock.now() < stored_at + ttl_seconds``. Expired entries are not deleted,
they are simply overwritten by the next :meth:`ResponseCache.put` for the
same key.

Which requests are eligible (GET only, TTL above zero) is decided by
:class:`~jinja_connected.engine.ConnectedContent`; the caches here store
whatever they are given.
"""

from __future__ import annotations

import hashlib
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

import diskcache

from jinja_connected.cache.clock import Clock, SystemClock
from jinja_connected.models import CacheEntry


def make_key(method: str, url: str, body: Optional[str] = None) -> str:
    """Generate a cache key from method, URL, and request body.

    The method is case-insensitive; an absent body and an empty body map
    to the same key.
    """
    raw = "|".join([method.upper(), url, body or ""])
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class ResponseCache(ABC):
    """Contract shared by every response cache.

    Args:
        clock: Time source for liveness checks. Defaults to
            :class:`~jinja_connected.cache.clock.SystemClock`.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or SystemClock()

    @property
    def clock(self) -> Clock:
        return self._clock

    def now(self) -> float:
        """Current reading of the cache's clock."""
        return self._clock.now()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for *key*, or ``None`` on a miss or expiry."""
        entry = self._load(key)
        if entry is None or not entry.is_live(self.now()):
            return None
        return entry

    def put(self, key: str, entry: CacheEntry) -> None:
        """Store *entry* under *key*, replacing any previous entry."""
        self._store(key, entry)

    @abstractmethod
    def _load(self, key: str) -> Optional[CacheEntry]: ...

    @abstractmethod
    def _store(self, key: str, entry: CacheEntry) -> None: ...

    @abstractmethod
    def clear(self) -> None:
        """Remove all entries."""

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Return a JSON-serialisable summary of the cache."""

    def close(self) -> None:
        """Release any resources held by the cache."""


class MemoryResponseCache(ResponseCache):
    """In-process cache shared by all renders that use the same engine.

    Reads and writes are serialised with a lock, so concurrent renders see
    either the previous entry or the new one, never a partial write. Two
    renders missing on the same key may both fetch; the last store wins.

    Example::

        cache = MemoryResponseCache(clock=ManualClock())
        cache.put(key, entry)
        cache.get(key)
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _load(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def _store(self, key: str, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        with self._lock:
            entries = list(self._entries.values())
        now = self.now()
        return {
            "backend": "memory",
            "size": len(entries),
            "live": sum(1 for e in entries if e.is_live(now)),
        }


class DiskResponseCache(ResponseCache):
    """Disk-backed cache using :mod:`diskcache`.

    Entries are stored as JSON dicts in a ``responses/`` subdirectory of
    *cache_dir*. Expiry is decided by the injected clock rather than by
    diskcache's own ``expire`` so that TTL behaviour matches
    :class:`MemoryResponseCache` exactly.

    Args:
        cache_dir: Root directory for the cache.
        clock: Time source for liveness checks.
    """

    def __init__(self, cache_dir: str | Path, clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self._cache_dir = Path(cache_dir)
        self._cache: Optional[diskcache.Cache] = diskcache.Cache(
            str(self._cache_dir / "responses")
        )

    def _load(self, key: str) -> Optional[CacheEntry]:
        if self._cache is None:
            return None
        data = self._cache.get(key)
        if data is None:
            return None
        return CacheEntry.model_validate(data)

    def _store(self, key: str, entry: CacheEntry) -> None:
        if self._cache is None:
            return
        self._cache.set(key, entry.model_dump(mode="json"))

    def clear(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def stats(self) -> dict[str, Any]:
        if self._cache is None:
            return {"backend": "disk", "closed": True}
        return {
            "backend": "disk",
            "size": len(self._cache),
            "directory": str(self._cache_dir / "responses"),
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        if self._cache is not None:
            self._cache.close()
            self._cache = None
