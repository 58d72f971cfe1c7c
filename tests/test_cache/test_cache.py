"""Tests for the response caches and cache keys."""

from __future__ import annotations

from pathlib import Path

import pytest

from jinja_connected.cache import (
    DiskResponseCache,
    ManualClock,
    MemoryResponseCache,
    ResponseCache,
    SystemClock,
    make_key,
)
from jinja_connected.models import CacheEntry


def _entry(key: str = "k", body: str = "hello", stored_at: float = 0.0, ttl: int = 300) -> CacheEntry:
    return CacheEntry(
        key=key,
        body=body,
        status_code=200,
        content_type="text/plain",
        stored_at=stored_at,
        ttl_seconds=ttl,
    )


@pytest.fixture(params=["memory", "disk"])
def cache(request, tmp_path: Path, clock: ManualClock):
    """Each test runs against both backends on the same manual clock."""
    if request.param == "memory":
        c: ResponseCache = MemoryResponseCache(clock=clock)
    else:
        c = DiskResponseCache(tmp_path, clock=clock)
    yield c
    c.close()


# ------------------------------------------------------------------ #
# Keys
# ------------------------------------------------------------------ #


class TestMakeKey:
    def test_deterministic(self) -> None:
        assert make_key("GET", "https://x.test/a") == make_key("GET", "https://x.test/a")

    def test_method_case_insensitive(self) -> None:
        assert make_key("get", "https://x.test/a") == make_key("GET", "https://x.test/a")

    def test_url_distinguishes(self) -> None:
        assert make_key("GET", "https://x.test/a") != make_key("GET", "https://x.test/b")

    def test_method_distinguishes(self) -> None:
        assert make_key("GET", "https://x.test/a") != make_key("POST", "https://x.test/a")

    def test_body_distinguishes(self) -> None:
        assert make_key("POST", "https://x.test", "a=1") != make_key("POST", "https://x.test", "a=2")

    def test_empty_and_absent_body_equal(self) -> None:
        assert make_key("GET", "https://x.test", "") == make_key("GET", "https://x.test", None)

    def test_is_sha256_hex(self) -> None:
        key = make_key("GET", "https://x.test")
        assert len(key) == 64
        int(key, 16)


# ------------------------------------------------------------------ #
# Get / put
# ------------------------------------------------------------------ #


class TestGetPut:
    def test_miss(self, cache: ResponseCache) -> None:
        assert cache.get("missing") is None

    def test_put_then_get(self, cache: ResponseCache) -> None:
        cache.put("k", _entry())
        entry = cache.get("k")
        assert entry is not None
        assert entry.body == "hello"
        assert entry.status_code == 200

    def test_put_replaces(self, cache: ResponseCache) -> None:
        cache.put("k", _entry(body="old"))
        cache.put("k", _entry(body="new"))
        assert cache.get("k").body == "new"

    def test_clear(self, cache: ResponseCache) -> None:
        cache.put("k", _entry())
        cache.clear()
        assert cache.get("k") is None

    def test_to_response_marks_cached(self, cache: ResponseCache) -> None:
        cache.put("k", _entry())
        response = cache.get("k").to_response()
        assert response.from_cache is True
        assert response.body_text == "hello"
        assert response.content_type == "text/plain"


# ------------------------------------------------------------------ #
# Expiry
# ------------------------------------------------------------------ #


class TestExpiry:
    def test_live_just_before_ttl(self, cache: ResponseCache, clock: ManualClock) -> None:
        cache.put("k", _entry(stored_at=0, ttl=300))
        clock.set(299.999)
        assert cache.get("k") is not None

    def test_expired_at_ttl(self, cache: ResponseCache, clock: ManualClock) -> None:
        cache.put("k", _entry(stored_at=0, ttl=300))
        clock.set(300)
        assert cache.get("k") is None

    def test_zero_ttl_never_live(self, cache: ResponseCache) -> None:
        cache.put("k", _entry(ttl=0))
        assert cache.get("k") is None

    def test_expired_entry_replaced_by_put(self, cache: ResponseCache, clock: ManualClock) -> None:
        cache.put("k", _entry(body="old", stored_at=0, ttl=10))
        clock.set(50)
        cache.put("k", _entry(body="new", stored_at=50, ttl=10))
        assert cache.get("k").body == "new"

    def test_entry_expires_at(self) -> None:
        assert _entry(stored_at=100, ttl=300).expires_at == 400


# ------------------------------------------------------------------ #
# Stats and backend specifics
# ------------------------------------------------------------------ #


class TestMemoryCache:
    def test_stats_counts_live(self, clock: ManualClock) -> None:
        cache = MemoryResponseCache(clock=clock)
        cache.put("a", _entry(key="a", ttl=10))
        cache.put("b", _entry(key="b", ttl=100))
        clock.set(50)
        assert cache.stats() == {"backend": "memory", "size": 2, "live": 1}

    def test_default_clock_is_system(self) -> None:
        assert isinstance(MemoryResponseCache().clock, SystemClock)


class TestDiskCache:
    def test_persists_across_instances(self, tmp_path: Path, clock: ManualClock) -> None:
        first = DiskResponseCache(tmp_path, clock=clock)
        first.put("k", _entry(body="kept"))
        first.close()

        second = DiskResponseCache(tmp_path, clock=clock)
        try:
            assert second.get("k").body == "kept"
        finally:
            second.close()

    def test_stats(self, tmp_path: Path, clock: ManualClock) -> None:
        cache = DiskResponseCache(tmp_path, clock=clock)
        cache.put("k", _entry())
        stats = cache.stats()
        cache.close()
        assert stats["backend"] == "disk"
        assert stats["size"] == 1
        assert stats["directory"] == str(tmp_path / "responses")

    def test_closed_cache_is_inert(self, tmp_path: Path, clock: ManualClock) -> None:
        cache = DiskResponseCache(tmp_path, clock=clock)
        cache.close()
        cache.put("k", _entry())
        assert cache.get("k") is None
        assert cache.stats() == {"backend": "disk", "closed": True}
        cache.close()


class TestManualClock:
    def test_tick_and_set(self) -> None:
        clock = ManualClock(start=5)
        clock.tick(2.5)
        assert clock.now() == 7.5
        clock.set(1)
        assert clock.now() == 1
