"""Tests for the ConnectedContent engine, independent of Jinja templates."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import httpx
import pytest

from jinja_connected.directive import parse_directive
from jinja_connected.engine import ConnectedContent
from jinja_connected.exceptions import RenderError
from jinja_connected.models import CacheConfig, Credentials, HTTPMethod


def _expand(source: str, variables: Mapping[str, Any]) -> str:
    """Minimal expander: replaces ``{id}`` style markers."""
    return source.format(**variables)


class TestResolve:
    def test_url_and_body_expanded(self, engine: ConnectedContent) -> None:
        inv = parse_directive("https://x.test/{id} :method post :body n={name}")
        request = engine.resolve(inv, {"id": 5, "name": "q"}, _expand)
        assert request.url == "https://x.test/5"
        assert request.method == HTTPMethod.POST
        assert request.body == "n=q"
        assert request.auth is None

    def test_content_type_becomes_accept(self, engine: ConnectedContent) -> None:
        inv = parse_directive("https://x.test :content_type application/xml")
        assert engine.resolve(inv, {}, _expand).headers == {"Accept": "application/xml"}

    def test_basic_auth(self, engine: ConnectedContent) -> None:
        inv = parse_directive("https://x.test :basic_auth crm")
        variables = {"__secrets": {"crm": {"username": "u", "password": "p"}}}
        request = engine.resolve(inv, variables, _expand)
        assert request.auth == Credentials(username="u", password="p")

    def test_basic_auth_missing(self, engine: ConnectedContent) -> None:
        inv = parse_directive("https://x.test :basic_auth crm")
        with pytest.raises(RenderError):
            engine.resolve(inv, {}, _expand)


class TestTtlAndKeys:
    def test_default_ttl_from_config(self) -> None:
        engine = ConnectedContent(cache_config=CacheConfig(ttl_seconds=42))
        assert engine.ttl_for(parse_directive("https://x.test")) == 42

    def test_option_overrides_default(self, engine: ConnectedContent) -> None:
        assert engine.ttl_for(parse_directive("https://x.test :cache 7")) == 7

    def test_get_has_key(self, engine: ConnectedContent) -> None:
        request = engine.resolve(parse_directive("https://x.test"), {}, _expand)
        assert engine.cache_key(request, 300) is not None

    def test_zero_ttl_has_no_key(self, engine: ConnectedContent) -> None:
        request = engine.resolve(parse_directive("https://x.test"), {}, _expand)
        assert engine.cache_key(request, 0) is None

    @pytest.mark.parametrize("verb", ["post", "put", "patch", "delete"])
    def test_non_get_has_no_key(self, engine: ConnectedContent, verb: str) -> None:
        request = engine.resolve(parse_directive(f"https://x.test :method {verb}"), {}, _expand)
        assert engine.cache_key(request, 300) is None

    def test_disabled_cache_has_no_key(self) -> None:
        engine = ConnectedContent(cache_config=CacheConfig(enabled=False))
        request = engine.resolve(parse_directive("https://x.test"), {}, _expand)
        assert engine.cache_key(request, 300) is None


class TestFetch:
    def test_miss_then_hit(self, engine: ConnectedContent, transport) -> None:
        transport.queue(httpx.Response(200, text="body"))
        inv = parse_directive("https://x.test/a")
        first = engine.fetch(inv, {}, _expand)
        second = engine.fetch(inv, {}, _expand)
        assert first.from_cache is False
        assert second.from_cache is True
        assert second.body_text == "body"
        assert transport.calls == 1

    def test_entry_stamped_with_cache_clock(self, engine: ConnectedContent, transport, clock) -> None:
        clock.set(1000)
        transport.queue(httpx.Response(200, text="body"))
        inv = parse_directive("https://x.test/a :cache 60")
        engine.fetch(inv, {}, _expand)
        request = engine.resolve(inv, {}, _expand)
        entry = engine.cache.get(engine.cache_key(request, 60))
        assert entry.stored_at == 1000
        assert entry.expires_at == 1060

    def test_expired_entry_refetched(self, engine: ConnectedContent, transport, clock) -> None:
        transport.queue(httpx.Response(200, text="v1"), httpx.Response(200, text="v2"))
        inv = parse_directive("https://x.test/a :cache 10")
        assert engine.fetch(inv, {}, _expand).body_text == "v1"
        clock.set(10)
        assert engine.fetch(inv, {}, _expand).body_text == "v2"
        clock.set(15)
        assert engine.fetch(inv, {}, _expand).body_text == "v2"
        assert transport.calls == 2

    def test_non_2xx_not_stored(self, engine: ConnectedContent, transport) -> None:
        transport.queue(httpx.Response(404, text="nope"))
        engine.fetch(parse_directive("https://x.test/a"), {}, _expand)
        assert engine.cache.stats()["size"] == 0

    def test_async_fetch_uses_same_cache(self, engine: ConnectedContent, transport) -> None:
        transport.queue(httpx.Response(200, text="body"))
        inv = parse_directive("https://x.test/a")
        first = asyncio.run(engine.fetch_async(inv, {}, _expand))
        second = engine.fetch(inv, {}, _expand)
        assert first.body_text == second.body_text == "body"
        assert second.from_cache is True
        assert transport.calls == 1

    def test_verbose_output_reports_cache_hits(self, engine: ConnectedContent, transport, capsys) -> None:
        from jinja_connected.output import OutputManager, set_output

        set_output(OutputManager(no_color=True, verbose=True))
        transport.queue(httpx.Response(200, text="body"))
        inv = parse_directive("https://x.test/a")
        engine.fetch(inv, {}, _expand)
        engine.fetch(inv, {}, _expand)
        err = capsys.readouterr().err
        assert "Cache miss: GET https://x.test/a" in err
        assert "Cache hit: GET https://x.test/a" in err
