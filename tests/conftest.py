"""Shared test fixtures for jinja_connected.

Provides reusable fixtures for scripted HTTP transports, deterministic
clocks, isolated config environments, and output state. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Iterator

import httpx
import pytest

from jinja_connected.cache import ManualClock, MemoryResponseCache
from jinja_connected.engine import ConnectedContent
from jinja_connected.environment import create_engine, create_environment
from jinja_connected.models import CacheConfig, GlobalConfig
from jinja_connected.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> Iterator[None]:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file"). Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Scripted HTTP transport
# ---------------------------------------------------------------------------


class ScriptedTransport(httpx.MockTransport):
    """A mock transport that replays queued replies in order.

    Every request is recorded in :attr:`requests`. Once the queue is empty
    each further request is answered with an empty ``404``, so a template
    that fetches more often than expected renders an empty string instead
    of a stale value.
    """

    def __init__(self, *replies: httpx.Response) -> None:
        self.replies: deque[httpx.Response] = deque(replies)
        self.requests: list[httpx.Request] = []
        super().__init__(self._handle)

    def queue(self, *replies: httpx.Response) -> None:
        self.replies.extend(replies)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.replies:
            return self.replies.popleft()
        return httpx.Response(404)


@pytest.fixture
def scripted_transport() -> type[ScriptedTransport]:
    """The ScriptedTransport class, for tests that need more than one."""
    return ScriptedTransport


@pytest.fixture
def transport() -> ScriptedTransport:
    """An empty scripted transport; tests queue replies on it."""
    return ScriptedTransport()


@pytest.fixture
def clock() -> ManualClock:
    """A manual clock starting at zero."""
    return ManualClock()


@pytest.fixture
def engine(transport: ScriptedTransport, clock: ManualClock) -> Iterator[ConnectedContent]:
    """An engine with an in-memory cache on a manual clock and the scripted transport."""
    eng = create_engine(
        GlobalConfig(cache=CacheConfig()),
        cache=MemoryResponseCache(clock=clock),
        transport=transport,
    )
    yield eng
    eng.close()


@pytest.fixture
def env(engine: ConnectedContent):
    """A synchronous Jinja2 environment wired to the test engine."""
    return create_environment(engine=engine)


@pytest.fixture
def async_env(engine: ConnectedContent):
    """An ``enable_async`` Jinja2 environment sharing the test engine."""
    return create_environment(engine=engine, enable_async=True)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME, XDG_CACHE_HOME, and XDG_DATA_HOME to
    subdirectories of tmp_path so that tests never touch real user
    config. Clears all JINJA_CONNECTED_* environment variables and changes
    the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("jinja_connected.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "JINJA_CONNECTED_CACHE_TTL",
        "JINJA_CONNECTED_CACHE_BACKEND",
        "JINJA_CONNECTED_TIMEOUT",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> Iterator[OutputManager]:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
