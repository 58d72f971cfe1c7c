"""Canonical Pydantic models shared across all jinja_connected modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`CacheConfig`, :class:`OutputConfig`, and
    :class:`GlobalConfig`.

**Directive models** -- produced while compiling and rendering a
``connected_content`` tag:
    :class:`HTTPMethod`, :class:`DirectiveInvocation`, :class:`Credentials`,
    :class:`ResolvedRequest`, :class:`NormalizedResponse`, and
    :class:`CacheEntry`.
"""

from __future__ import annotations

import enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CACHE_TTL = 300
"""Seconds a cached GET response stays live when the tag has no ``:cache``."""

STATUS_CODE_FIELD = "__http_status_code__"
"""Name of the field carrying the response status on a saved variable."""

SECRETS_CONTEXT_KEY = "__secrets"
"""Reserved render-context entry holding basic-auth secret bundles."""


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to every request a tag issues."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(
        default=0, ge=0, description="Retries on connection errors and timeouts"
    )


class CacheConfig(BaseModel):
    """Response cache settings stored in :class:`GlobalConfig`."""

    enabled: bool = Field(default=True, description="Enable response caching")
    ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL, ge=0, description="Default cache TTL in seconds"
    )
    backend: Literal["memory", "disk"] = Field(
        default="memory",
        description="memory: per-process dict; disk: diskcache under the cache dir",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/jinja-connected/config.json``.

    Fields here have the lowest precedence and can be overridden by project
    config, environment variables, or CLI flags. See
    :func:`~jinja_connected.config.resolve_config` for the full precedence
    chain.
    """

    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Directive models ---


class HTTPMethod(str, enum.Enum):
    """HTTP verbs accepted by the ``:method`` option."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class DirectiveInvocation(BaseModel):
    """One ``connected_content`` tag occurrence, as parsed at compile time.

    ``options`` keeps every ``(keyword, value)`` pair in source order; the
    accessors below return the last value given for a keyword, so a later
    duplicate overrides an earlier one.

    Example::

        inv = parse_directive("https://x.test/a :save user :cache 60")
        inv.target_variable  # "user"
        inv.cache_ttl        # 60
    """

    model_config = ConfigDict(frozen=True)

    raw: str
    url_template: str
    options: tuple[tuple[str, str], ...] = ()

    def option(self, name: str) -> Optional[str]:
        """Return the last value given for option *name*, or ``None``."""
        value: Optional[str] = None
        for key, candidate in self.options:
            if key == name:
                value = candidate
        return value

    @property
    def target_variable(self) -> Optional[str]:
        return self.option("save")

    @property
    def method(self) -> HTTPMethod:
        verb = self.option("method")
        return HTTPMethod(verb.upper()) if verb else HTTPMethod.GET

    @property
    def body_template(self) -> Optional[str]:
        return self.option("body")

    @property
    def content_type(self) -> Optional[str]:
        return self.option("content_type")

    @property
    def basic_auth(self) -> Optional[str]:
        return self.option("basic_auth")

    @property
    def cache_ttl(self) -> Optional[int]:
        ttl = self.option("cache")
        return int(ttl) if ttl is not None else None


class Credentials(BaseModel):
    """Basic-auth credentials taken from a secret bundle for one render."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class ResolvedRequest(BaseModel):
    """A fully expanded request, rebuilt from the invocation on every render."""

    url: str
    method: HTTPMethod = HTTPMethod.GET
    body: Optional[str] = None
    headers: dict[str, str] = Field(default_factory=dict)
    auth: Optional[Credentials] = None


class NormalizedResponse(BaseModel):
    """The parts of an HTTP response the tag cares about."""

    status_code: int
    body_text: str = ""
    content_type: str = ""
    from_cache: bool = False


class CacheEntry(BaseModel):
    """A stored response plus the bookkeeping needed to decide liveness.

    An entry is live while ``now < stored_at + ttl_seconds``; expired
    entries are never deleted explicitly, only superseded by the next store
    for the same key.
    """

    key: str
    body: str
    status_code: int
    content_type: str = ""
    stored_at: float
    ttl_seconds: int

    @property
    def expires_at(self) -> float:
        return self.stored_at + self.ttl_seconds

    def is_live(self, now: float) -> bool:
        """Return ``True`` if the entry may still be served at time *now*."""
        return now < self.expires_at

    def to_response(self) -> NormalizedResponse:
        return NormalizedResponse(
            status_code=self.status_code,
            body_text=self.body,
            content_type=self.content_type,
            from_cache=True,
        )
