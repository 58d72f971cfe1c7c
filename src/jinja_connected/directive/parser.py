"""Parse the argument string of a ``connected_content`` tag.

Grammar::

    <url-template> [:save <name>] [:method <verb>] [:body <template>]
                   [:content_type <mime>] [:basic_auth <secret>] [:cache <seconds>]

The argument string is split on whitespace, except that Jinja placeholder
expressions (``{{ ... }}`` and ``{% ... %}``) are kept whole even when they
contain spaces, so ``https://x.test/{{ user.id }}`` stays a single token.

The first token is the URL template. A token of the form ``:word`` starts
an option; every token after it up to the next ``:word`` is the option's
value. The value is the source text from its first to its last token,
so whitespace inside a ``:body`` is sent as written. Any violation raises
:class:`~jinja_connected.exceptions.ParseError` quoting the whole tag.

The single public function is :func:`parse_directive`.
"""

from __future__ import annotations

import functools
import re

from jinja_connected.exceptions import ParseError
from jinja_connected.models import DirectiveInvocation, HTTPMethod

TAG_NAME = "connected_content"

OPTION_NAMES = frozenset(
    {"save", "method", "body", "content_type", "basic_auth", "cache"}
)

_TOKEN_RE = re.compile(r"(?:\{\{.*?\}\}|\{%.*?%\}|\S)+")
_KEYWORD_RE = re.compile(r"^:([A-Za-z_][A-Za-z0-9_]*)$")
_URL_RE = re.compile(r"^https?://[^\s/?#]+", re.IGNORECASE)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@functools.lru_cache(maxsize=1024)
def parse_directive(raw: str) -> DirectiveInvocation:
    """Parse a tag's argument string into a :class:`DirectiveInvocation`.

    Results are memoised per argument string; the returned model is frozen,
    so sharing it between compilations of the same template is safe.

    Args:
        raw: Everything between ``connected_content`` and the closing
            ``%}``.

    Returns:
        The parsed invocation.

    Raises:
        ParseError: If the URL is missing or malformed, an option keyword
            is unknown or lacks a value, or an option value is invalid.

    Example::

        inv = parse_directive("https://x.test/json/{{ id }} :save user")
        inv.url_template     # "https://x.test/json/{{ id }}"
        inv.target_variable  # "user"
    """
    raw = raw.strip()
    tokens = list(_TOKEN_RE.finditer(raw))
    if not tokens or not _URL_RE.match(tokens[0].group()):
        raise _illegal(raw)

    options: list[tuple[str, str]] = []
    name: str | None = None
    value: list[re.Match[str]] = []
    for token in tokens[1:]:
        keyword = _KEYWORD_RE.match(token.group())
        if keyword:
            if name is not None:
                options.append(_option(raw, name, value))
            name = keyword.group(1)
            if name not in OPTION_NAMES:
                raise _illegal(raw)
            value = []
        elif name is None:
            # A second bare token after the URL.
            raise _illegal(raw)
        else:
            value.append(token)
    if name is not None:
        options.append(_option(raw, name, value))

    return DirectiveInvocation(raw=raw, url_template=tokens[0].group(), options=tuple(options))


def _option(raw: str, name: str, tokens: list[re.Match[str]]) -> tuple[str, str]:
    """Validate one option and return its ``(name, value)`` pair."""
    if not tokens:
        raise _illegal(raw)
    value = raw[tokens[0].start():tokens[-1].end()]

    if name == "save" and not _IDENTIFIER_RE.match(value):
        raise _illegal(raw)
    if name == "method":
        try:
            HTTPMethod(value.upper())
        except ValueError:
            raise _illegal(raw) from None
    if name == "cache" and not value.isdigit():
        raise _illegal(raw)
    if name in ("content_type", "basic_auth") and len(tokens) > 1:
        raise _illegal(raw)
    return name, value


def _illegal(raw: str) -> ParseError:
    return ParseError(f"illegal token {{% {TAG_NAME} {raw} %}}")
