"""Exception hierarchy for jinja_connected.

All exceptions inherit from :class:`ConnectedContentError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`jinja_connected.exit_codes`. The CLI entry point in
:func:`jinja_connected.app.main` catches ``ConnectedContentError`` and exits
with the appropriate code.

Jinja2 lets these exceptions propagate unchanged: a :class:`ParseError`
escapes ``Environment.from_string`` and a :class:`RenderError` escapes
``Template.render``.

Subclass hierarchy::

    ConnectedContentError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ParseError          (exit 7)
    +-- RenderError         (exit 8)
    |   +-- TransportError  (exit 6)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Optional

from jinja_connected.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PARSE_ERROR,
    EXIT_RENDER_ERROR,
)


class ConnectedContentError(Exception):
    """Base exception for all jinja_connected errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ConnectedContentError):
    """Raised for invalid CLI arguments (e.g. a malformed ``--var``)."""

    exit_code = EXIT_INVALID_USAGE


class ParseError(ConnectedContentError):
    """Raised at template-compile time for a malformed ``connected_content`` tag.

    The message always quotes the offending tag verbatim, e.g.
    ``illegal token {% connected_content aabbcc %}``.

    Attributes:
        lineno: Template line of the tag, when known.
    """

    exit_code = EXIT_PARSE_ERROR

    def __init__(self, message: str, lineno: Optional[int] = None):
        super().__init__(message)
        self.lineno = lineno


class RenderError(ConnectedContentError):
    """Raised at render time; aborts the current render call."""

    exit_code = EXIT_RENDER_ERROR


class TransportError(RenderError):
    """Raised when the HTTP request fails below the HTTP layer.

    Covers connection refused, DNS failure, and timeouts once all retries
    are exhausted. A response with a 4xx/5xx status is *not* a transport
    error.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(ConnectedContentError):
    """Raised for configuration problems (invalid JSON, failed validation, unreadable files)."""

    exit_code = EXIT_GENERIC_FAILURE
