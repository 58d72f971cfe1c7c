"""Normalise httpx responses and classify their bodies.

:func:`normalize_response` reduces an :class:`httpx.Response` to the three
things a tag needs (status, text, content type). :func:`parse_body` makes
a best-effort JSON parse and returns an explicit tagged result:

* :class:`Structured` -- the body is a JSON object; its fields become
  attributes of a saved variable.
* :class:`Raw` -- anything else (plain text, HTML, JSON arrays or scalars,
  invalid JSON, an empty body).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

import httpx

from jinja_connected.models import NormalizedResponse


@dataclass(frozen=True)
class Structured:
    """A response body that parsed as a JSON object."""

    data: dict[str, Any]


@dataclass(frozen=True)
class Raw:
    """A response body kept as text."""

    text: str


ParsedBody = Union[Structured, Raw]


def parse_body(text: str) -> ParsedBody:
    """Classify *text* as :class:`Structured` or :class:`Raw`.

    Example::

        parse_body('{"a": 1}')   # Structured(data={"a": 1})
        parse_body("[1, 2]")     # Raw(text="[1, 2]")
        parse_body("hello")      # Raw(text="hello")
    """
    if not text.strip():
        return Raw(text)
    try:
        data = json.loads(text)
    except ValueError:
        return Raw(text)
    if isinstance(data, dict):
        return Structured(data)
    return Raw(text)


def normalize_response(response: httpx.Response) -> NormalizedResponse:
    """Extract status, body text, and ``Content-Type`` from *response*."""
    return NormalizedResponse(
        status_code=response.status_code,
        body_text=response.text if response.content else "",
        content_type=response.headers.get("content-type", ""),
    )
