"""Turn a response into what the template sees.

A tag with ``:save name`` binds ``name`` to :func:`bind_response`'s result;
a tag without it writes :func:`emit_response`'s result where it stands.

Saved values always expose ``__http_status_code__`` (the status as a
string, so ``{{ user.__http_status_code__ == "200" }}`` works). A JSON
object body becomes :class:`JsonContent`, whose fields are reachable as
``{{ user.first_name }}``; any other body becomes :class:`TextContent`, a
``str`` that also carries the status attribute.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from markupsafe import Markup

from jinja_connected.client.response import Structured, parse_body
from jinja_connected.models import STATUS_CODE_FIELD, NormalizedResponse


class TextContent(str):
    """Response text that also carries ``__http_status_code__``."""

    def __new__(cls, text: str, status_code: int) -> TextContent:
        obj = super().__new__(cls, text)
        setattr(obj, STATUS_CODE_FIELD, str(status_code))
        return obj


class JsonContent:
    """Read-only view of a JSON object.

    Every field is reachable both as ``content.field`` and
    ``content["field"]``. The class has no mapping methods, so fields named
    ``items``, ``keys`` or ``get`` resolve to the response data in
    templates instead of to bound methods. Nested objects are wrapped the
    same way.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_data", dict(data))

    def __getitem__(self, key: str) -> Any:
        return _wrap(self._data[key])

    def __getattr__(self, name: str) -> Any:
        if name == "_data":
            raise AttributeError(name)
        try:
            return _wrap(self._data[name])
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JsonContent):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


def _wrap(value: Any) -> Any:
    if isinstance(value, dict):
        return JsonContent(value)
    if isinstance(value, list):
        return [_wrap(item) for item in value]
    return value


def bind_response(response: NormalizedResponse) -> Any:
    """Return the value a ``:save`` variable is bound to."""
    parsed = parse_body(response.body_text)
    if isinstance(parsed, Structured):
        data = dict(parsed.data)
        data[STATUS_CODE_FIELD] = str(response.status_code)
        return JsonContent(data)
    return TextContent(parsed.text, response.status_code)


def emit_response(response: NormalizedResponse) -> Markup:
    """Return the text written at the tag's position when there is no ``:save``.

    The body is emitted verbatim, JSON or not, and is marked safe so an
    autoescaping environment does not rewrite it.
    """
    return Markup(response.body_text)
