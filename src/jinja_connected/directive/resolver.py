"""Expand placeholders in a tag's URL and body against the render context.

The URL template and the ``:body`` value of a ``connected_content`` tag may
embed ordinary Jinja expressions (``https://x.test/users/{{ user.id }}``).
:class:`TemplateExpander` compiles each such string once with the host
environment and renders it on every call, because the context differs from
one render to the next.

Expansion always runs without autoescaping and synchronously, whatever the
host environment is configured with: the result is a URL or a form body,
not HTML, and it is needed before the request can be sent.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, Template


class TemplateExpander:
    """Render small placeholder templates with the host Jinja environment.

    Args:
        environment: The environment the ``connected_content`` tag was
            compiled in. Its filters, tests, globals, and undefined policy
            apply to the expansion.

    Example::

        expander = TemplateExpander(env)
        expander.expand("https://x.test/{{ id }}", {"id": 7})
        # "https://x.test/7"
    """

    def __init__(self, environment: Environment) -> None:
        self._environment = environment.overlay(autoescape=False, enable_async=False)
        self._markers = (environment.variable_start_string, environment.block_start_string)
        self._templates: dict[str, Template] = {}
        self._lock = threading.Lock()

    def expand(self, source: str, context: Mapping[str, Any]) -> str:
        """Return *source* with every placeholder evaluated against *context*.

        Strings without a variable or block start marker are returned as-is.
        """
        if not any(marker in source for marker in self._markers):
            return source
        return self._compile(source).render(dict(context))

    def _compile(self, source: str) -> Template:
        with self._lock:
            template = self._templates.get(source)
            if template is None:
                template = self._environment.from_string(source)
                self._templates[source] = template
            return template
