"""Compile-time and render-time handling of the ``connected_content`` tag text.

* :mod:`~jinja_connected.directive.parser` -- splits the tag's argument
  string into a URL template and ``:option value`` pairs, producing an
  immutable :class:`~jinja_connected.models.DirectiveInvocation`.
* :mod:`~jinja_connected.directive.resolver` -- expands ``{{ ... }}``
  placeholders in the URL and body against the active render context.
"""

from jinja_connected.directive.parser import OPTION_NAMES, parse_directive
from jinja_connected.directive.resolver import TemplateExpander

__all__ = ["OPTION_NAMES", "TemplateExpander", "parse_directive"]
