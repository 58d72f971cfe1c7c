"""Basic-auth support for the ``:basic_auth`` tag option.

* :mod:`~jinja_connected.auth.secrets` -- looks up a named secret bundle in
  the reserved ``__secrets`` render-context entry.
* :mod:`~jinja_connected.auth.basic` -- turns the resulting
  :class:`~jinja_connected.models.Credentials` into an ``Authorization``
  header.
"""

from jinja_connected.auth.basic import basic_auth_header
from jinja_connected.auth.secrets import RenderContext, resolve_credentials

__all__ = ["RenderContext", "basic_auth_header", "resolve_credentials"]
