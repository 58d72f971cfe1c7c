"""Resolve basic-auth credentials from the render context.

Templates never carry passwords. Instead the caller passes a reserved
context entry, ``__secrets``, mapping a bundle name to a ``username`` /
``password`` pair, and the tag names the bundle::

    env.from_string(
        "{% connected_content https://x.test/auth :basic_auth crm %}"
    ).render(__secrets={"crm": {"username": "svc", "password": "..."}})

Each failure mode raises its own :class:`~jinja_connected.exceptions.RenderError`
message so that template authors can tell a missing bundle from an
incomplete one.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from jinja_connected.exceptions import RenderError
from jinja_connected.models import SECRETS_CONTEXT_KEY, Credentials


class RenderContext:
    """Typed, read-only accessors over a render context mapping.

    Every lookup returns ``None`` when the entry is absent (or has the wrong
    shape) instead of probing attributes on arbitrary objects.

    Args:
        variables: The flattened render context (globals, template
            variables, and loop locals).
    """

    def __init__(self, variables: Mapping[str, Any]) -> None:
        self._variables = variables

    @property
    def variables(self) -> Mapping[str, Any]:
        return self._variables

    def get_mapping(self, name: str) -> Optional[Mapping[str, Any]]:
        """Return the entry *name* if it is a mapping, else ``None``."""
        value = self._variables.get(name)
        if isinstance(value, Mapping):
            return value
        return None

    def secrets(self) -> Optional[Mapping[str, Any]]:
        """Return the reserved ``__secrets`` entry, or ``None`` if not supplied."""
        return self.get_mapping(SECRETS_CONTEXT_KEY)


def resolve_credentials(context: RenderContext, name: str) -> Credentials:
    """Return the credentials stored under bundle *name*.

    Args:
        context: The active render context.
        name: The bundle named by the tag's ``:basic_auth`` option.

    Returns:
        The bundle's :class:`~jinja_connected.models.Credentials`.

    Raises:
        RenderError: ``No secrets defined in context!`` when ``__secrets``
            is absent, ``No secret found for <name>`` when the bundle is
            absent, and ``No username or password set for <name>`` when
            either field is missing or empty.
    """
    secrets = context.secrets()
    if secrets is None:
        raise RenderError("No secrets defined in context!")

    bundle = secrets.get(name)
    if not isinstance(bundle, Mapping):
        raise RenderError(f"No secret found for {name}")

    username = bundle.get("username")
    password = bundle.get("password")
    if not username or not password:
        raise RenderError(f"No username or password set for {name}")

    return Credentials(username=str(username), password=str(password))
