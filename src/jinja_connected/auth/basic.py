"""HTTP Basic authentication header construction.

The ``username:password`` pair is Base64-encoded and sent as an
``Authorization: Basic <encoded>`` header per :rfc:`7617`.
"""

from __future__ import annotations

import base64

from jinja_connected.models import Credentials


def basic_auth_header(credentials: Credentials) -> dict[str, str]:
    """Return the ``Authorization`` header for *credentials*.

    Example::

        basic_auth_header(Credentials(username="user", password="pass"))
        # {"Authorization": "Basic dXNlcjpwYXNz"}
    """
    raw = f"{credentials.username}:{credentials.password}"
    encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {encoded}"}
