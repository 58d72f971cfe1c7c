"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~jinja_connected.exceptions.ConnectedContentError`
subclass. Shell wrappers can inspect the exit code of
``jinja-connected render`` to tell a broken template from a failed request.

Example::

    $ jinja-connected render welcome.j2 --context user.json
    $ echo $?
    7   # EXIT_PARSE_ERROR -- a connected_content tag is malformed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_PARSE_ERROR = 7
"""A template (or a connected_content tag inside it) could not be compiled."""

EXIT_RENDER_ERROR = 8
"""Rendering aborted, e.g. because basic-auth secrets were missing."""
