"""Built-in CLI sub-commands for jinja-connected.

* :mod:`~jinja_connected.commands.render` -- render a template with the
  ``connected_content`` tag enabled.
* :mod:`~jinja_connected.commands.cache` -- inspect or clear the disk
  response cache.
* :mod:`~jinja_connected.commands.config` -- view and modify global
  settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``cache`` and ``config``) or a plain callback
function registered directly on the root app (``render``).
"""
