"""Cache commands -- inspect and clear the disk response cache.

Only the ``disk`` backend outlives a process, so these commands always
operate on the cache directory (see
:func:`~jinja_connected.config.get_cache_dir`). The ``memory`` backend is
private to each render process.
"""

from __future__ import annotations

import typer

from jinja_connected.output import format_response, info, success

cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("stats")
def cache_stats() -> None:
    """Show the number of stored responses and the cache location.

    Example::

        jinja-connected cache stats --json
    """
    from jinja_connected.cache import DiskResponseCache
    from jinja_connected.config import get_cache_dir, resolve_config

    config = resolve_config()
    cache = DiskResponseCache(get_cache_dir())
    try:
        stats = cache.stats()
    finally:
        cache.close()
    stats["active_backend"] = config.cache.backend
    stats["ttl_seconds"] = config.cache.ttl_seconds
    format_response(stats)


@cache_app.command("clear")
def cache_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete every stored response.

    Example::

        jinja-connected cache clear --yes
    """
    from jinja_connected.cache import DiskResponseCache
    from jinja_connected.config import get_cache_dir

    if not yes and not typer.confirm("Delete all cached responses?"):
        info("Cancelled.")
        raise typer.Exit()

    cache = DiskResponseCache(get_cache_dir())
    try:
        cache.clear()
    finally:
        cache.close()
    success("Response cache cleared.")
