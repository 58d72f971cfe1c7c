"""Render command -- render a template file with connected_content enabled.

The template is compiled in a Jinja2 environment whose loader points at the
template's directory, so ``{% include %}`` and ``{% extends %}`` resolve
relative to it. The rendered text is written to stdout unchanged (no
trailing newline is added).
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import jinja2
import typer

from jinja_connected.config import resolve_config
from jinja_connected.environment import create_engine, create_environment
from jinja_connected.exceptions import ConnectedContentError, InvalidUsageError
from jinja_connected.exit_codes import EXIT_PARSE_ERROR, EXIT_RENDER_ERROR
from jinja_connected.loader import load_mapping
from jinja_connected.models import SECRETS_CONTEXT_KEY
from jinja_connected.output import debug, error, print_data


def render_command(
    template: str = typer.Argument(help="Template file to render, or '-' for stdin."),
    context_file: Optional[str] = typer.Option(
        None, "--context", "-c", help="JSON/YAML file with template variables."
    ),
    variables: Optional[list[str]] = typer.Option(
        None, "--var", "-V", help="Template variable as key=value (repeatable)."
    ),
    secrets_file: Optional[str] = typer.Option(
        None, "--secrets", "-s", help="JSON/YAML file with basic-auth secret bundles."
    ),
    cache_ttl: Optional[int] = typer.Option(
        None, "--cache-ttl", help="Default cache TTL in seconds."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="HTTP timeout in seconds."
    ),
    use_async: bool = typer.Option(
        False, "--async", help="Render with an async Jinja environment."
    ),
) -> None:
    """Render a template, fetching connected content as it goes.

    Variables from ``--var`` override those from ``--context``. Secret
    bundles from ``--secrets`` are exposed to ``:basic_auth`` only.

    Example::

        jinja-connected render welcome.j2 --context user.json
        jinja-connected render - --var user_id=42 < welcome.j2
    """
    try:
        config = resolve_config(cli_cache_ttl=cache_ttl, cli_timeout=timeout)
        context = _build_context(context_file, variables or [], secrets_file)
        source, loader_dir = _read_template(template)
    except ConnectedContentError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    engine = create_engine(config)
    environment = create_environment(
        engine=engine,
        loader=jinja2.FileSystemLoader(str(loader_dir)),
        enable_async=use_async,
        keep_trailing_newline=True,
    )
    debug(f"Rendering {template} (cache: {config.cache.backend}, ttl {config.cache.ttl_seconds}s)")
    try:
        result = environment.from_string(source).render(context)
    except ConnectedContentError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except jinja2.TemplateSyntaxError as exc:
        error(f"Template syntax error: {exc}")
        raise typer.Exit(code=EXIT_PARSE_ERROR) from None
    except jinja2.TemplateError as exc:
        error(f"Template error: {exc}")
        raise typer.Exit(code=EXIT_RENDER_ERROR) from None
    finally:
        engine.close()

    print_data(result, end="")


def _build_context(
    context_file: Optional[str],
    variables: list[str],
    secrets_file: Optional[str],
) -> dict[str, Any]:
    """Merge ``--context``, ``--var`` and ``--secrets`` into one render context."""
    context: dict[str, Any] = {}
    if context_file:
        context.update(load_mapping(context_file))
    for item in variables:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid --var '{item}', expected key=value")
        context[key] = value
    if secrets_file:
        context[SECRETS_CONTEXT_KEY] = load_mapping(secrets_file)
    return context


def _read_template(template: str) -> tuple[str, Path]:
    """Return the template source and the directory includes resolve against."""
    if template == "-":
        return sys.stdin.read(), Path.cwd()
    path = Path(template)
    if not path.is_file():
        raise InvalidUsageError(f"Template not found: {template}")
    return path.read_text(encoding="utf-8"), path.parent
