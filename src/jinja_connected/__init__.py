"""jinja_connected -- a ``connected_content`` tag for Jinja2 templates.

The tag issues an HTTP request while a template renders, optionally caches
the response, and injects the result back into the template, either as a
named variable or as text written where the tag appears::

    {% connected_content https://api.example.com/users/{{ user_id }} :save user %}
    Hello {{ user.first_name }} ({{ user.__http_status_code__ }})

Typical use::

    from jinja_connected import create_environment

    env = create_environment()
    env.from_string(source).render(user_id=42)

Modules:
    extension: The Jinja2 extension implementing the tag.
    engine: Orchestrates resolution, auth, caching, and the HTTP call.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from jinja_connected.environment import create_engine, create_environment  # noqa: E402
from jinja_connected.exceptions import ParseError, RenderError  # noqa: E402
from jinja_connected.extension import ConnectedContentExtension  # noqa: E402

__all__ = [
    "ConnectedContentExtension",
    "ParseError",
    "RenderError",
    "create_engine",
    "create_environment",
]
