"""Jinja2 extension implementing the ``connected_content`` tag.

Tag syntax::

    {% connected_content <url> [:save name] [:method verb] [:body text]
                               [:content_type mime] [:basic_auth secret]
                               [:cache seconds] %}

The tag's arguments are not Jinja expressions: the URL is written bare and
may embed ``{{ ... }}`` placeholders. Jinja's lexer cannot tokenise that,
so :meth:`ConnectedContentExtension.preprocess` first rewrites each tag
into ``{% connected_content "<escaped arguments>" %}``. :meth:`parse` then
reads the string, parses it with
:func:`~jinja_connected.directive.parser.parse_directive` (raising
:class:`~jinja_connected.exceptions.ParseError` at compile time), and emits:

* with ``:save name`` -- an assignment, like ``{% set name = ... %}``;
* without it -- an output node writing the response text in place.

At render time the generated code calls back into the extension, which
hands the invocation, the render context (including loop variables), and
a placeholder expander to the environment's
:class:`~jinja_connected.engine.ConnectedContent` engine. In an
``enable_async`` environment the async engine path is used and the call is
awaited by Jinja.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Mapping
from typing import Any, Optional

from jinja2 import nodes
from jinja2.environment import Environment
from jinja2.ext import Extension
from jinja2.parser import Parser
from jinja2.runtime import Context
from markupsafe import Markup

from jinja_connected.binder import bind_response, emit_response
from jinja_connected.directive.parser import TAG_NAME, parse_directive
from jinja_connected.directive.resolver import TemplateExpander
from jinja_connected.engine import ConnectedContent
from jinja_connected.exceptions import ParseError
from jinja_connected.models import DirectiveInvocation

ENGINE_ATTRIBUTE = "connected_content_engine"
"""Environment attribute holding the :class:`ConnectedContent` engine."""


class ConnectedContentExtension(Extension):
    """Adds the ``connected_content`` tag to a Jinja2 environment.

    The engine is read from ``environment.connected_content_engine``. Set it
    explicitly (see :func:`~jinja_connected.environment.create_environment`)
    to share one cache across environments or to inject test transports;
    otherwise a default engine with an in-memory cache is created on first
    use.

    Example::

        env = Environment(extensions=[ConnectedContentExtension])
        env.connected_content_engine = create_engine(config)
    """

    tags = {TAG_NAME}

    def __init__(self, environment: Environment) -> None:
        super().__init__(environment)
        environment.extend(**{ENGINE_ATTRIBUTE: None})
        self._lock = threading.Lock()
        self._expander: Optional[TemplateExpander] = None

    def bind(self, environment: Environment) -> ConnectedContentExtension:
        rv = super().bind(environment)
        rv._expander = None
        return rv

    # ------------------------------------------------------------------ #
    # Compile time
    # ------------------------------------------------------------------ #

    def preprocess(
        self, source: str, name: Optional[str], filename: Optional[str] = None
    ) -> str:
        """Quote the raw arguments of every ``connected_content`` tag."""
        return self._tag_pattern().sub(self._quote_tag, source)

    def parse(self, parser: Parser) -> nodes.Node:
        lineno = next(parser.stream).lineno
        raw = parser.stream.expect("string").value
        try:
            invocation = parse_directive(raw)
        except ParseError as exc:
            exc.lineno = lineno
            raise

        args: list[nodes.Expr] = [
            nodes.Const(invocation.raw),
            nodes.DerivedContextReference(),
        ]
        target = invocation.target_variable
        if target is not None:
            name = nodes.Name(target, "store", lineno=lineno)
            if not name.can_assign():
                raise ParseError(f"illegal token {{% {TAG_NAME} {invocation.raw} %}}", lineno)
            call = self.call_method("_bind", args, lineno=lineno)
            return nodes.Assign(name, call, lineno=lineno)
        call = self.call_method("_emit", args, lineno=lineno)
        return nodes.Output([call], lineno=lineno)

    def _tag_pattern(self) -> re.Pattern[str]:
        env = self.environment
        start = re.escape(env.block_start_string)
        end = re.escape(env.block_end_string)
        var_start = re.escape(env.variable_start_string)
        var_end = re.escape(env.variable_end_string)
        comment = rf"{re.escape(env.comment_start_string)}.*?{re.escape(env.comment_end_string)}"
        raw_block = (
            rf"{start}[-+]?\s*raw\s*[-+]?{end}.*?{start}[-+]?\s*endraw\s*[-+]?{end}"
        )
        # Placeholders inside the arguments are skipped whole, so their own
        # block end does not close the tag.
        args = rf"(?:{var_start}.*?{var_end}|{start}.*?{end}|.)*?"
        return re.compile(
            rf"(?P<skip>{raw_block}|{comment})"
            rf"|(?P<open>{start}[-+]?)\s*{TAG_NAME}\b(?P<args>{args})(?P<close>[-+]?{end})",
            re.DOTALL,
        )

    @staticmethod
    def _quote_tag(match: re.Match[str]) -> str:
        if match.group("skip") is not None:
            return match.group("skip")
        args = match.group("args")
        escaped = args.replace("\\", "\\\\").replace('"', '\\"')
        return f'{match.group("open")} {TAG_NAME} "{escaped}" {match.group("close")}'

    # ------------------------------------------------------------------ #
    # Render time
    # ------------------------------------------------------------------ #

    def _bind(self, raw: str, context: Context) -> Any:
        invocation = parse_directive(raw)
        variables = context.get_all()
        if self.environment.is_async:
            return self._bind_async(invocation, variables)
        return bind_response(self._engine().fetch(invocation, variables, self._expand))

    def _emit(self, raw: str, context: Context) -> Any:
        invocation = parse_directive(raw)
        variables = context.get_all()
        if self.environment.is_async:
            return self._emit_async(invocation, variables)
        return emit_response(self._engine().fetch(invocation, variables, self._expand))

    async def _bind_async(
        self, invocation: DirectiveInvocation, variables: Mapping[str, Any]
    ) -> Any:
        response = await self._engine().fetch_async(invocation, variables, self._expand)
        return bind_response(response)

    async def _emit_async(
        self, invocation: DirectiveInvocation, variables: Mapping[str, Any]
    ) -> Markup:
        response = await self._engine().fetch_async(invocation, variables, self._expand)
        return emit_response(response)

    def _expand(self, source: str, variables: Mapping[str, Any]) -> str:
        return self._get_expander().expand(source, variables)

    def _get_expander(self) -> TemplateExpander:
        with self._lock:
            if self._expander is None:
                self._expander = TemplateExpander(self.environment)
            return self._expander

    def _engine(self) -> ConnectedContent:
        with self._lock:
            engine = getattr(self.environment, ENGINE_ATTRIBUTE, None)
            if engine is None:
                engine = ConnectedContent()
                setattr(self.environment, ENGINE_ATTRIBUTE, engine)
            return engine
