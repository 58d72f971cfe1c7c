"""Terminal output for the CLI and diagnostics for the library.

Rendered templates and structured command results go to stdout (or to the
``-o/--output`` file); everything else, including the ``--verbose`` trace
of cache hits and outgoing requests, goes to stderr. Colour follows
``NO_COLOR``, ``TERM=dumb`` and ``--no-color``.

:func:`~jinja_connected.app.main_callback` installs one
:class:`OutputManager` with :func:`set_output`. Library code calls the
module-level helpers (:func:`debug`, :func:`info`...), which fall back to a
default manager when none is installed.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console


class OutputFormat(str, Enum):
    """How structured results are printed.

    ``AUTO`` becomes ``RICH`` on a colour-capable terminal and ``PLAIN``
    otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# (plain prefix, rich markup template, suppressed by --quiet)
_DIAGNOSTIC_STYLES: dict[str, tuple[str, str, bool]] = {
    "info": ("", "{message}", True),
    "success": ("", "[green]{message}[/green]", True),
    "warning": ("Warning: ", "[yellow]Warning:[/yellow] {message}", False),
    "error": ("Error: ", "[bold red]Error:[/bold red] {message}", False),
    "debug": ("[debug] ", "[dim]\\[debug] {message}[/dim]", False),
}


class OutputManager:
    """Holds the output preferences chosen by the global CLI flags.

    Args:
        format: Format for structured results.
        no_color: Never emit colour or markup.
        quiet: Drop info and success messages.
        verbose: Show debug messages.
        output_file: Write data here instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            use_rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if use_rich else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(file=sys.stdout, no_color=self._no_color)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str, end: str = "\n") -> None:
        """Write *text*, then *end* unless *text* already ends with it.

        The ``render`` command passes ``end=""`` so the output file or stream
        holds exactly what the template produced. An output file is appended
        to.
        """
        if end and text.endswith(end):
            end = ""
        if self._output_file:
            with open(self._output_file, "a", encoding="utf-8") as f:
                f.write(text + end)
            return
        sys.stdout.write(text + end)
        sys.stdout.flush()

    def format_response(self, data: Any) -> None:
        """Print a command result (config dump, cache stats).

        With an output file the result replaces the file's contents as JSON.
        """
        if self._output_file:
            with open(self._output_file, "w", encoding="utf-8") as f:
                f.write(_to_json(data) + "\n")
            return

        if self._format == OutputFormat.JSON:
            if isinstance(data, str):
                try:
                    data = json.loads(data)
                except json.JSONDecodeError:
                    self.print_data(data)
                    return
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            self._stdout.print_json(_to_json(data))
        elif isinstance(data, dict):
            for key, value in data.items():
                self.print_data(f"{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                self.print_data(str(item))
        else:
            self.print_data(str(data))

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        self._diagnostic("info", message)

    def success(self, message: str) -> None:
        self._diagnostic("success", message)

    def warning(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic("warning", message)

    def error(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic("error", message)

    def debug(self, message: str) -> None:
        """Shown only with ``--verbose``."""
        if self._verbose:
            self._diagnostic("debug", message)

    def _diagnostic(self, kind: str, message: str) -> None:
        prefix, markup, quietable = _DIAGNOSTIC_STYLES[kind]
        if quietable and self._quiet:
            return
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup.format(message=message))


def _to_json(data: Any) -> str:
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM`` is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str, end: str = "\n") -> None:
    get_output().print_data(text, end=end)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def debug(message: str) -> None:
    get_output().debug(message)
