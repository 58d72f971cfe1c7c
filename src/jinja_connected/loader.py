"""Load render contexts and secret bundles from files or stdin.

The CLI accepts ``--context`` and ``--secrets`` files in JSON or YAML.
Both must hold a top-level object. Format is taken from the file extension
when it is ``.json``, ``.yaml`` or ``.yml``; otherwise JSON is tried first
and YAML second (valid JSON is also valid YAML, but JSON parsing is stricter
and gives better error messages).

The single public function is :func:`load_mapping`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import yaml

from jinja_connected.exceptions import ConfigError


def load_mapping(source: str) -> dict[str, Any]:
    """Load a JSON/YAML object from a file path, or from stdin when *source* is ``-``.

    Raises:
        ConfigError: If the source cannot be read or does not hold an object.
    """
    if source == "-":
        content = sys.stdin.read()
        if not content.strip():
            raise ConfigError("No input received from stdin")
        return _parse_content(content, hint="")

    file_path = Path(source)
    if not file_path.is_file():
        raise ConfigError(f"File not found: {source}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {source}: {exc}") from exc

    if not content.strip():
        return {}

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML, honouring an optional format *hint*."""
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_object(json.loads(content))
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ConfigError(f"Invalid JSON: {exc}") from exc

    try:
        return _require_object(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        msg = "Failed to parse as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise ConfigError(msg) from exc


def _require_object(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise ConfigError(f"Expected a JSON/YAML object (got {kind})")
    return result
