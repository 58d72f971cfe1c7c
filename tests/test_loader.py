"""Tests for loading context and secrets files."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from jinja_connected.exceptions import ConfigError
from jinja_connected.loader import load_mapping


class TestLoadMapping:
    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ctx.json"
        path.write_text('{"user_id": 7}', encoding="utf-8")
        assert load_mapping(str(path)) == {"user_id": 7}

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "secrets.yaml"
        path.write_text("crm:\n  username: svc\n  password: pw\n", encoding="utf-8")
        assert load_mapping(str(path)) == {"crm": {"username": "svc", "password": "pw"}}

    def test_unknown_suffix_tries_json_then_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "ctx.txt"
        path.write_text("a: 1\n", encoding="utf-8")
        assert load_mapping(str(path)) == {"a": 1}

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("  \n", encoding="utf-8")
        assert load_mapping(str(path)) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="File not found"):
            load_mapping(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_mapping(str(path))

    def test_top_level_list_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_mapping(str(path))

    def test_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO('{"from": "stdin"}'))
        assert load_mapping("-") == {"from": "stdin"}

    def test_empty_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO(""))
        with pytest.raises(ConfigError, match="No input"):
            load_mapping("-")
