from __future__ import annotations

import os
from pathlib import Path

import pytest

from layerconf.core.exceptions import ParseError
from layerconf.core.io import read_source, write_text


def test_write_text_creates_parents_and_replaces(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "conf.json"
    write_text(target, "one")
    write_text(target, "two")
    assert target.read_text(encoding="utf-8") == "two"
    assert [p.name for p in target.parent.iterdir()] == ["conf.json"]


def test_write_text_failure_keeps_old_file_and_cleans_up(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "conf.json"
    target.write_text("old", encoding="utf-8")

    def _fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", _fail)
    with pytest.raises(OSError, match="disk full"):
        write_text(target, "new")
    assert target.read_text(encoding="utf-8") == "old"
    assert [p.name for p in tmp_path.iterdir()] == ["conf.json"]


def test_read_source_reports_bad_encoding_as_parse_error(tmp_path: Path) -> None:
    path = tmp_path / "conf.yaml"
    path.write_bytes(b"a: \xff\n")
    with pytest.raises(ParseError) as excinfo:
        read_source(path, "conf")
    assert excinfo.value.source_id == "conf"


def test_read_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_source(tmp_path / "absent.toml", "absent")
