from __future__ import annotations

import json
from typing import Any

import pytest
import yaml

from layerconf.core.exceptions import (
    ParseError,
    SerializeError,
    UnsupportedError,
    UnsupportedFormatError,
)
from layerconf.core.formats import (
    BaseFormatAdapter,
    FileFormat,
    get_format,
    register_format,
    registered_formats,
    unregister_format,
)


@pytest.mark.parametrize(
    "ext, fmt",
    [("json", FileFormat.JSON), (".yml", FileFormat.YAML), ("YAML", FileFormat.YAML),
     ("toml", FileFormat.TOML), ("ini", FileFormat.INI), ("ron", FileFormat.RON), ("txt", None)],
)
def test_format_from_extension(ext: str, fmt) -> None:
    assert FileFormat.from_extension(ext) is fmt


def test_builtin_adapters_registered_without_ron() -> None:
    assert registered_formats() == [FileFormat.INI, FileFormat.JSON, FileFormat.TOML, FileFormat.YAML]
    with pytest.raises(UnsupportedFormatError, match="RON"):
        get_format(FileFormat.RON)


# ---------- JSON ----------


def test_json_parse_and_serialize() -> None:
    adapter = get_format(FileFormat.JSON)
    value = adapter.parse('{"b": 1, "a": {"x": [true, null]}}')
    assert value == {"b": 1, "a": {"x": [True, None]}}
    text = adapter.serialize(value, sort_keys=True)
    assert text.index('"a"') < text.index('"b"')
    assert json.loads(text) == value


def test_json_malformed_content_is_parse_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        get_format(FileFormat.JSON).parse("{oops", source_id="broken.json")
    assert excinfo.value.source_id == "broken.json"
    assert "broken.json" in str(excinfo.value)


def test_json_rejects_nan_on_save() -> None:
    with pytest.raises(SerializeError):
        get_format(FileFormat.JSON).serialize({"x": float("nan")})


# ---------- YAML ----------


def test_yaml_parse_normalizes_dates_and_empty_document() -> None:
    adapter = get_format(FileFormat.YAML)
    assert adapter.parse("") == {}
    assert adapter.parse("when: 2024-05-01\nports: [1, 2]\n") == {"when": "2024-05-01", "ports": [1, 2]}


def test_yaml_serialize_preserves_order_unless_sorted() -> None:
    adapter = get_format(FileFormat.YAML)
    value = {"z": 1, "a": {"text": "line1\nline2\n"}}
    unsorted = adapter.serialize(value)
    assert unsorted.index("z:") < unsorted.index("a:")
    assert "|" in unsorted
    assert yaml.safe_load(adapter.serialize(value, sort_keys=True)) == value


def test_yaml_malformed_content_is_parse_error() -> None:
    with pytest.raises(ParseError):
        get_format(FileFormat.YAML).parse("a: [1, 2\n")


# ---------- TOML ----------


def test_toml_round_trip() -> None:
    adapter = get_format(FileFormat.TOML)
    value = adapter.parse('title = "x"\n[server]\nport = 8080\nhosts = ["a", "b"]\n')
    assert value == {"title": "x", "server": {"port": 8080, "hosts": ["a", "b"]}}
    assert adapter.parse(adapter.serialize(value, sort_keys=True)) == value


def test_toml_cannot_represent_null() -> None:
    with pytest.raises(SerializeError, match="server.port"):
        get_format(FileFormat.TOML).serialize({"server": {"port": None}})


def test_toml_malformed_content_is_parse_error() -> None:
    with pytest.raises(ParseError):
        get_format(FileFormat.TOML).parse("a = = 1")


# ---------- INI ----------


def test_ini_sections_become_tables_of_strings() -> None:
    adapter = get_format(FileFormat.INI)
    value = adapter.parse('top = 1\n[Server]\nHost = "example"\nport = 80\npct = 5%\n')
    assert value == {"top": "1", "Server": {"Host": "example", "port": "80", "pct": "5%"}}


def test_ini_is_read_only() -> None:
    adapter = get_format(FileFormat.INI)
    assert adapter.writable is False
    with pytest.raises(UnsupportedError):
        adapter.serialize({"a": "b"})


def test_ini_duplicate_section_is_parse_error() -> None:
    with pytest.raises(ParseError):
        get_format(FileFormat.INI).parse("[a]\nx = 1\n[a]\ny = 2\n")


# ---------- Registry ----------


class _LinesAdapter(BaseFormatAdapter):
    """Toy adapter: ``key=value`` per line."""

    format = FileFormat.RON

    def _load(self, content: str) -> Any:
        return dict(line.split("=", 1) for line in content.splitlines() if line)

    def _dump(self, value: Any, *, sort_keys: bool) -> str:
        keys = sorted(value) if sort_keys else list(value)
        return "".join(f"{k}={value[k]}\n" for k in keys)


def test_register_custom_adapter_for_ron() -> None:
    register_format(FileFormat.RON, _LinesAdapter())
    adapter = get_format(FileFormat.RON)
    assert adapter.parse("b=2\na=1\n") == {"b": "2", "a": "1"}
    assert adapter.serialize({"b": "2", "a": "1"}, sort_keys=True) == "a=1\nb=2\n"

    unregister_format(FileFormat.RON)
    with pytest.raises(UnsupportedFormatError):
        get_format(FileFormat.RON)


def test_register_rejects_objects_without_adapter_interface() -> None:
    with pytest.raises(TypeError):
        register_format(FileFormat.RON, object())  # type: ignore[arg-type]
