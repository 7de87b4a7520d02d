from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest

from layerconf.core.coercion import COERCIONS, coerce
from layerconf.core.exceptions import CoercionError, GetError, TypeMismatchError
from layerconf.core.value import ValueKind


def test_int_widens_to_float() -> None:
    result = coerce(2, float, path="k")
    assert result == 2.0 and isinstance(result, float)


def test_integral_float_narrows_to_int() -> None:
    assert coerce(3.0, int) == 3


@pytest.mark.parametrize("value", [1.5, float("inf"), float("nan")])
def test_non_integral_float_to_int_is_coercion_failure(value: float) -> None:
    with pytest.raises(CoercionError) as excinfo:
        coerce(value, int, path="x")
    assert excinfo.value.path == "x"
    assert excinfo.value.kind == "Float"
    assert excinfo.value.target == "int"


@pytest.mark.parametrize(
    "raw, target, expected",
    [
        ("true", bool, True),
        (" FALSE ", bool, False),
        ("42", int, 42),
        ("-7", int, -7),
        ("2.5", float, 2.5),
        ("1e3", float, 1000.0),
    ],
)
def test_strings_parse_into_scalars(raw: str, target: type, expected) -> None:
    assert coerce(raw, target) == expected


@pytest.mark.parametrize("raw, target", [("yes", bool), ("4.2", int), ("abc", float), ("nan", float)])
def test_unparseable_strings_are_coercion_failures(raw: str, target: type) -> None:
    with pytest.raises(CoercionError):
        coerce(raw, target)


@pytest.mark.parametrize(
    "value, target",
    [
        (True, int),
        (1, bool),
        (1, str),
        (1.5, str),
        ([1], dict),
        ({"a": 1}, list),
        (None, int),
        ("x", list),
    ],
)
def test_missing_rule_is_type_mismatch(value, target: type) -> None:
    with pytest.raises(TypeMismatchError):
        coerce(value, target, path="p")


def test_get_errors_share_a_base() -> None:
    assert issubclass(CoercionError, GetError)
    assert issubclass(TypeMismatchError, GetError)


def test_rule_table_has_no_scalar_to_string_entries() -> None:
    sources = {kind for (kind, target) in COERCIONS if target is str}
    assert sources == {ValueKind.STRING}


def test_untyped_get_returns_a_copy() -> None:
    stored = {"a": [1]}
    result = coerce(stored, None)
    result["a"].append(2)
    assert stored == {"a": [1]}


def test_generic_containers_coerce_each_item_with_nested_path() -> None:
    assert coerce([1, 2], List[float]) == [1.0, 2.0]
    assert coerce({"a": "1"}, Dict[str, int]) == {"a": 1}
    assert coerce([1, "x"], Tuple[int, str]) == (1, "x")
    assert coerce([1, 2, 3], Tuple[int, ...]) == (1, 2, 3)
    with pytest.raises(CoercionError) as excinfo:
        coerce([1, 1.5], List[int], path="ports")
    assert excinfo.value.path == "ports.1"


def test_tuple_length_mismatch() -> None:
    with pytest.raises(TypeMismatchError):
        coerce([1, 2, 3], Tuple[int, int])


def test_optional_accepts_null_and_inner_type() -> None:
    assert coerce(None, Optional[int]) is None
    assert coerce(2.0, Optional[int]) == 2
    with pytest.raises(CoercionError):
        coerce(2.5, Optional[int])


@dataclass
class Server:
    host: str
    port: int = 80
    tags: List[str] = field(default_factory=list)


def test_dataclass_decoding() -> None:
    server = coerce({"host": "h", "port": 8080.0, "extra": True}, Server)
    assert server == Server(host="h", port=8080, tags=[])


def test_dataclass_missing_required_field() -> None:
    with pytest.raises(TypeMismatchError) as excinfo:
        coerce({"port": 1}, Server, path="server")
    assert "host" in str(excinfo.value)


class Color:
    def __init__(self, name: str) -> None:
        self.name = name

    @classmethod
    def from_value(cls, value):
        if not isinstance(value, str):
            raise TypeError("color must be a string")
        return cls(value)


def test_from_value_hook() -> None:
    assert coerce("red", Color).name == "red"
    with pytest.raises(TypeMismatchError):
        coerce(3, Color)
