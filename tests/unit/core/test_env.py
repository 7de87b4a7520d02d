from __future__ import annotations

import logging

import pytest

from layerconf.core.env import EnvOverride, coerce_env_value
from layerconf.core.exceptions import EnvOverrideError


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", True),
        ("False", False),
        ("42", 42),
        ("-3", -3),
        ("1.5", 1.5),
        ("2e3", "2e3"),
        ("1.0e3", 1000.0),
        ('["a", 1]', ["a", 1]),
        ('{"k": null}', {"k": None}),
        ("[not json", "[not json"),
        ("  padded  ", "padded"),
        ("99999999999999999999", "99999999999999999999"),
    ],
)
def test_coerce_env_value(raw: str, expected) -> None:
    assert coerce_env_value(raw) == expected


def test_parse_key_splits_and_lowercases() -> None:
    env = EnvOverride("APP_", "_")
    assert env.parse_key("APP_NESTED_X") == ["nested", "x"]
    assert env.parse_key("OTHER_X") == []


def test_double_underscore_separator_keeps_single_underscores() -> None:
    env = EnvOverride("APP__", "__")
    assert env.parse_key("APP__DB__MAX_CONN") == ["db", "max_conn"]


def test_malformed_keys_are_skipped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    env = EnvOverride("APP_", "_")
    with caplog.at_level(logging.WARNING, logger="layerconf.core.env"):
        assert env.parse_key("APP_") == []
        assert env.parse_key("APP_A__B") == []
    assert "APP_A__B" in caplog.text


def test_strict_mode_raises_on_malformed_keys() -> None:
    env = EnvOverride("APP_", "_", strict=True)
    with pytest.raises(EnvOverrideError):
        env.apply({}, {"APP_A__B": "1"})


def test_apply_overrides_and_creates_paths() -> None:
    cfg = {"nested": {"x": 1}}
    env = EnvOverride("APP_", "_")
    env.apply(cfg, {"APP_NESTED_X": "99", "APP_NEW_DEEP_KEY": "on", "UNRELATED": "1"})
    assert cfg == {"nested": {"x": 99}, "new": {"deep": {"key": "on"}}}


def test_apply_without_create_only_overrides_existing_paths() -> None:
    cfg = {"nested": {"x": 1}}
    env = EnvOverride("APP_", "_", create=False)
    env.apply(cfg, {"APP_NESTED_X": "2", "APP_NESTED_Y": "3", "APP_OTHER": "4"})
    assert cfg == {"nested": {"x": 2}}


def test_apply_matches_existing_keys_case_insensitively() -> None:
    cfg = {"Database": {"URL": "old"}}
    EnvOverride("APP_", "_").apply(cfg, {"APP_DATABASE_URL": "new"})
    assert cfg == {"Database": {"URL": "new"}}


def test_apply_indexes_arrays() -> None:
    cfg = {"hosts": ["a", "b"]}
    EnvOverride("APP_", "_").apply(cfg, {"APP_HOSTS_1": "z"})
    assert cfg == {"hosts": ["a", "z"]}


def test_conflict_through_scalar_is_skipped_unless_strict() -> None:
    cfg = {"port": 80}
    EnvOverride("APP_", "_").apply(cfg, {"APP_PORT_X": "1"})
    assert cfg == {"port": 80}
    with pytest.raises(EnvOverrideError):
        EnvOverride("APP_", "_", strict=True).apply(cfg, {"APP_PORT_X": "1"})


def test_overrides_apply_in_sorted_order() -> None:
    cfg: dict = {}
    EnvOverride("APP_", "_").apply(cfg, {"APP_A_B": "2", "APP_A": "{}"})
    # APP_A (an empty table) sorts first, then APP_A_B fills it.
    assert cfg == {"a": {"b": 2}}


def test_collect_builds_table_from_environment_only() -> None:
    env = EnvOverride("APP_", "_")
    assert env.collect({"APP_X_Y": "1", "HOME": "/root"}) == {"x": {"y": 1}}


def test_snapshot_reads_os_environ_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LAYERCONF_TEST_FLAG", "true")
    assert EnvOverride("LAYERCONF_TEST_").snapshot()["LAYERCONF_TEST_FLAG"] == "true"


def test_empty_separator_rejected() -> None:
    with pytest.raises(ValueError):
        EnvOverride("APP_", "")
