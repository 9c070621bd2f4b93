from __future__ import annotations

import json
from pathlib import Path

import pytest

from pydd.config import AppConfig, ConfigError, load_config, parse_version_spec


def test_defaults() -> None:
    cfg = load_config()
    assert cfg == AppConfig()
    assert cfg.dd_binary == "dd"
    assert cfg.min_version is None
    assert cfg.required_version is None
    assert cfg.status is None


def test_json_file_overrides_defaults(tmp_path: Path) -> None:
    path = tmp_path / "pydd.json"
    path.write_text(json.dumps({"dd_binary": "/opt/bin/dd", "min_version": "8.32", "status": "none"}))
    cfg = load_config(path)
    assert cfg.dd_binary == "/opt/bin/dd"
    assert cfg.required_version == (8, 32)
    assert cfg.status == "none"


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "pydd.json"
    path.write_text(json.dumps({"dd_binary": "gdd", "colour": "blue"}))
    assert load_config(path).dd_binary == "gdd"


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "pydd.json"
    path.write_text(json.dumps({"dd_binary": "/opt/bin/dd", "min_version": "8.0", "status": "none"}))
    monkeypatch.setenv("PYDD_DD_BINARY", "/usr/local/bin/gdd")
    monkeypatch.setenv("PYDD_MIN_VERSION", "9.1")

    cfg = load_config(path)
    assert cfg.dd_binary == "/usr/local/bin/gdd"
    assert cfg.required_version == (9, 1)
    assert cfg.status == "none"


def test_empty_environment_value_is_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYDD_MIN_VERSION", "")
    assert load_config().required_version is None


def test_bad_environment_version(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYDD_MIN_VERSION", "nine")
    with pytest.raises(ConfigError):
        load_config()


@pytest.mark.parametrize(
    "content",
    ["not json", "[1, 2]", '{"dd_binary": ""}', '{"min_version": "8"}', '{"status": 5}'],
)
def test_bad_config_file(tmp_path: Path, content: str) -> None:
    path = tmp_path / "pydd.json"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_config(path)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.json")


@pytest.mark.parametrize("text, expected", [("8.32", (8, 32)), (" 9.4 ", (9, 4)), ("0.0", (0, 0))])
def test_parse_version_spec(text: str, expected) -> None:
    assert parse_version_spec(text) == expected


@pytest.mark.parametrize("text", ["8", "8.32.1", "a.b", "8.", "-1.2", "8.²"])
def test_parse_version_spec_rejects(text: str) -> None:
    with pytest.raises(ConfigError):
        parse_version_spec(text)
