"""Tests for boxcar.config loading."""

import json
from pathlib import Path

import pytest

from boxcar.config.loader import camel_to_snake, convert_keys, get_config_path, load_config
from boxcar.config.schema import BoxcarConfig


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.json")
    assert cfg.server.host == "0.0.0.0"
    assert cfg.server.port == 8080
    assert cfg.server.dispatch == "thread"
    assert cfg.client.timeout is None


def test_camel_case_file(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "server": {"port": 9001, "dispatch": "pool", "queueSize": 16, "handlers": {"myEcho": "pkg.mod:Echo"}},
                "client": {"url": "http://example/RPC2", "timeout": 2.5},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.server.port == 9001
    assert cfg.server.queue_size == 16
    assert cfg.server.handlers == {"myEcho": "pkg.mod:Echo"}
    assert cfg.client.timeout == 2.5


def test_invalid_json_raises_value_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(path)


@pytest.mark.parametrize(
    "server",
    [{"dispatch": "fork"}, {"port": 70000}, {"handlers": {"a.b": "m:x"}}, {"handlers": {"a": "no-colon"}}],
)
def test_invalid_values_raise_value_error(tmp_path: Path, server: dict) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"server": server}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BOXCAR_SERVER__PORT", "9100")
    monkeypatch.setenv("BOXCAR_CLIENT__PROXY", "http://proxy:3128")
    cfg = BoxcarConfig()
    assert cfg.server.port == 9100
    assert cfg.client.proxy == "http://proxy:3128"


def test_default_path_is_under_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    assert get_config_path() == tmp_path / ".boxcar" / "config.json"


def test_convert_keys_preserves_handler_names() -> None:
    data = {"server": {"queueSize": 1, "handlers": {"camelName": "m:a"}}, "list": [{"someKey": 1}]}
    assert convert_keys(data) == {
        "server": {"queue_size": 1, "handlers": {"camelName": "m:a"}},
        "list": [{"some_key": 1}],
    }


def test_camel_to_snake() -> None:
    assert camel_to_snake("queueSize") == "queue_size"
    assert camel_to_snake("port") == "port"
