import json

import pytest

from startwork import config


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("STARTWORK_CONFIG", raising=False)


def write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


def test_defaults_without_file(tmp_path):
    cfg = config.load_config(str(tmp_path))
    assert cfg["supported_integrations"] == ["github"]
    assert cfg["slugify_branch_names"] is True
    assert cfg["cloud_integrations"] is False


def test_workspace_file_overrides_defaults(tmp_path):
    write(tmp_path / ".startwork" / "config.json", {"cloud_integrations": True})
    cfg = config.load_config(str(tmp_path))
    assert cfg["cloud_integrations"] is True
    assert cfg["skip_confirmations"] == []


def test_env_path_wins(tmp_path, monkeypatch):
    write(tmp_path / ".startwork" / "config.json", {"telemetry": False})
    explicit = write(tmp_path / "explicit.json", {"telemetry": True})
    monkeypatch.setenv("STARTWORK_CONFIG", str(explicit))
    assert config.load_config(str(tmp_path))["telemetry"] is True


def test_home_file_is_last(tmp_path):
    write(tmp_path / "home" / ".startwork" / "config.json", {"log_level": "debug"})
    assert config.load_config(str(tmp_path / "ws"))["log_level"] == "debug"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_invalid_file_falls_back_to_defaults(tmp_path, capsys, content):
    write(tmp_path / ".startwork" / "config.json", content)
    cfg = config.load_config(str(tmp_path))
    assert cfg == config._DEFAULT_CONFIG
    assert "Failed to load config" in capsys.readouterr().err
