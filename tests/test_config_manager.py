from __future__ import annotations

import json

import pytest

from services.config_manager import CastrSettings, ConfigManager
from utils.validators import Validators


def test_missing_config_file_is_created_with_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    manager = ConfigManager(str(path), environ={})

    assert path.exists()
    assert json.loads(path.read_text())["poll_interval"] == 10
    assert manager.get_settings() == CastrSettings()


def test_file_values_and_env_overrides(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "access_token": "file-token",
        "secret_key": "file-secret",
        "poll_interval": 30,
        "api_url": "https://castr.example/v2",
    }))
    environ = {"CASTR_SECRET_KEY": "env-secret", "CASTR_POLL_INTERVAL": "0", "DISCORD_TOKEN": "abc"}

    settings = ConfigManager(str(path), environ=environ).get_settings()

    assert settings.access_token == "file-token"
    assert settings.secret_key == "env-secret"
    assert settings.poll_interval == 0
    assert settings.api_url == "https://castr.example/v2/"
    assert settings.discord_token == "abc"


def test_blank_api_url_uses_default(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"api_url": "  "}))

    assert ConfigManager(str(path), environ={}).get_settings().api_url == "https://api.castr.com/v2/"


@pytest.mark.parametrize("interval", [-1, 3601, "soon", True])
def test_invalid_poll_interval_is_rejected(tmp_path, interval) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"poll_interval": interval}))

    with pytest.raises(ValueError):
        ConfigManager(str(path), environ={}).get_settings()


def test_invalid_api_url_is_rejected(tmp_path) -> None:
    manager = ConfigManager(str(tmp_path / "config.json"), environ={"CASTR_API_URL": "ftp://nope"})
    with pytest.raises(ValueError):
        manager.get_settings()


def test_corrupt_config_file_falls_back_to_defaults(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json")

    assert ConfigManager(str(path), environ={}).get_settings().poll_interval == 10


def test_set_persists_value(tmp_path) -> None:
    path = tmp_path / "config.json"
    manager = ConfigManager(str(path), environ={})
    manager.set("poll_interval", 60)

    assert json.loads(path.read_text())["poll_interval"] == 60
    assert ConfigManager(str(path), environ={}).get_settings().poll_interval == 60


def test_poll_interval_bounds() -> None:
    assert Validators.validate_poll_interval(0) == (True, 0, None)
    assert Validators.validate_poll_interval("3600") == (True, 3600, None)
    assert Validators.validate_poll_interval(3601)[0] is False
