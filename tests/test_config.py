"""Tests for poller configuration and environment settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from weather_poller.config import (
    DEFAULT_BASE_URL,
    PollerConfig,
    build_poller_config,
    load_settings,
)
from weather_poller.exceptions import ConfigError


def _config(**overrides: Any) -> PollerConfig:
    values: dict[str, Any] = {
        "latitude": 51.5114,
        "longitude": 0.2376,
        "api_key": "secret-key",
    }
    values.update(overrides)
    return build_poller_config(**values)


def _set_required_env(monkeypatch: Any, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("VISUAL_CROSSING_API_KEY", "env-key")
    monkeypatch.setenv("JOURNAL_DIR", str(tmp_path / "journal"))
    monkeypatch.setenv("WEATHER_RAW_PAYLOAD_DIR", str(tmp_path / "raw_weather"))


def test_defaults() -> None:
    config = _config()

    assert config.poll_interval_seconds == 10.0
    assert config.unit_group == "metric"
    assert config.content_type == "json"
    assert config.base_url == DEFAULT_BASE_URL


@pytest.mark.parametrize("interval", [9, 9.0, 120, 86400])
def test_interval_lower_bound_only(interval: float) -> None:
    assert _config(poll_interval_seconds=interval).poll_interval_seconds == interval


@pytest.mark.parametrize(
    "overrides",
    [
        {"poll_interval_seconds": 8.9},
        {"poll_interval_seconds": 0},
        {"latitude": 91.0},
        {"longitude": -180.5},
        {"unit_group": "imperial"},
        {"content_type": "csv"},
        {"api_key": ""},
        {"api_key": "   "},
        {"base_url": "https://example.test/timeline"},
        {"base_url": "ftp://example.test/timeline/"},
        {"request_timeout_seconds": 0},
        {"unexpected": True},
    ],
)
def test_invalid_configuration_rejected_at_construction(overrides: dict[str, Any]) -> None:
    with pytest.raises(ConfigError):
        _config(**overrides)


def test_config_is_immutable() -> None:
    config = _config()
    with pytest.raises(ValidationError):
        config.poll_interval_seconds = 30  # type: ignore[misc]


def test_config_never_exposes_api_key() -> None:
    config = _config()

    assert "secret-key" not in repr(config)
    assert "api_key" not in config.safe_summary()


def test_load_settings_from_env(monkeypatch: Any, tmp_path: Path) -> None:
    _set_required_env(monkeypatch, tmp_path)
    monkeypatch.setenv("WEATHER_LAT", "40.7128")
    monkeypatch.setenv("WEATHER_LON", "-74.006")
    monkeypatch.setenv("WEATHER_POLL_INTERVAL_SECONDS", "30")
    monkeypatch.setenv("WEATHER_UNIT_GROUP", "us")

    settings = load_settings()
    config = settings.poller_config()

    assert config.latitude == 40.7128
    assert config.longitude == -74.006
    assert config.poll_interval_seconds == 30
    assert config.unit_group == "us"
    assert config.api_key == "env-key"
    assert (tmp_path / "journal").is_dir()
    assert (tmp_path / "raw_weather").is_dir()
    assert "env-key" not in str(settings.safe_summary())


def test_poller_config_overrides_skip_none(monkeypatch: Any, tmp_path: Path) -> None:
    _set_required_env(monkeypatch, tmp_path)
    settings = load_settings()

    config = settings.poller_config(latitude=10.0, longitude=None, poll_interval_seconds=15)

    assert config.latitude == 10.0
    assert config.longitude == settings.weather_lon
    assert config.poll_interval_seconds == 15


def test_poller_config_override_out_of_range(monkeypatch: Any, tmp_path: Path) -> None:
    _set_required_env(monkeypatch, tmp_path)
    settings = load_settings()

    with pytest.raises(ConfigError, match="poll_interval_seconds"):
        settings.poller_config(poll_interval_seconds=5)


def test_missing_api_key_is_config_error(monkeypatch: Any, tmp_path: Path) -> None:
    _set_required_env(monkeypatch, tmp_path)
    monkeypatch.setenv("VISUAL_CROSSING_API_KEY", "")

    with pytest.raises(ConfigError, match="VISUAL_CROSSING_API_KEY"):
        load_settings()


def test_env_interval_below_minimum_is_config_error(monkeypatch: Any, tmp_path: Path) -> None:
    _set_required_env(monkeypatch, tmp_path)
    monkeypatch.setenv("WEATHER_POLL_INTERVAL_SECONDS", "3")

    with pytest.raises(ConfigError, match="WEATHER_POLL_INTERVAL_SECONDS"):
        load_settings()
