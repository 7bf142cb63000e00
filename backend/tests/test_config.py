from __future__ import annotations

import pytest

from conftest import TEST_API_KEY, TEST_TURNSTILE_SECRET, make_settings
from steam_sync.config import get_settings
from steam_sync.errors import ConfigurationError


def test_defaults_are_development_on_port_8787() -> None:
    settings = make_settings()
    assert settings.steam_api_key == TEST_API_KEY
    assert settings.port == 8787
    assert settings.is_production is False
    assert settings.turnstile_secret_key is None
    assert settings.http_timeout_seconds is None
    assert settings.max_body_bytes == 1024 * 1024


def test_missing_api_key_refuses_to_start(monkeypatch) -> None:
    monkeypatch.delenv("STEAM_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        get_settings()


def test_blank_api_key_refuses_to_start(monkeypatch) -> None:
    monkeypatch.setenv("STEAM_API_KEY", "   ")
    with pytest.raises(ConfigurationError):
        get_settings()


def test_production_requires_turnstile_secret(monkeypatch) -> None:
    monkeypatch.setenv("STEAM_SYNC_ENV", "production")
    monkeypatch.delenv("TURNSTILE_SECRET_KEY", raising=False)
    with pytest.raises(ConfigurationError) as excinfo:
        get_settings()
    assert "TURNSTILE_SECRET_KEY" in str(excinfo.value)


def test_blank_turnstile_secret_counts_as_missing(monkeypatch) -> None:
    monkeypatch.setenv("STEAM_SYNC_ENV", "production")
    monkeypatch.setenv("TURNSTILE_SECRET_KEY", "  ")
    with pytest.raises(ConfigurationError):
        get_settings()


def test_production_with_secret_loads_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("STEAM_SYNC_ENV", "Production")
    monkeypatch.setenv("TURNSTILE_SECRET_KEY", TEST_TURNSTILE_SECRET)
    monkeypatch.setenv("PORT", "9000")
    settings = get_settings()
    assert settings.is_production is True
    assert settings.turnstile_secret_key == TEST_TURNSTILE_SECRET
    assert settings.port == 9000


def test_other_environments_are_not_production() -> None:
    assert make_settings(STEAM_SYNC_ENV="staging").is_production is False


def test_allowed_origins_splits_comma_list() -> None:
    settings = make_settings(STEAM_SYNC_CORS_ORIGINS="https://a.example, https://b.example,")
    assert settings.allowed_origins == ["https://a.example", "https://b.example"]
    assert make_settings(STEAM_SYNC_CORS_ORIGINS=" ").allowed_origins == ["*"]
