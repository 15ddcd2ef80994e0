"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rare_bird_alerts.config import Settings, get_settings


class TestSettings:
    """Settings defaults and the RARE_BIRD_ environment prefix."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RARE_BIRD_EBIRD_API_KEY", raising=False)
        settings = Settings(_env_file=None)
        assert settings.proxy_path == "/api/ebird"
        assert settings.ebird_api_base == "https://api.ebird.org/v2"
        assert settings.client_agent == "eBird-Rare-Alerts/1.0"
        assert settings.request_timeout is None
        assert settings.ebird_api_key is None

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RARE_BIRD_API_PORT", "9001")
        monkeypatch.setenv("RARE_BIRD_EBIRD_API_KEY", "abc123")
        settings = Settings(_env_file=None)
        assert settings.api_port == 9001
        assert settings.ebird_api_key == "abc123"

    def test_unprefixed_env_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("RARE_BIRD_API_PORT", raising=False)
        monkeypatch.setenv("API_PORT", "9001")
        assert Settings(_env_file=None).api_port == 8000

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, api_port=0)

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        assert get_settings() is get_settings()
