"""Tests for environment configuration."""

import pytest

from utils.settings import Settings, parse_targets


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ["PASSWORD", "API_KEY", "UPLOAD_LIMIT_MAX", "ALERT_TARGETS", "GALLERY_CAPACITY"]:
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env()
        assert settings.password == "admin"
        assert settings.api_key is None
        assert settings.upload_limit_max == 1
        assert settings.alert_targets == ("person",)
        assert settings.gallery_capacity == 10

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "k")
        monkeypatch.setenv("UPLOAD_LIMIT_WINDOW_MS", "2500")
        monkeypatch.setenv("ALERT_TARGETS", "Person, dog ,,cat")
        monkeypatch.setenv("AI_ENABLED", "false")
        settings = Settings.from_env()
        assert settings.api_key == "k"
        assert settings.upload_window_seconds == 2.5
        assert settings.alert_targets == ("Person", "dog", "cat")
        assert settings.ai_enabled is False

    def test_bad_number_fails_startup(self, monkeypatch):
        monkeypatch.setenv("LOGIN_LIMIT_MAX", "five")
        with pytest.raises(RuntimeError, match="LOGIN_LIMIT_MAX"):
            Settings.from_env()

    def test_parse_targets_empty(self):
        assert parse_targets("") == ()
        assert parse_targets(None) == ()
