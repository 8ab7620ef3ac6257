"""Unit tests for settings defaults and environment overrides."""

from src.core.config import Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.poll_interval_seconds == 3.0
    assert settings.max_upload_bytes == 50 * 1024 * 1024
    assert settings.allowed_audio_types == [
        "audio/mpeg",
        "audio/wav",
        "audio/mp4",
        "audio/x-m4a",
    ]
    assert settings.request_timeout is None
    assert settings.api_base_url.endswith("/api/")


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("api_base_url", "http://localhost:8000/api/")
    monkeypatch.setenv("REQUEST_TIMEOUT", "15")

    settings = Settings(_env_file=None)

    assert settings.poll_interval_seconds == 0.5
    assert settings.api_base_url == "http://localhost:8000/api/"
    assert settings.request_timeout == 15.0


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
