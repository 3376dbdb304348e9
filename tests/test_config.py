"""Tests for environment-driven settings."""
from routine_sheets_api.config import Settings


def test_defaults(monkeypatch):
    for name in ("ENVIRONMENT", "DATABASE_URL", "MAX_UPLOAD_BYTES", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.ENVIRONMENT == "development"
    assert settings.DATABASE_URL == "sqlite:///./routines.db"
    assert settings.MAX_UPLOAD_BYTES == 10 * 1024 * 1024
    assert settings.CORS_ORIGINS == ["http://localhost:3000", "http://localhost:3001"]
    assert settings.LOG_LEVEL == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "2048")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings()

    assert settings.ENVIRONMENT == "production"
    assert settings.MAX_UPLOAD_BYTES == 2048
    assert settings.CORS_ORIGINS == ["https://a.example", "https://b.example"]
    assert settings.LOG_LEVEL == "DEBUG"


def test_bad_values_fall_back(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "qa")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "ten megs")

    settings = Settings()

    assert settings.ENVIRONMENT == "development"
    assert settings.MAX_UPLOAD_BYTES == 10 * 1024 * 1024
