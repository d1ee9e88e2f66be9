"""Tests for environment-driven settings."""

from reporthub.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)
    assert settings.database_url == "sqlite:///./reporthub.db"
    assert settings.otp_ttl_minutes == 10
    assert settings.tracking_idle_ticks == 3


def test_reads_typed_values_from_environment(monkeypatch):
    monkeypatch.setenv("SQL_ECHO", "true")
    monkeypatch.setenv("TRACKING_TICK_SECONDS", "2.5")
    monkeypatch.setenv("TRACKING_IDLE_TICKS", "5")
    monkeypatch.setenv("CORS_ORIGINS", '["https://app.example", "http://localhost:5173"]')
    monkeypatch.setenv("WORKFLOW_SECRET", "s3cret")

    settings = Settings(_env_file=None)

    assert settings.sql_echo is True
    assert settings.tracking_tick_seconds == 2.5
    assert settings.tracking_idle_ticks == 5
    assert settings.cors_origins == ["https://app.example", "http://localhost:5173"]
    assert settings.workflow_secret == "s3cret"
