"""Tests for configuration loading."""

from datetime import timedelta

import pytest

from session_handoff.config import HandoffSettings, settings_from_env

ENV_VARS = [
    "HANDOFF_ISSUER_ORIGIN",
    "HANDOFF_VALIDATE_PATH",
    "HANDOFF_VALIDATOR_TIMEOUT",
    "HANDOFF_TOKEN_TTL",
    "HANDOFF_SESSION_TTL",
    "HANDOFF_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = settings_from_env()

    assert settings.validate_url == "http://localhost:7001/api/receiver/validate-token"
    assert settings.token_ttl == timedelta(minutes=5)
    assert settings.session_ttl == timedelta(minutes=20)
    assert settings.validator_timeout_seconds == 10.0
    assert settings.log_level == "INFO"


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("HANDOFF_ISSUER_ORIGIN", "https://issuer.example.com/")
    monkeypatch.setenv("HANDOFF_VALIDATE_PATH", "/api/app2/validate-ott")
    monkeypatch.setenv("HANDOFF_VALIDATOR_TIMEOUT", "2.5")
    monkeypatch.setenv("HANDOFF_TOKEN_TTL", "60")
    monkeypatch.setenv("HANDOFF_SESSION_TTL", "600")
    monkeypatch.setenv("HANDOFF_LOG_LEVEL", "debug")

    settings = settings_from_env()

    assert settings.validate_url == "https://issuer.example.com/api/app2/validate-ott"
    assert settings.validator_timeout_seconds == 2.5
    assert settings.token_ttl == timedelta(seconds=60)
    assert settings.session_ttl == timedelta(seconds=600)
    assert settings.log_level == "DEBUG"


def test_invalid_number_raises(monkeypatch):
    monkeypatch.setenv("HANDOFF_TOKEN_TTL", "five minutes")

    with pytest.raises(ValueError):
        settings_from_env()


def test_validate_url_joins_slashes():
    settings = HandoffSettings(issuer_origin="http://a", validate_path="v")
    assert settings.validate_url == "http://a/v"
