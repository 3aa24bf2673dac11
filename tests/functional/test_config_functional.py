"""Functional tests for configuration loading and precedence."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from grantforms.config import load_config
from grantforms.logging_setup import logging_config

ENV_KEYS = (
    "APP_ENVIRONMENT",
    "DATABASE_URL",
    "BANK_CHECK_ENABLED",
    "BANK_CHECK_URL",
    "BANK_CHECK_API_KEY",
    "BANK_CHECK_TIMEOUT_SECONDS",
    "UPLOAD_MAX_BYTES",
    "UPLOAD_ROOT",
    "FORMS_ENABLED",
    "PREFLIGHT_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults() -> None:
    config = load_config()
    assert config.environment == "development"
    assert config.database.url == "sqlite+pysqlite:///:memory:"
    assert config.bank_check.enabled is False
    assert config.uploads.root is None
    assert config.forms.enabled == ()
    assert config.forms.preflight_timeout_seconds == 10.0


def test_json_file_is_the_base(isolated) -> None:
    (isolated / "grantforms_config.json").write_text(
        json.dumps(
            {
                "environment": "staging",
                "bank_check": {"enabled": True, "url": "https://bank.test/verify", "timeout_seconds": 2},
            }
        ),
        encoding="utf-8",
    )
    config = load_config()
    assert config.environment == "staging"
    assert config.bank_check.enabled is True
    assert config.bank_check.url == "https://bank.test/verify"
    assert config.bank_check.timeout_seconds == 2.0


def test_text_files_override_json_and_env_overrides_both(isolated, monkeypatch) -> None:
    (isolated / "grantforms_config.json").write_text(json.dumps({"environment": "staging"}), encoding="utf-8")
    (isolated / "config").mkdir()
    (isolated / "config" / "app.environment").write_text("production\n", encoding="utf-8")
    assert load_config().environment == "production"

    monkeypatch.setenv("APP_ENVIRONMENT", "test")
    monkeypatch.setenv("FORMS_ENABLED", "under-10k, demo-grant")
    monkeypatch.setenv("UPLOAD_MAX_BYTES", "1024")
    config = load_config()
    assert config.environment == "test"
    assert config.forms.enabled == ("under-10k", "demo-grant")
    assert config.uploads.max_bytes == 1024


def test_invalid_values_are_rejected(monkeypatch) -> None:
    monkeypatch.setenv("APP_ENVIRONMENT", "moon")
    with pytest.raises(ValidationError):
        load_config()

    monkeypatch.setenv("APP_ENVIRONMENT", "test")
    monkeypatch.setenv("BANK_CHECK_URL", "ftp://bank.test")
    with pytest.raises(ValidationError):
        load_config()

    monkeypatch.delenv("BANK_CHECK_URL")
    monkeypatch.setenv("PREFLIGHT_TIMEOUT_SECONDS", "0")
    with pytest.raises(ValidationError):
        load_config()


def test_logging_level_follows_environment() -> None:
    development = logging_config("development")
    assert development["loggers"]["grantforms"]["level"] == "DEBUG"
    assert development["handlers"]["console"]["level"] == "DEBUG"
    assert "[development]" in development["formatters"]["default"]["format"]

    production = logging_config("production")
    assert production["loggers"]["grantforms"]["level"] == "INFO"
    assert production["loggers"]["sqlalchemy.engine"]["level"] == "WARNING"
