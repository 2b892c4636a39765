"""Unit tests for core/config.py -- SECRET_KEY policy and defaults."""

import pytest
from pydantic import ValidationError

from core.config import MIN_SECRET_KEY_LENGTH, Settings, get_settings


@pytest.fixture
def clean_env(monkeypatch):
    for var in ("DEBUG", "SECRET_KEY", "LOG_LEVEL", "SECURE_COOKIES"):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_debug_mode_generates_signing_key(clean_env):
    clean_env.setenv("DEBUG", "true")
    settings = Settings(_env_file=None)
    assert len(settings.secret_key) >= MIN_SECRET_KEY_LENGTH


def test_generated_keys_differ_between_instances(clean_env):
    clean_env.setenv("DEBUG", "true")
    assert Settings(_env_file=None).secret_key != Settings(_env_file=None).secret_key


def test_production_without_key_refuses_to_start(clean_env):
    with pytest.raises(ValidationError, match="SECRET_KEY is required when DEBUG is off"):
        Settings(_env_file=None)


def test_short_key_rejected_even_in_debug(clean_env):
    clean_env.setenv("DEBUG", "true")
    clean_env.setenv("SECRET_KEY", "too-short")
    with pytest.raises(ValidationError, match="at least 64 characters"):
        Settings(_env_file=None)


def test_configured_key_is_used_verbatim(clean_env):
    key = "k" * MIN_SECRET_KEY_LENGTH
    clean_env.setenv("SECRET_KEY", key)
    settings = Settings(_env_file=None)
    assert settings.secret_key == key
    assert settings.debug is False


def test_defaults(clean_env):
    clean_env.setenv("DEBUG", "true")
    settings = Settings(_env_file=None)
    assert settings.log_level == "INFO"
    assert settings.secure_cookies is False
    assert settings.auth_db_url.startswith("sqlite:///")
    assert settings.sales_db_url.startswith("sqlite:///")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
